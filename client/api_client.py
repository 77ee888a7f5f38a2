"""
HTTP client for the Message Board API.

Wraps ``httpx.AsyncClient``.  Holds the bearer token for outgoing
requests and publishes an "unauthorized" event: every registered
handler runs, in registration order, whenever any response comes back
401, before ``UnauthorizedError`` is raised to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:5285"

UnauthorizedHandler = Callable[[], None]


class ApiError(Exception):
    """Non-success response or transport failure."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        self.status_code = status_code
        super().__init__(message if status_code is None else f"HTTP {status_code}: {message}")


class UnauthorizedError(ApiError):
    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message, status_code=401)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        detail = body.get("message") or body.get("detail")
        if isinstance(detail, str):
            return detail
        if detail is not None:
            return str(detail)
    return response.reason_phrase


class ApiClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
    ):
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)
        self._token: Optional[str] = None
        self._unauthorized_handlers: List[UnauthorizedHandler] = []

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ── Token & events ──────────────────────────────────────────────────

    @property
    def auth_token(self) -> Optional[str]:
        return self._token

    def set_auth_token(self, token: str) -> None:
        self._token = token

    def clear_auth_token(self) -> None:
        self._token = None

    def add_unauthorized_handler(self, handler: UnauthorizedHandler) -> Callable[[], None]:
        """Register ``handler`` for 401 responses; returns an unsubscribe function."""
        self._unauthorized_handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._unauthorized_handlers:
                self._unauthorized_handlers.remove(handler)

        return unsubscribe

    def _emit_unauthorized(self) -> None:
        for handler in list(self._unauthorized_handlers):
            try:
                handler()
            except Exception:
                logger.exception("Unauthorized handler %r failed", handler)

    # ── Transport ───────────────────────────────────────────────────────

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers = {}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        logger.debug("API Request: %s %s", method, path)
        try:
            response = await self._http.request(
                method, path, json=json, params=params, headers=headers,
            )
        except httpx.HTTPError as exc:
            logger.error("API Error for %s: %s", path, exc)
            raise ApiError(f"Request failed: {exc}") from exc

        if response.status_code == 401:
            message = _error_message(response)
            logger.warning("Unauthorized response from %s %s", method, path)
            self._emit_unauthorized()
            raise UnauthorizedError(message)

        if response.is_error:
            raise ApiError(_error_message(response), status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # ── Auth ────────────────────────────────────────────────────────────

    async def register(self, username: str, email: str, password: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/api/auth/register",
            json={"username": username, "email": email, "password": password},
        )

    async def login(self, username: str, password: str) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/api/auth/login",
            json={"username": username, "password": password},
        )

    async def get_current_user(self) -> Dict[str, Any]:
        return await self._request("GET", "/api/auth/me")

    # ── Board ───────────────────────────────────────────────────────────

    async def test_connection(self) -> Dict[str, Any]:
        return await self._request("GET", "/api/health")

    async def get_threads(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/api/threads")

    async def get_thread(self, thread_id: int) -> Dict[str, Any]:
        return await self._request("GET", f"/api/threads/{thread_id}")

    async def create_thread(self, title: str) -> Dict[str, Any]:
        return await self._request("POST", "/api/threads", json={"title": title})

    async def get_messages(self, thread_id: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {"threadId": thread_id} if thread_id is not None else None
        return await self._request("GET", "/api/messages", params=params)

    async def create_message(self, content: str, thread_id: int) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/api/messages",
            json={"content": content, "threadId": thread_id},
        )

    async def delete_message(self, message_id: int) -> None:
        await self._request("DELETE", f"/api/messages/{message_id}")
