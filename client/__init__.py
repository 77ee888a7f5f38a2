"""
client — Python client for the Message Board API.

Provides:
  • ``ApiClient`` — httpx transport with bearer token + 401 event
  • ``SessionManager`` — auth state, persistence, auto-logout
  • ``BoardState`` — loaded messages and sort order
  • ``MemoryStorage`` / ``JsonFileStorage`` — durable session storage
"""

from client.api_client import ApiClient, ApiError, UnauthorizedError
from client.board import BoardState
from client.notifications import Notifications
from client.session import SessionManager
from client.storage import JsonFileStorage, MemoryStorage

__all__ = [
    "ApiClient",
    "ApiError",
    "UnauthorizedError",
    "BoardState",
    "Notifications",
    "SessionManager",
    "JsonFileStorage",
    "MemoryStorage",
]
