"""
Message Board API — application entry point.
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from fastapi import FastAPI

from api.middleware import register_middleware
from api.routes import router as api_router
from auth.jwt_handler import get_jwt_handler
from auth.routes import router as auth_router
from config.settings import config
from database.seed import seed_sample_data
from database.session import async_session_factory, init_models

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx", "aiosqlite", "sqlalchemy.engine"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="Message Board API",
        version="1.0.0",
        description="Users, threads and messages with JWT authentication.",
    )

    register_middleware(app)

    # Routes
    app.include_router(auth_router, prefix="/api/auth")
    app.include_router(api_router, prefix="/api")

    @app.on_event("startup")
    async def on_startup():
        # Fails fast on a bad JWT configuration instead of on first login.
        handler = get_jwt_handler()
        logger.info(
            "Tokens: issuer=%s audience=%s lifetime=%s",
            handler.issuer, handler.audience, handler.expiry,
        )

        await init_models()

        if config.seed_sample_data:
            async with async_session_factory() as session:
                if await seed_sample_data(session):
                    await session.commit()

        logger.info("Application ready to accept requests.")

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
