"""
Identity & Access Service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from api.middleware import register_exception_handlers, register_middleware
from api.routes import router as users_router
from auth.guard import AccessGuard
from auth.jwt import TokenCodec
from auth.password import CredentialVerifier
from auth.routes import router as auth_router
from auth.service import AuthService
from config.settings import Settings, load_settings
from core.user_lifecycle import UserLifecycleManager
from database.session import build_engine, build_session_factory, init_schema
from database.user_store import SqlUserStore, UserStore

logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
        stream=sys.stdout,
    )
    for _noisy in ("sqlalchemy.engine", "httpx", "httpcore", "aiosqlite", "asyncio"):
        logging.getLogger(_noisy).setLevel(logging.WARNING)


def create_app(settings: Optional[Settings] = None, store: Optional[UserStore] = None) -> FastAPI:
    """
    Build the ASGI app. ``settings`` defaults to the environment; ``store``
    defaults to a SQL store on ``settings.database_url``.
    """
    settings = settings or load_settings()

    engine = None
    if store is None:
        engine = build_engine(settings.database_url, echo=settings.database_echo)
        store = SqlUserStore(build_session_factory(engine))

    codec = TokenCodec(settings.jwt_secret, settings.jwt_expiry_seconds)
    verifier = CredentialVerifier(rounds=settings.bcrypt_rounds)

    app = FastAPI(
        title="Identity & Access Service",
        version="1.0.0",
        description="Registration, login and role-gated user management.",
    )
    app.state.settings = settings
    app.state.store = store
    app.state.auth_service = AuthService(store, verifier, codec)
    app.state.access_guard = AccessGuard(codec, store)
    app.state.lifecycle = UserLifecycleManager(store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_middleware(app)
    register_exception_handlers(app)

    app.include_router(auth_router)
    app.include_router(users_router)

    @app.get("/")
    async def health() -> dict:
        return {"status": "ok"}

    if engine is not None:
        @app.on_event("startup")
        async def on_startup():
            await init_schema(engine)
            logger.info("Application ready to accept requests.")

        @app.on_event("shutdown")
        async def on_shutdown():
            await engine.dispose()

    return app


def main() -> None:
    try:
        settings = load_settings()
    except ValidationError as exc:
        configure_logging()
        logger.critical("Refusing to start, invalid configuration:\n%s", exc)
        raise SystemExit(1) from exc

    configure_logging(settings.debug)
    logger.info("Starting identity service on %s:%s", settings.host, settings.port)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
