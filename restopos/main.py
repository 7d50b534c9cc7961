"""
RestoPOS — application entry point.

This is the **only** file that assembles the app. All business logic
lives in the `api/`, `services/`, `models/`, and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select

from restopos.api.api import api_router
from restopos.api.endpoints.auth import limiter
from restopos.core.config import settings
from restopos.core.exceptions import register_exception_handlers
from restopos.core.permissions import Role
from restopos.core.security import get_password_hash
from restopos.db.base import Base
from restopos.db.session import async_session_factory, engine
from restopos.models.account import Account
from restopos.web.pages import router as pages_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


async def _seed_first_owner() -> None:
    """Create the configured owner account if it does not exist yet."""
    if async_session_factory is None or not settings.FIRST_OWNER_USERID:
        return
    if settings.FIRST_OWNER_PASSWORD is None:
        logger.warning("FIRST_OWNER_USERID set without FIRST_OWNER_PASSWORD; not seeding")
        return

    async with async_session_factory() as session:
        result = await session.execute(
            select(Account).where(Account.userid == settings.FIRST_OWNER_USERID)
        )
        if result.scalar_one_or_none() is None:
            session.add(
                Account(
                    userid=settings.FIRST_OWNER_USERID,
                    password=get_password_hash(settings.FIRST_OWNER_PASSWORD.get_secret_value()),
                    role=Role.OWNER.value,
                    name=settings.FIRST_OWNER_NAME,
                )
            )
            await session.commit()
            logger.info(
                "First owner created: %s (password: <redacted>)",
                settings.FIRST_OWNER_USERID,
            )


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    if engine is None:
        logger.critical("Starting without a credential store; logins and account admin will fail")
    else:
        if settings.CREATE_TABLES_ON_STARTUP:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables initialised")
        await _seed_first_owner()

    logger.info("🚀 %s v%s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    if engine is not None:
        await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.PROJECT_NAME,
        description="Restaurant point-of-sale: staff login, roles and order QR codes",
        version=settings.VERSION,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting (login)
    application.state.limiter = limiter

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    # JSON API
    application.include_router(api_router, prefix=settings.API_PREFIX)

    # Staff pages (route-guarded HTML)
    application.include_router(pages_router)

    return application


app = create_app()
