"""
Async SQLAlchemy engine & session factory for the credential store.

When the store is not configured the engine is ``None`` and the app runs
in degraded mode (see ``restopos.api.deps.get_db``).
"""

from __future__ import annotations

import logging

from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from restopos.core.config import settings

logger = logging.getLogger(__name__)


def build_database_url(raw_url: str, api_key: str | None) -> URL:
    """Parse the store URL, using the API key as password if none is inline."""
    url = make_url(raw_url)
    if api_key and url.host and not url.password:
        url = url.set(password=api_key)
    return url


def _create_engine() -> AsyncEngine | None:
    if settings.DATABASE_URL is None:
        return None

    api_key = (
        settings.DATABASE_API_KEY.get_secret_value() if settings.DATABASE_API_KEY else None
    )
    url = build_database_url(settings.DATABASE_URL, api_key)

    engine_args: dict = {
        "echo": False,
        "pool_pre_ping": True,
    }
    if url.get_backend_name() == "postgresql":
        engine_args.update(
            {
                "pool_size": 10,
                "max_overflow": 5,
                "pool_recycle": 300,
            }
        )
    logger.info("Credential store: %s", url.render_as_string(hide_password=True))
    return create_async_engine(url, **engine_args)


engine = _create_engine()

async_session_factory = (
    async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    if engine is not None
    else None
)

