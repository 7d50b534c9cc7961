"""
Account model — staff login records in the credential store.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from restopos.db.base import Base


class Account(Base):
    __tablename__ = "user"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    # UNIQUE at the store level; duplicate inserts surface as IntegrityError.
    userid: str = Column(String(100), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    # bcrypt hash ("$2b$...") or a legacy plain-text value
    password: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    role: str = Column(String(20), nullable=False, default="staff")  # type: ignore[assignment]  # owner | chef | staff
    name: str | None = Column("Name", String(200), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    access_time: datetime | None = Column(DateTime(timezone=True), nullable=True)  # type: ignore[assignment]
