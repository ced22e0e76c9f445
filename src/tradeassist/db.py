from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import (
    DateTime,
    Integer,
    String,
    create_engine,
    func,
    select,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker

from .config import get_settings

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    pass


class Signup(Base):
    __tablename__ = "signups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    business: Mapped[str | None] = mapped_column(String, nullable=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    phone: Mapped[str] = mapped_column(String(12), nullable=False)  # canonical +61XXXXXXXXX
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )


class SignupStore:
    """Insert-only access to the signups table, plus a count for the landing page."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def insert(
        self,
        *,
        phone: str,
        name: str | None = None,
        business: str | None = None,
        email: str | None = None,
    ) -> Signup:
        signup = Signup(name=name, business=business, email=email, phone=phone)
        self.db.add(signup)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(signup)
        logger.info("Stored signup #%s for %s", signup.id, phone)
        return signup

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(Signup)) or 0


# --- Engine & Session factory ---

settings = get_settings()

engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def init_db() -> None:
    """Create tables if they don't exist."""
    Base.metadata.create_all(bind=engine)
