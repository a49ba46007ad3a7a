"""
SQLAlchemy models for the CMS users collection.
"""
import json
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # Provider subject; unique so one local user per external identity. NULL for local-password-only users.
    sub: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True, index=True)
    # One account per email address; NULLs do not collide
    email: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True, index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    roles: Mapped[str] = mapped_column(Text, nullable=False, default='["user"]')  # stored as JSON string
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now, onupdate=_utc_now)

    def get_roles_list(self) -> list[str]:
        return json.loads(self.roles)

    def set_roles_list(self, roles: list[str]) -> None:
        self.roles = json.dumps(list(roles))
