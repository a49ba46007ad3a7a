"""
Database engine and session factory for the CMS users collection. SQLite by default;
any SQLAlchemy URL works (e.g. postgresql+psycopg://...).
"""
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from cms_server.config import DATABASE_URL
from cms_server.models import Base


def _engine_options(url: str) -> dict[str, Any]:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return {}
    # Requests run on worker threads, not the thread that opened the connection
    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if parsed.database in (None, "", ":memory:"):
        # One shared connection, otherwise each checkout gets its own empty database
        options["poolclass"] = StaticPool
    return options


engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=False)


def init_db() -> None:
    """Create the users table if it does not exist."""
    Base.metadata.create_all(bind=engine)
