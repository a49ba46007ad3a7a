"""
User store: the find/create/update/find_by_id contract the login flow needs from the users collection.
SqlUserStore implements it on SQLAlchemy; one handle per process, created lazily (get_user_store).
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Protocol

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from cms_server.database import SessionLocal, engine, init_db
from cms_server.errors import DuplicateEmailError, DuplicateSubjectError, StoreError
from cms_server.models import User

logger = logging.getLogger(__name__)

# Fields callers may query on, write on create, and write on update
_QUERY_FIELDS = {"id", "sub", "email"}
_CREATE_FIELDS = {"sub", "email", "name", "roles", "password_hash"}
_UPDATE_FIELDS = {"name", "roles", "password_hash"}


@dataclass
class UserRecord:
    id: int
    sub: str | None
    email: str | None
    name: str | None
    roles: list[str] = field(default_factory=lambda: ["user"])
    password_hash: str | None = None

    @classmethod
    def from_model(cls, user: User) -> "UserRecord":
        return cls(
            id=user.id,
            sub=user.sub,
            email=user.email,
            name=user.name,
            roles=user.get_roles_list(),
            password_hash=user.password_hash,
        )

    def public_dict(self) -> dict:
        """Representation safe to send to the browser (no password hash)."""
        return {"id": self.id, "sub": self.sub, "email": self.email, "name": self.name, "roles": list(self.roles)}


@dataclass
class FindResult:
    docs: list[UserRecord]


class UserStore(Protocol):
    def find(self, where: dict[str, Any], limit: int = 1) -> FindResult: ...

    def create(self, data: dict[str, Any]) -> UserRecord: ...

    def update(self, user_id: int, data: dict[str, Any]) -> UserRecord: ...

    def find_by_id(self, user_id: int) -> UserRecord | None: ...


def _check_fields(data: dict[str, Any], allowed: set[str], op: str) -> None:
    unknown = set(data) - allowed
    if unknown:
        raise StoreError(f"{op}: unsupported field(s): {', '.join(sorted(unknown))}")


class SqlUserStore:
    """UserStore over a SQLAlchemy sessionmaker. Each call uses its own short session."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    def find(self, where: dict[str, Any], limit: int = 1) -> FindResult:
        _check_fields(where, _QUERY_FIELDS, "find")
        db = self._session()
        try:
            q = db.query(User)
            for key, value in where.items():
                q = q.filter(getattr(User, key) == value)
            rows = q.order_by(User.id).limit(limit).all()
            return FindResult(docs=[UserRecord.from_model(u) for u in rows])
        except SQLAlchemyError as e:
            raise StoreError(f"find failed: {e}") from e
        finally:
            db.close()

    def create(self, data: dict[str, Any]) -> UserRecord:
        _check_fields(data, _CREATE_FIELDS, "create")
        user = User(
            sub=data.get("sub"),
            email=data.get("email"),
            name=data.get("name"),
            password_hash=data.get("password_hash"),
        )
        user.set_roles_list(data.get("roles") or ["user"])
        db = self._session()
        try:
            db.add(user)
            db.commit()
            db.refresh(user)
            return UserRecord.from_model(user)
        except IntegrityError as e:
            db.rollback()
            sub, email = data.get("sub"), data.get("email")
            if sub is not None and db.query(User.id).filter(User.sub == sub).first() is not None:
                raise DuplicateSubjectError(f"user with sub={sub} already exists") from e
            if email is not None and db.query(User.id).filter(User.email == email).first() is not None:
                raise DuplicateEmailError(f"user with email={email} already exists") from e
            raise StoreError(f"create failed: {e}") from e
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"create failed: {e}") from e
        finally:
            db.close()

    def update(self, user_id: int, data: dict[str, Any]) -> UserRecord:
        _check_fields(data, _UPDATE_FIELDS, "update")
        db = self._session()
        try:
            user = db.query(User).filter(User.id == user_id).first()
            if user is None:
                raise StoreError(f"update failed: no user with id={user_id}")
            if "name" in data:
                user.name = data["name"]
            if "roles" in data:
                user.set_roles_list(data["roles"])
            if "password_hash" in data:
                user.password_hash = data["password_hash"]
            db.commit()
            db.refresh(user)
            return UserRecord.from_model(user)
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"update failed: {e}") from e
        finally:
            db.close()

    def find_by_id(self, user_id: int) -> UserRecord | None:
        db = self._session()
        try:
            user = db.query(User).filter(User.id == user_id).first()
            return UserRecord.from_model(user) if user else None
        except SQLAlchemyError as e:
            raise StoreError(f"find_by_id failed: {e}") from e
        finally:
            db.close()


# Process-wide handle (created on first use, reused by every request)
_store: SqlUserStore | None = None
_store_lock = threading.Lock()


def get_user_store() -> SqlUserStore:
    """Return the shared store, creating tables and the handle once. Safe under concurrent first requests."""
    global _store
    if _store is not None:
        return _store
    with _store_lock:
        if _store is None:
            init_db()
            _store = SqlUserStore(SessionLocal)
            logger.info("User store initialized")
    return _store


def close_user_store() -> None:
    """Drop the shared handle and release pooled connections. Next get_user_store() re-initializes."""
    global _store
    with _store_lock:
        if _store is None:
            return
        engine.dispose()
        _store = None
        logger.info("User store closed")
