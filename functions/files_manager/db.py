"""
Document store abstraction: a SQLAlchemy-backed client and an in-memory
test implementation.

Two logical collections are kept, ``users`` and ``files``. Liveness is the
outcome of the last connection attempt or query, not a live ping.
"""

from __future__ import annotations

import hashlib
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Protocol, TypeVar

from sqlalchemy import JSON, Column, Float, String, create_engine, func, select
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DuplicateKeyError(Exception):
    """Raised when inserting a user whose email already exists."""


class StoreConnectionError(ConnectionError):
    """Raised when the document store is unreachable."""


def hash_password(password: str) -> str:
    return hashlib.sha1(password.encode("utf-8")).hexdigest()


def _is_object_id(value: str) -> bool:
    try:
        uuid.UUID(hex=value)
    except (TypeError, ValueError, AttributeError):
        return False
    return True


class DbClient(Protocol):
    """Interface for document store access."""

    def connect(self) -> bool:
        ...

    def is_alive(self) -> bool:
        ...

    def count_users(self) -> int:
        ...

    def count_files(self) -> int:
        ...

    def find_user_by_email(self, email: str) -> Optional["UserRecord"]:
        ...

    def find_user_by_id(self, user_id: str) -> Optional["UserRecord"]:
        ...

    def add_user(self, email: str, password: str) -> dict:
        ...

    def add_file(self, document: dict, user_id: str | None = None) -> str:
        ...

    def find_file_by_id(self, file_id: str) -> Optional["FileRecord"]:
        ...

    def close(self) -> None:
        ...


@dataclass
class UserRecord:
    id: str
    email: str
    password: str
    created_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {"id": self.id, "email": self.email}


@dataclass
class FileRecord:
    id: str
    user_id: Optional[str]
    document: dict
    created_at: float = field(default_factory=lambda: time.time())

    def as_dict(self) -> dict:
        return {"id": self.id, "user_id": self.user_id, **self.document}


class InMemoryDbClient:
    """Simple in-memory document store for development and tests."""

    def __init__(self, alive: bool = True):
        self.users: Dict[str, UserRecord] = {}
        self.files: Dict[str, FileRecord] = {}
        self.alive = alive

    def connect(self) -> bool:
        self.alive = True
        return True

    def is_alive(self) -> bool:
        return self.alive

    def _require_alive(self) -> None:
        if not self.alive:
            raise StoreConnectionError("in-memory store is marked down")

    def count_users(self) -> int:
        self._require_alive()
        return len(self.users)

    def count_files(self) -> int:
        self._require_alive()
        return len(self.files)

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        self._require_alive()
        for user in self.users.values():
            if user.email == email:
                return user
        return None

    def find_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        self._require_alive()
        return self.users.get(user_id)

    def add_user(self, email: str, password: str) -> dict:
        self._require_alive()
        if self.find_user_by_email(email) is not None:
            raise DuplicateKeyError(f"email already exists: {email}")
        record = UserRecord(
            id=uuid.uuid4().hex, email=email, password=hash_password(password)
        )
        self.users[record.id] = record
        return record.as_dict()

    def add_file(self, document: dict, user_id: str | None = None) -> str:
        self._require_alive()
        record = FileRecord(id=uuid.uuid4().hex, user_id=user_id, document=dict(document))
        self.files[record.id] = record
        return record.id

    def find_file_by_id(self, file_id: str) -> Optional[FileRecord]:
        self._require_alive()
        return self.files.get(file_id)

    def reset(self) -> None:
        """Clear all stored data (useful in tests)."""
        self.users.clear()
        self.files.clear()

    def close(self) -> None:
        self.alive = False


Base = declarative_base()


class UserRow(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    email = Column(String, nullable=False, unique=True, index=True)
    password = Column(String, nullable=False)
    created_at = Column(Float, nullable=False)


class FileRow(Base):
    __tablename__ = "files"

    id = Column(String, primary_key=True)
    user_id = Column(String, nullable=True, index=True)
    document = Column(JSON, nullable=False)
    created_at = Column(Float, nullable=False)


class SqlDbClient:
    """
    SQLAlchemy-backed implementation. Accepts any SQLAlchemy URL (e.g., Postgres or SQLite for tests).

    The engine is created eagerly but nothing touches the server until
    ``connect()`` runs, which the caller may do in the background while a
    ReadinessPoller watches ``is_alive()``. Once connected, a failing query
    marks the store down and the next successful one marks it up again;
    the pool's pre-ping takes care of reconnecting.
    """

    def __init__(self, database_url: str):
        if not database_url:
            raise ValueError("database_url is required for SqlDbClient")
        self.database_url = database_url
        self.engine = create_engine(
            database_url,
            future=True,
            pool_pre_ping=True,
            pool_recycle=1800,
        )
        self.Session = sessionmaker(
            bind=self.engine, class_=Session, expire_on_commit=False, future=True
        )
        self._connected = False
        self._schema_ready = False

    def connect(self) -> bool:
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            logger.warning("Document store connection failed: %s", exc)
            self._connected = False
        else:
            logger.info("Connected to document store %s", self.engine.url.database)
            self._schema_ready = True
            self._connected = True
        return self._connected

    def is_alive(self) -> bool:
        return self._connected

    def _execute(self, work: Callable[[Session], T]) -> T:
        """Run ``work`` in a fresh session, translating driver errors."""
        if not self._schema_ready:
            raise StoreConnectionError("document store is not connected")
        with self.Session() as session:
            try:
                result = work(session)
            except DBAPIError as exc:
                logger.warning("Document store error: %s", exc)
                self._connected = False
                raise StoreConnectionError(str(exc)) from exc
        self._connected = True
        return result

    def _count(self, row_cls) -> int:
        return self._execute(
            lambda session: session.execute(
                select(func.count()).select_from(row_cls)
            ).scalar_one()
        )

    def count_users(self) -> int:
        return self._count(UserRow)

    def count_files(self) -> int:
        return self._count(FileRow)

    @staticmethod
    def _to_user_record(row: UserRow) -> UserRecord:
        return UserRecord(
            id=row.id,
            email=row.email,
            password=row.password,
            created_at=row.created_at,
        )

    def find_user_by_email(self, email: str) -> Optional[UserRecord]:
        row = self._execute(
            lambda session: session.execute(
                select(UserRow).where(UserRow.email == email)
            ).scalar_one_or_none()
        )
        return self._to_user_record(row) if row else None

    def find_user_by_id(self, user_id: str) -> Optional[UserRecord]:
        if not _is_object_id(user_id):
            return None
        row = self._execute(lambda session: session.get(UserRow, user_id))
        return self._to_user_record(row) if row else None

    def add_user(self, email: str, password: str) -> dict:
        row = UserRow(
            id=uuid.uuid4().hex,
            email=email,
            password=hash_password(password),
            created_at=time.time(),
        )

        def insert(session: Session) -> None:
            session.add(row)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateKeyError(f"email already exists: {email}") from exc

        self._execute(insert)
        return {"id": row.id, "email": row.email}

    def add_file(self, document: dict, user_id: str | None = None) -> str:
        row = FileRow(
            id=uuid.uuid4().hex,
            user_id=user_id,
            document=document,
            created_at=time.time(),
        )

        def insert(session: Session) -> None:
            session.add(row)
            session.commit()

        self._execute(insert)
        return row.id

    def find_file_by_id(self, file_id: str) -> Optional[FileRecord]:
        if not _is_object_id(file_id):
            return None
        row = self._execute(lambda session: session.get(FileRow, file_id))
        if not row:
            return None
        return FileRecord(
            id=row.id,
            user_id=row.user_id,
            document=row.document,
            created_at=row.created_at,
        )

    def close(self) -> None:
        self.engine.dispose()
        self._connected = False
