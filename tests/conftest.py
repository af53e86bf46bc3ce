# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from quluub.core.security import create_access_token, hash_password
from quluub.db.session import Base
from quluub.db.session import get_db as app_get_session
from quluub.main import app as fastapi_app
from quluub.models import Gender, Relationship, RelationshipStatus, User
from quluub.services import RelationshipService

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "correct-horse-battery"

_USERNAME_COUNTER = count(1)
# Hashing is deliberately slow; every fixture user shares one hash.
_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite manages transactions itself and breaks SAVEPOINT unless told not to.
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    """Session whose commits land in a savepoint of a rolled-back outer transaction."""
    connection = engine.connect()
    transaction = connection.begin()
    TestingSession = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        join_transaction_mode="create_savepoint",
    )
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if something escaped the rollback.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def user_password() -> str:
    """Plaintext password of every user created through ``make_user``."""
    return TEST_PASSWORD


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that persists a user with the shared test password."""

    def _make_user(
        username: str | None = None,
        *,
        gender: Gender = Gender.MALE,
        **fields: object,
    ) -> User:
        username = username or f"member{next(_USERNAME_COUNTER)}"
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash=_PASSWORD_HASH,
            fname=username.capitalize(),
            lname="Test",
            gender=gender,
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def alice(make_user: Callable[..., User]) -> User:
    return make_user("alice", gender=Gender.FEMALE, country="UK")


@pytest.fixture()
def bob(make_user: Callable[..., User]) -> User:
    return make_user("bob", gender=Gender.MALE, country="UK")


@pytest.fixture()
def carol(make_user: Callable[..., User]) -> User:
    return make_user("carol", gender=Gender.FEMALE, country="Nigeria")


def _bearer(user: User) -> dict[str, str]:
    """Return authorization headers for ``user``."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def alice_headers(alice: User) -> dict[str, str]:
    return _bearer(alice)


@pytest.fixture()
def bob_headers(bob: User) -> dict[str, str]:
    return _bearer(bob)


@pytest.fixture()
def carol_headers(carol: User) -> dict[str, str]:
    return _bearer(carol)


@pytest.fixture()
def relationship_service(db_session: Session) -> RelationshipService:
    return RelationshipService(db_session)


@pytest.fixture()
def matched_pair(
    relationship_service: RelationshipService, alice: User, bob: User
) -> Relationship:
    """Alice requests bob and bob accepts."""
    relationship = relationship_service.send_request(alice.id, bob.id)
    matched = relationship_service.respond_to_request(bob.id, relationship.id, "matched")
    assert matched.status is RelationshipStatus.MATCHED
    return matched
