# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from threadline.api.v1.dependencies import get_clock
from threadline.core.security import create_access_token
from threadline.db.session import Base
from threadline.db.session import get_db as app_get_session
from threadline.main import app as fastapi_app
from threadline.models import Comment, Community, CommunityMembership, Post, PostVote, User
from threadline.models.community import ROLE_ADMIN
from threadline.services.counters import recount_community, recount_post_comments
from threadline.services.votes import POST_VOTES, recount_and_persist

TEST_DB_URL = "sqlite://"
NOW = datetime(2026, 3, 2, 12, 0, tzinfo=UTC)

_VOTER_COUNTER = count(1)


class FrozenClock:
    """Clock whose time only moves when a test says so."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    # Commits and rollbacks issued by services only touch savepoints inside
    # the outer transaction, which is discarded after the test.
    SessionLocal = sessionmaker(
        bind=connection,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()

        if transaction.is_active:
            transaction.rollback()
        connection.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock(NOW)


@pytest.fixture(autouse=True)
def override_dependencies(app: FastAPI, db_session: Session, clock: FrozenClock) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_clock, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def bearer(user_id: str, email: str | None = None) -> dict[str, str]:
    """Authorization headers carrying a freshly minted token."""
    return {"Authorization": f"Bearer {create_access_token(user_id, email)}"}


@pytest.fixture()
def auth_headers() -> Callable[..., dict[str, str]]:
    """Return a factory for headers of arbitrary, not yet mirrored, identities."""
    return bearer


@pytest.fixture()
def test_user(db_session: Session) -> User:
    """Create and return a persisted test user."""
    user = User(id="user-alice", email="alice@example.com", created_at=NOW)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def other_user(db_session: Session) -> User:
    """Create and return a second persisted user."""
    user = User(id="user-bob", email="bob@example.com", created_at=NOW)
    db_session.add(user)
    db_session.commit()
    return user


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return bearer(test_user.id, test_user.email)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return bearer(other_user.id, other_user.email)


@pytest.fixture()
def make_community(db_session: Session, test_user: User) -> Callable[..., Community]:
    """Factory creating a community administered by the primary test user."""

    def _make(name: str, display_name: str | None = None) -> Community:
        community = Community(
            name=name,
            display_name=display_name or name.title(),
            created_by=test_user.id,
            created_at=NOW - timedelta(days=30),
        )
        db_session.add(community)
        db_session.flush()
        db_session.add(
            CommunityMembership(
                community_id=community.id,
                user_id=test_user.id,
                joined_at=community.created_at,
                role=ROLE_ADMIN,
            )
        )
        recount_community(db_session, community)
        db_session.commit()
        return community

    return _make


@pytest.fixture()
def community(make_community: Callable[..., Community]) -> Community:
    """Create the default community posts land in."""
    return make_community("general", "General")


@pytest.fixture()
def make_post(
    db_session: Session,
    test_user: User,
    community: Community,
) -> Callable[..., Post]:
    """Factory creating a post backed by real vote and comment rows.

    Counters are derived through the same recount functions the services use,
    so seeded posts always satisfy the counter invariant.
    """

    def _make(
        title: str = "A post",
        *,
        hours_old: float = 1.0,
        upvotes: int = 0,
        downvotes: int = 0,
        comments: int = 0,
        in_community: Community | None = None,
        author: User | None = None,
        deleted: bool = False,
        post_type: str = "text",
    ) -> Post:
        target = in_community or community
        post = Post(
            title=title,
            body=f"Body of {title}",
            type=post_type,
            url="https://example.com" if post_type != "text" else None,
            community_id=target.id,
            author_id=(author or test_user).id,
            created_at=NOW - timedelta(hours=hours_old),
            is_deleted=deleted,
        )
        db_session.add(post)
        db_session.flush()

        for vote_type, total in ((1, upvotes), (-1, downvotes)):
            for _ in range(total):
                voter = User(id=f"voter-{next(_VOTER_COUNTER)}", created_at=NOW)
                db_session.add(voter)
                db_session.add(
                    PostVote(post_id=post.id, voter_id=voter.id, vote_type=vote_type, cast_at=NOW)
                )
        for index in range(comments):
            db_session.add(
                Comment(
                    post_id=post.id,
                    author_id=test_user.id,
                    body=f"Comment {index}",
                    depth=0,
                    created_at=post.created_at + timedelta(seconds=index + 1),
                )
            )
        db_session.flush()

        recount_and_persist(db_session, POST_VOTES, post)
        recount_post_comments(db_session, post)
        recount_community(db_session, target)
        db_session.commit()
        return post

    return _make


@pytest.fixture()
def test_post(make_post: Callable[..., Post]) -> Post:
    """Create a baseline post for tests."""
    return make_post("Baseline post")
