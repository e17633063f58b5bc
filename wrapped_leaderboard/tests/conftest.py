import os
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from dotenv import load_dotenv

# Load test environment variables from .env.test in the project root
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
dotenv_path = os.path.join(project_root, '.env.test')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path=dotenv_path)

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from wrapped_leaderboard.models import Base, Principal, SubmissionORM


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path):
    """
    Async engine on a throwaway SQLite file with the schema created.

    A file database (rather than ``:memory:``) gives every session its own
    connection, so unique-constraint races behave like they do on PostgreSQL.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'leaderboard.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(bind=db_engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory):
    """Provide a database session for each test function."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def principal():
    return Principal(id="user-1", email="dev@example.com", provider="github", user_name="octocat")


@pytest.fixture
def make_submission():
    """Build SubmissionORM rows with deterministic, increasing creation times."""
    base_time = datetime(2025, 12, 1, tzinfo=timezone.utc)
    counter = {"n": 0}

    def _make(tokens: int, user_id: str = None, name: str = None, **fields) -> SubmissionORM:
        counter["n"] += 1
        n = counter["n"]
        return SubmissionORM(
            id=fields.pop("id", f"sub-{n}"),
            user_id=user_id or f"seed-user-{n}",
            name=name or f"User {n}",
            email=fields.pop("email", f"user{n}@example.com"),
            tokens=tokens,
            created_at=fields.pop("created_at", base_time + timedelta(minutes=n)),
            **fields,
        )

    return _make


@pytest_asyncio.fixture
async def seed(db_session, make_submission):
    """Insert submissions with the given token counts, in order, and return them."""

    async def _seed(*token_counts: int):
        rows = [make_submission(tokens) for tokens in token_counts]
        db_session.add_all(rows)
        await db_session.commit()
        return rows

    return _seed
