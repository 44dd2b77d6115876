"""Fixtures for Gitlet tests requiring an in-memory database."""
from __future__ import annotations

import pathlib
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from gitlet.commands.init import _init_async
from gitlet.models import Base


@pytest_asyncio.fixture
async def gitlet_db_session() -> AsyncGenerator[AsyncSession, None]:
    """In-memory SQLite session with the Gitlet tables.

    Isolated per test: tables are created fresh and dropped on teardown.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    async with factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def repo_root(
    tmp_path: pathlib.Path, gitlet_db_session: AsyncSession
) -> pathlib.Path:
    """A freshly initialised repository rooted at ``tmp_path``."""
    await _init_async(root=tmp_path, session=gitlet_db_session)
    return tmp_path


@pytest.fixture(autouse=True)
def _no_repo_root_override(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's ``GITLET_REPO_ROOT`` from leaking into tests."""
    monkeypatch.delenv("GITLET_REPO_ROOT", raising=False)
