"""Gitlet history database: engine setup and row-level queries.

Each CLI invocation gets one session from :func:`open_session`.  The database
file is ``<repo>/.gitlet/gitlet.db`` unless ``GITLET_DATABASE_URL`` names
another one.
"""
from __future__ import annotations

import contextlib
import logging
import pathlib
from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.future import select

from gitlet._repo import gitlet_dir
from gitlet.config import settings
from gitlet.models import Base, GitletCommit, GitletObject, GitletSnapshot

logger = logging.getLogger(__name__)


def database_url(root: pathlib.Path) -> str:
    """Return the async SQLAlchemy URL for the repository at *root*."""
    if settings.database_url:
        return settings.database_url
    db_path = gitlet_dir(root) / settings.database_filename
    return f"sqlite+aiosqlite:///{db_path}"


async def create_schema(engine: AsyncEngine) -> None:
    """Create every Gitlet table that does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.debug("✅ Gitlet schema ensured")


@contextlib.asynccontextmanager
async def open_session(
    root: pathlib.Path,
    url: str | None = None,
    *,
    ensure_schema: bool = False,
) -> AsyncGenerator[AsyncSession, None]:
    """Yield one session for the lifetime of a command.

    The transaction commits if the body returns and rolls back if it raises.
    The engine is disposed on the way out.

    ``ensure_schema`` creates the tables first; ``gitlet init`` is the only
    caller that needs it.
    """
    db_url = url or database_url(root)
    engine = create_async_engine(db_url, echo=settings.debug)
    factory = async_sessionmaker(bind=engine, expire_on_commit=False)
    try:
        if ensure_schema:
            await create_schema(engine)
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
    finally:
        await engine.dispose()


async def upsert_object(session: AsyncSession, object_id: str, size_bytes: int) -> None:
    """Record blob *object_id* unless a row for it exists."""
    existing = await session.get(GitletObject, object_id)
    if existing is None:
        session.add(GitletObject(object_id=object_id, size_bytes=size_bytes))
        logger.debug("✅ Recorded blob %s (%d bytes)", object_id[:8], size_bytes)
    else:
        logger.debug("⚠️ Blob row %s present, not re-added", object_id[:8])


async def upsert_snapshot(
    session: AsyncSession, manifest: dict[str, str], snapshot_id: str
) -> GitletSnapshot:
    """Return the snapshot row for *snapshot_id*, adding it if missing."""
    existing = await session.get(GitletSnapshot, snapshot_id)
    if existing is not None:
        logger.debug("⚠️ Snapshot %s reused", snapshot_id[:8])
        return existing
    snap = GitletSnapshot(snapshot_id=snapshot_id, manifest=manifest)
    session.add(snap)
    logger.debug("✅ Recorded snapshot %s (%d files)", snapshot_id[:8], len(manifest))
    return snap


async def insert_commit(session: AsyncSession, commit: GitletCommit) -> None:
    """Add *commit*.  A duplicate id fails with ``IntegrityError`` at flush."""
    session.add(commit)
    logger.debug("✅ Recorded commit row %s on %r", commit.commit_id[:8], commit.branch)


async def get_commit(session: AsyncSession, commit_id: str) -> GitletCommit | None:
    """Return the commit with exactly *commit_id*, or ``None``."""
    return await session.get(GitletCommit, commit_id)


async def get_commit_manifest(
    session: AsyncSession, commit: GitletCommit
) -> dict[str, str]:
    """Return the ``{filename: object_id}`` snapshot tracked by *commit*.

    A missing snapshot row means the database is inconsistent; it is logged
    and treated as an empty tree.
    """
    snapshot = await session.get(GitletSnapshot, commit.snapshot_id)
    if snapshot is None:
        logger.warning(
            "⚠️ Snapshot %s referenced by commit %s not found in DB",
            commit.snapshot_id[:8],
            commit.commit_id[:8],
        )
        return {}
    return dict(snapshot.manifest)


async def find_commits_by_prefix(
    session: AsyncSession,
    prefix: str,
) -> list[GitletCommit]:
    """Return all commits whose ``commit_id`` starts with *prefix*."""
    result = await session.execute(
        select(GitletCommit).where(
            GitletCommit.commit_id.startswith(prefix, autoescape=True)
        )
    )
    return list(result.scalars().all())


async def find_commits_by_message(
    session: AsyncSession,
    message: str,
) -> list[GitletCommit]:
    """Return all commits whose message equals *message* exactly."""
    result = await session.execute(
        select(GitletCommit)
        .where(GitletCommit.message == message)
        .order_by(GitletCommit.committed_at, GitletCommit.created_at)
    )
    return list(result.scalars().all())


async def list_commits(session: AsyncSession) -> list[GitletCommit]:
    """Return every stored commit, oldest first."""
    result = await session.execute(
        select(GitletCommit).order_by(GitletCommit.committed_at, GitletCommit.created_at)
    )
    return list(result.scalars().all())
