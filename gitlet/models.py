"""SQLAlchemy ORM models for Gitlet history.

Three tables back a repository's ``gitlet.db``:

- ``gitlet_objects``   one row per stored blob (the bytes themselves live
  under ``.gitlet/objects/``)
- ``gitlet_snapshots`` one row per distinct ``{filename: blob_id}`` tree
- ``gitlet_commits``   one row per commit

A merge commit is an ordinary ``gitlet_commits`` row with
``parent2_commit_id`` (the step-parent) filled in.
"""
from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON

_SHA256_HEX = 64


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for the Gitlet tables."""


class GitletObject(Base):
    """Bookkeeping for one blob in the object store."""

    __tablename__ = "gitlet_objects"

    object_id: Mapped[str] = mapped_column(String(_SHA256_HEX), primary_key=True)
    size_bytes: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now
    )

    def __repr__(self) -> str:
        return f"<GitletObject {self.object_id[:8]} {self.size_bytes}B>"


class GitletSnapshot(Base):
    """The full set of files tracked by one or more commits.

    ``manifest`` maps each tracked file name to its blob id.  The row key is
    derived from the sorted pairs, so equal trees share a row.
    """

    __tablename__ = "gitlet_snapshots"

    snapshot_id: Mapped[str] = mapped_column(String(_SHA256_HEX), primary_key=True)
    manifest: Mapped[dict[str, str]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now
    )

    def __repr__(self) -> str:
        return f"<GitletSnapshot {self.snapshot_id[:8]} ({len(self.manifest or {})} files)>"


class GitletCommit(Base):
    """An immutable commit.

    ``commit_id`` hashes parent, step-parent, message, ``committed_at``,
    branch and snapshot id (see :func:`gitlet.snapshot.compute_commit_id`).
    ``created_at`` only records when the row was written.
    """

    __tablename__ = "gitlet_commits"

    commit_id: Mapped[str] = mapped_column(String(_SHA256_HEX), primary_key=True)
    branch: Mapped[str] = mapped_column(String(255), nullable=False)
    parent_commit_id: Mapped[str | None] = mapped_column(
        String(_SHA256_HEX), nullable=True, index=True
    )
    parent2_commit_id: Mapped[str | None] = mapped_column(
        String(_SHA256_HEX), nullable=True, index=True
    )
    snapshot_id: Mapped[str] = mapped_column(
        String(_SHA256_HEX),
        ForeignKey("gitlet_snapshots.snapshot_id", ondelete="RESTRICT"),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    committed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now
    )

    @property
    def is_merge(self) -> bool:
        return self.parent2_commit_id is not None

    def __repr__(self) -> str:
        prefix = "merge " if self.is_merge else ""
        return f"<GitletCommit {prefix}{self.commit_id[:8]} on {self.branch!r}: {self.message[:30]!r}>"
