"""Tests for gitlet.snapshot — pure hashing and working-directory scanning."""
from __future__ import annotations

import hashlib
import pathlib

import pytest

from gitlet.snapshot import (
    compute_commit_id,
    compute_snapshot_id,
    hash_bytes,
    hash_file,
    list_workdir_files,
    normalize_path,
    walk_workdir,
)

_COMMIT_FIELDS: dict[str, str | None] = {
    "parent_id": "a" * 64,
    "parent2_id": None,
    "message": "first",
    "committed_at_iso": "2024-01-01T00:00:00+00:00",
    "branch": "master",
    "snapshot_id": "b" * 64,
}


def test_hash_bytes_is_sha256() -> None:
    assert hash_bytes(b"hello") == hashlib.sha256(b"hello").hexdigest()


def test_hash_file_matches_hash_bytes(tmp_path: pathlib.Path) -> None:
    path = tmp_path / "big.bin"
    content = b"x" * 200_000
    path.write_bytes(content)
    assert hash_file(path) == hash_bytes(content)


def test_snapshot_id_ignores_insertion_order() -> None:
    a = {"a.txt": "1" * 64, "b.txt": "2" * 64}
    b = {"b.txt": "2" * 64, "a.txt": "1" * 64}
    assert compute_snapshot_id(a) == compute_snapshot_id(b)


def test_snapshot_id_changes_with_content() -> None:
    assert compute_snapshot_id({"a.txt": "1" * 64}) != compute_snapshot_id(
        {"a.txt": "2" * 64}
    )


def test_commit_id_is_deterministic() -> None:
    assert compute_commit_id(**_COMMIT_FIELDS) == compute_commit_id(**_COMMIT_FIELDS)  # type: ignore[arg-type]


def test_commit_id_depends_on_every_field() -> None:
    """Changing any one identifying field changes the fingerprint."""
    base = compute_commit_id(**_COMMIT_FIELDS)  # type: ignore[arg-type]
    variants = {
        "parent_id": None,
        "parent2_id": "c" * 64,
        "message": "second",
        "committed_at_iso": "2024-01-01T00:00:01+00:00",
        "branch": "other",
        "snapshot_id": "d" * 64,
    }
    for key, value in variants.items():
        changed = dict(_COMMIT_FIELDS, **{key: value})
        assert compute_commit_id(**changed) != base, key  # type: ignore[arg-type]


def test_normalize_path_strips_dot_prefix() -> None:
    assert normalize_path("./a.txt") == "a.txt"
    assert normalize_path("dir/./b.txt") == "dir/b.txt"
    assert normalize_path("dir/../b.txt") == "b.txt"
    assert normalize_path(".env") == ".env"


@pytest.mark.parametrize(
    "name",
    ["", ".", "../outside.txt", "a/../../outside.txt", "/etc/passwd", ".gitlet/index.json", ".gitlet"],
)
def test_normalize_path_rejects_names_outside_the_working_tree(name: str) -> None:
    assert normalize_path(name) is None


def test_list_workdir_files_skips_metadata_only(tmp_path: pathlib.Path) -> None:
    (tmp_path / ".gitlet" / "objects").mkdir(parents=True)
    (tmp_path / ".gitlet" / "HEAD").write_text("refs/heads/master\n")
    (tmp_path / ".env").write_text("X=1")
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "b.txt").write_text("b")
    (tmp_path / "empty").mkdir()

    assert list_workdir_files(tmp_path) == [".env", "a.txt", "src/b.txt"]


def test_walk_workdir_maps_paths_to_object_ids(tmp_path: pathlib.Path) -> None:
    (tmp_path / "a.txt").write_bytes(b"one")
    assert walk_workdir(tmp_path) == {"a.txt": hash_bytes(b"one")}
