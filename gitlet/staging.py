"""Staging index — the pending change set between two commits.

``.gitlet/index.json`` schema
-----------------------------

.. code-block:: json

    {
        "added":   {"a.txt": "3f1c...", "notes/b.txt": "9ab0..."},
        "removed": ["old.txt"]
    }

``added`` maps a file name to the object id of the content staged for
addition (the bytes are already in ``.gitlet/objects/``).  ``removed`` lists
file names staged for removal.  A name never appears in both.
"""
from __future__ import annotations

import json
import logging
import pathlib
from dataclasses import dataclass, field

from gitlet._repo import gitlet_dir

logger = logging.getLogger(__name__)

_INDEX_FILENAME = "index.json"


@dataclass
class StagingIndex:
    """Pending additions and removals.

    Attributes:
        added:   ``{filename: object_id}`` staged for addition.
        removed: File names staged for removal.
    """

    added: dict[str, str] = field(default_factory=dict)
    removed: set[str] = field(default_factory=set)

    @property
    def is_empty(self) -> bool:
        return not self.added and not self.removed

    def stage_addition(self, filename: str, object_id: str) -> None:
        self.removed.discard(filename)
        self.added[filename] = object_id

    def stage_removal(self, filename: str) -> None:
        self.added.pop(filename, None)
        self.removed.add(filename)

    def unstage(self, filename: str) -> None:
        """Forget *filename* entirely (neither added nor removed)."""
        self.added.pop(filename, None)
        self.removed.discard(filename)

    def clear(self) -> None:
        self.added.clear()
        self.removed.clear()

    def apply_to(self, manifest: dict[str, str]) -> dict[str, str]:
        """Return *manifest* with the staged additions and removals folded in."""
        result = dict(manifest)
        result.update(self.added)
        for filename in self.removed:
            result.pop(filename, None)
        return result


def index_path(root: pathlib.Path) -> pathlib.Path:
    return gitlet_dir(root) / _INDEX_FILENAME


def read_index(root: pathlib.Path) -> StagingIndex:
    """Load the staging index; a missing file is an empty index."""
    path = index_path(root)
    if not path.exists():
        return StagingIndex()

    data: dict[str, object] = json.loads(path.read_text())
    raw_added = data.get("added", {})
    raw_removed = data.get("removed", [])
    added = (
        {str(k): str(v) for k, v in raw_added.items()}
        if isinstance(raw_added, dict)
        else {}
    )
    removed = {str(r) for r in raw_removed} if isinstance(raw_removed, list) else set()
    return StagingIndex(added=added, removed=removed)


def write_index(root: pathlib.Path, index: StagingIndex) -> None:
    data: dict[str, object] = {
        "added": dict(sorted(index.added.items())),
        "removed": sorted(index.removed),
    }
    index_path(root).write_text(json.dumps(data, indent=2) + "\n")
    logger.debug(
        "✅ Wrote index (%d added, %d removed)", len(index.added), len(index.removed)
    )
