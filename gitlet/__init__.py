"""Gitlet — a small local version-control system.

Content-addressed blobs, immutable commits linked by parent fingerprint,
branch pointers, a staging index, and a three-way merge.  The Typer
application lives in :mod:`gitlet.app`.
"""
from __future__ import annotations

__version__ = "0.1.0"
