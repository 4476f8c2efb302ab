"""Shared fixtures for treeprint tests."""

from __future__ import annotations

from pathlib import Path

import pytest


@pytest.fixture
def media_tree(tmp_path: Path) -> Path:
    """Create a small media-library tree.

    Structure::

        root/
        ├── .env
        ├── .thumbs/
        │   └── cover.jpg
        ├── Movies/
        │   ├── Heat (1995).mkv
        │   └── heat.srt
        ├── Music/
        │   └── album/
        │       └── track01.flac
        ├── backup.tar.gz
        └── notes.txt
    """
    root = tmp_path / "library"
    root.mkdir()
    (root / ".env").write_text("SECRET=1")
    (root / ".thumbs").mkdir()
    (root / ".thumbs" / "cover.jpg").write_bytes(b"\xff\xd8")
    (root / "Movies").mkdir()
    (root / "Movies" / "Heat (1995).mkv").write_bytes(b"\x00" * 64)
    (root / "Movies" / "heat.srt").write_text("1\n00:00:01,000 --> 00:00:02,000\n")
    (root / "Music" / "album").mkdir(parents=True)
    (root / "Music" / "album" / "track01.flac").write_bytes(b"fLaC")
    (root / "backup.tar.gz").write_bytes(b"\x1f\x8b")
    (root / "notes.txt").write_text("notes")
    return root


@pytest.fixture
def docs_tree(tmp_path: Path) -> Path:
    """Minimal tree used for exact-output checks.

    Structure::

        root/
        ├── docs/
        │   └── readme.md
        └── photo.png
    """
    root = tmp_path / "project"
    root.mkdir()
    (root / "docs").mkdir()
    (root / "docs" / "readme.md").write_text("readme")
    (root / "photo.png").write_bytes(b"\x89PNG")
    return root
