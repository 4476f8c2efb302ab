"""Tests for treeprint.style."""

from __future__ import annotations

import stat
import time
from pathlib import Path

import pytest

from treeprint.scanner import NodeKind, TraversalConfig, TraversalNode
from treeprint.style import (
    Style,
    classify,
    format_mtime,
    human_size,
    metadata,
    paint,
    strip_styles,
)


def _node(
    name: str,
    kind: NodeKind = "file",
    is_dir: bool = False,
    perm: int = 0o644,
    size: int = 0,
    mtime: float = 0.0,
) -> TraversalNode:
    type_bits = {"file": stat.S_IFREG, "dir": stat.S_IFDIR, "symlink": stat.S_IFLNK}
    return TraversalNode(
        name=name,
        path=Path("/srv") / name,
        kind=kind,
        is_dir=is_dir,
        is_file=kind == "file",
        size=size,
        mode=type_bits[kind] | perm,
        mtime=mtime,
        link_target="target" if kind == "symlink" else None,
    )


class TestHumanSize:
    @pytest.mark.parametrize(
        ("num_bytes", "expected"),
        [
            (0, "0B"),
            (1023, "1023B"),
            (1024, "1.0K"),
            (1536, "1.5K"),
            (1024**2, "1.0M"),
            (int(2.25 * 1024**2), "2.2M"),
            (5 * 1024**3, "5.0G"),
            (2048 * 1024**3, "2048.0G"),
        ],
    )
    def test_units(self, num_bytes: int, expected: str) -> None:
        assert human_size(num_bytes) == expected


class TestClassify:
    def test_directory(self) -> None:
        assert classify(_node("Movies", kind="dir", is_dir=True, perm=0o755)) is Style.DIRECTORY

    def test_symlink_to_directory_is_symlink(self) -> None:
        assert classify(_node("latest", kind="symlink", is_dir=True)) is Style.SYMLINK

    def test_executable_beats_extension(self) -> None:
        assert classify(_node("trailer.mp4", perm=0o755)) is Style.EXECUTABLE

    @pytest.mark.parametrize(
        "name", ["Heat.mkv", "song.FLAC", "cover.jpeg", "clip.webm", "poster.PNG"]
    )
    def test_media(self, name: str) -> None:
        assert classify(_node(name)) is Style.MEDIA

    @pytest.mark.parametrize(
        "name", ["backup.tar.gz", "dump.7z", "logs.ZST", "bundle.tar", "x.rar"]
    )
    def test_archive(self, name: str) -> None:
        assert classify(_node(name)) is Style.ARCHIVE

    @pytest.mark.parametrize("name", ["notes.txt", "Makefile", "mkv"])
    def test_plain(self, name: str) -> None:
        assert classify(_node(name)) is Style.PLAIN


class TestPaint:
    def test_no_color_returns_text(self) -> None:
        assert paint("docs/", Style.DIRECTORY, color=False) == "docs/"

    def test_plain_style_has_no_escapes(self) -> None:
        assert paint("notes.txt", Style.PLAIN, color=True) == "notes.txt"

    def test_wraps_with_reset(self) -> None:
        assert paint("docs/", Style.DIRECTORY, color=True) == "\033[1;34mdocs/\033[0m"

    def test_strip_round_trip(self) -> None:
        painted = paint("run.sh", Style.EXECUTABLE, color=True)
        assert strip_styles(painted) == "run.sh"

    def test_strip_leaves_glyphs(self) -> None:
        text = "│   └── \033[0;35mphoto.png\033[0m\033[2m  1.0K\033[0m"
        assert strip_styles(text) == "│   └── photo.png  1.0K"


class TestMetadata:
    def test_nothing_requested(self) -> None:
        assert metadata(_node("a.txt", size=10), TraversalConfig()) == ()

    def test_fixed_order(self) -> None:
        mtime = time.mktime((2024, 3, 9, 14, 5, 6, 0, 0, -1))
        node = _node("a.txt", size=2048, mtime=mtime)
        config = TraversalConfig(show_size=True, show_perms=True, show_time=True)
        assert metadata(node, config) == ("2.0K", "-rw-r--r--", "2024-03-09 14:05:06")

    def test_directory_size_marker(self) -> None:
        node = _node("Movies", kind="dir", is_dir=True, perm=0o755)
        assert metadata(node, TraversalConfig(show_size=True)) == ("<dir>",)

    def test_format_mtime(self) -> None:
        mtime = time.mktime((2023, 12, 31, 23, 59, 58, 0, 0, -1))
        assert format_mtime(mtime) == "2023-12-31 23:59:58"
