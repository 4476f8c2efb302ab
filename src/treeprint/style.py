"""Entry styling, ANSI escapes and metadata strings."""

from __future__ import annotations

import re
import time
from enum import Enum
from typing import Final

from treeprint.scanner import TraversalConfig, TraversalNode

RESET: Final[str] = "\033[0m"

MEDIA_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {
        # video
        "mp4", "mkv", "avi", "mov", "wmv", "flv", "webm", "m4v",
        # audio
        "mp3", "flac", "ogg", "wav", "aac", "m4a",
        # image
        "jpg", "jpeg", "png", "gif", "bmp", "svg", "webp", "tiff",
    }
)  # fmt: skip

ARCHIVE_EXTENSIONS: Final[frozenset[str]] = frozenset(
    {"tar", "gz", "bz2", "xz", "zip", "rar", "7z", "zst"}
)

_ESCAPE_RE: Final[re.Pattern[str]] = re.compile(r"\x1b\[[0-9;]*m")

_KIB: Final[int] = 1024
_UNITS: Final[tuple[tuple[int, str], ...]] = (
    (_KIB**3, "G"),
    (_KIB**2, "M"),
    (_KIB, "K"),
)


class Style(str, Enum):
    """Visual class of a rendered line; the value is its ANSI prefix."""

    PLAIN = ""
    DIRECTORY = "\033[1;34m"  # bold blue
    EXECUTABLE = "\033[1;32m"  # bold green
    SYMLINK = "\033[1;36m"  # bold cyan
    MEDIA = "\033[0;35m"  # purple
    ARCHIVE = "\033[0;31m"  # red
    DIM = "\033[2m"
    BOLD = "\033[1m"


def classify(node: TraversalNode) -> Style:
    """Return the single style class for *node*.

    Precedence: symlink, directory, executable, media, archive, plain.
    """
    if node.is_symlink:
        return Style.SYMLINK
    if node.is_dir:
        return Style.DIRECTORY
    if node.is_executable:
        return Style.EXECUTABLE
    ext = node.name.lower().rsplit(".", 1)
    if len(ext) == 2:
        if ext[1] in MEDIA_EXTENSIONS:
            return Style.MEDIA
        if ext[1] in ARCHIVE_EXTENSIONS:
            return Style.ARCHIVE
    return Style.PLAIN


def paint(text: str, style: Style, color: bool) -> str:
    """Wrap *text* in the escape codes for *style* when *color* is on."""
    if not color or style is Style.PLAIN or not text:
        return text
    return f"{style.value}{text}{RESET}"


def strip_styles(text: str) -> str:
    """Remove ANSI SGR escape sequences, leaving the text untouched otherwise."""
    return _ESCAPE_RE.sub("", text)


def human_size(num_bytes: int) -> str:
    """Format a byte count with binary units.

    >>> human_size(512)
    '512B'
    >>> human_size(1536)
    '1.5K'
    """
    for factor, unit in _UNITS:
        if num_bytes >= factor:
            return f"{num_bytes / factor:.1f}{unit}"
    return f"{num_bytes}B"


def format_mtime(mtime: float) -> str:
    return time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(mtime))


def metadata(node: TraversalNode, config: TraversalConfig) -> tuple[str, ...]:
    """Return the requested metadata fields: size, permissions, time.

    Directory-like entries show ``<dir>`` instead of a computed size.
    """
    fields: list[str] = []
    if config.show_size:
        fields.append("<dir>" if node.is_dir else human_size(node.size))
    if config.show_perms:
        fields.append(node.permissions)
    if config.show_time:
        fields.append(format_mtime(node.mtime))
    return tuple(fields)
