"""File-extension histogram (``--count`` mode)."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterator
from pathlib import Path

from treeprint.formatter.tree import RenderLine
from treeprint.scanner import (
    TraversalConfig,
    check_root,
    iter_subtree,
    measure_subtree,
)
from treeprint.style import Style, human_size

logger = logging.getLogger(__name__)


def extension_key(name: str) -> str:
    """Return the lowercase bucket for a file name.

    Dotless names bucket under the whole (lowercased) name.
    """
    return name.rsplit(".", 1)[-1].lower()


def count_by_extension(
    root: Path, config: TraversalConfig | None = None
) -> dict[str, int]:
    """Count regular files below *root* by extension.

    The whole subtree is walked regardless of ``max_depth``; only the
    hidden-entry rule applies. Symlinks are not counted.

    Args:
        root: Directory to walk.
        config: Traversal configuration. Defaults to ``TraversalConfig()``.

    Returns:
        dict[str, int]: Buckets by descending count, ties alphabetical.

    Raises:
        NotADirectoryError: If *root* is missing, not a directory, or unreadable.
    """
    opts = config or TraversalConfig()
    root = check_root(root)

    counts: Counter[str] = Counter()
    for dir_entry in iter_subtree(root, opts.show_hidden):
        try:
            is_file = dir_entry.is_file(follow_symlinks=False)
        except OSError:
            logger.debug("Cannot stat: %s", dir_entry.path)
            continue
        if is_file:
            counts[extension_key(dir_entry.name)] += 1

    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return dict(ordered)


def format_count(
    root: Path, config: TraversalConfig | None = None
) -> Iterator[RenderLine]:
    """Render the histogram followed by the subtree totals.

    Raises:
        NotADirectoryError: If *root* is missing, not a directory, or unreadable.
    """
    opts = config or TraversalConfig()
    root = Path(root).resolve()
    counts = count_by_extension(root, opts)
    return _format_count(root, opts, counts)


def _format_count(
    root: Path, config: TraversalConfig, counts: dict[str, int]
) -> Iterator[RenderLine]:
    yield RenderLine(name=f"File type breakdown: {root}", style=Style.BOLD)
    yield RenderLine()
    for ext, count in counts.items():
        yield RenderLine(prefix="  ", name=f"{ext}: {count}")
    yield RenderLine()

    totals = measure_subtree(root, config.show_hidden)
    yield RenderLine(
        prefix="  ",
        label="Total:",
        name=(
            f"{totals.directories} dirs, {totals.files} files, "
            f"{human_size(totals.disk_usage)}"
        ),
    )
