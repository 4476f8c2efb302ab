"""Directory listing and subtree totals using os.scandir (symlinks never followed)."""

from __future__ import annotations

import logging
import os
import re
import stat
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

logger = logging.getLogger(__name__)

NodeKind = Literal["file", "dir", "symlink"]
SortKey = Literal["name", "size", "date"]

SORT_KEYS: tuple[str, ...] = ("name", "size", "date")


@dataclass(frozen=True, slots=True)
class TraversalNode:
    """A single filesystem entry discovered during a walk.

    Attributes:
        name: Basename of the entry.
        path: Absolute path of the entry.
        kind: ``file``, ``dir`` or ``symlink`` as reported by ``lstat``.
        is_dir: Whether the entry resolves to a directory. True for
            symlinks pointing at directories, which are still never
            descended into.
        is_file: Whether the entry resolves to a regular file. False for
            dangling symlinks, FIFOs and other special files.
        size: Size in bytes. For symlinks, the size of the target when it
            resolves to a regular file.
        mode: Raw ``lstat`` mode bits.
        mtime: Last modification time (epoch seconds).
        link_target: Symlink text, ``"?"`` when unreadable, ``None`` for
            non-links.
    """

    name: str
    path: Path
    kind: NodeKind
    is_dir: bool
    is_file: bool
    size: int
    mode: int
    mtime: float
    link_target: str | None = None

    @property
    def is_symlink(self) -> bool:
        return self.kind == "symlink"

    @property
    def is_executable(self) -> bool:
        return stat.S_ISREG(self.mode) and bool(self.mode & 0o111)

    @property
    def permissions(self) -> str:
        return stat.filemode(self.mode)

    @property
    def extension(self) -> str:
        """Suffix after the last dot, or the whole name when there is none."""
        return self.name.rsplit(".", 1)[-1]


@dataclass(frozen=True, slots=True)
class TraversalConfig:
    """Immutable options for one traversal.

    Attributes:
        max_depth: Deepest level rendered; root's children are depth 1
            and ``0`` shows no children at all.
        show_hidden: Whether to include entries starting with ``.``.
        extensions: Extension allow-list for files; empty means no filter.
        exclude: Regex searched in each entry name; matches are dropped.
        dirs_only: Show directories only.
        files_only: Show files only (directories are neither shown nor
            descended).
        sort_key: Accepted for compatibility; entries are always ordered
            by name.
        show_size: Append the entry size.
        show_perms: Append the permission string.
        show_time: Append the modification time.
        color: Emit ANSI styling.
        use_gitignore: Also skip entries matched by ``ROOT/.gitignore``.
    """

    max_depth: int = 3
    show_hidden: bool = False
    extensions: frozenset[str] = field(default_factory=frozenset)
    exclude: re.Pattern[str] | None = None
    dirs_only: bool = False
    files_only: bool = False
    sort_key: SortKey = "name"
    show_size: bool = False
    show_perms: bool = False
    show_time: bool = False
    color: bool = True
    use_gitignore: bool = False

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.dirs_only and self.files_only:
            raise ValueError("dirs_only and files_only are mutually exclusive")
        if self.sort_key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key '{self.sort_key}'")

    @property
    def show_meta(self) -> bool:
        return self.show_size or self.show_perms or self.show_time


@dataclass(frozen=True, slots=True)
class SubtreeTotals:
    """Aggregate figures reported after a tree or histogram.

    Attributes:
        directories: Directory count, root excluded.
        files: Regular file count.
        disk_usage: Allocated bytes of the whole subtree.
    """

    directories: int
    files: int
    disk_usage: int


def _node_from_entry(dir_entry: os.DirEntry[str]) -> TraversalNode:
    """Build a node from a scandir entry without following symlinks.

    Raises:
        OSError: If the entry cannot be stat'd.
    """
    st = dir_entry.stat(follow_symlinks=False)
    if stat.S_ISLNK(st.st_mode):
        try:
            target = os.readlink(dir_entry.path)
        except OSError:
            target = "?"
        try:
            resolved: os.stat_result | None = os.stat(dir_entry.path)
        except OSError:
            resolved = None  # dangling
        is_dir = resolved is not None and stat.S_ISDIR(resolved.st_mode)
        is_file = resolved is not None and stat.S_ISREG(resolved.st_mode)
        size = st.st_size
        if resolved is not None and is_file:
            size = resolved.st_size
        return TraversalNode(
            name=dir_entry.name,
            path=Path(dir_entry.path),
            kind="symlink",
            is_dir=is_dir,
            is_file=is_file,
            size=size,
            mode=st.st_mode,
            mtime=st.st_mtime,
            link_target=target,
        )

    is_dir = stat.S_ISDIR(st.st_mode)
    return TraversalNode(
        name=dir_entry.name,
        path=Path(dir_entry.path),
        kind="dir" if is_dir else "file",
        is_dir=is_dir,
        is_file=stat.S_ISREG(st.st_mode),
        size=0 if is_dir else st.st_size,
        mode=st.st_mode,
        mtime=st.st_mtime,
    )


def check_root(root: Path) -> Path:
    """Resolve *root* and check that it is a directory we can list.

    Args:
        root: Directory given by the caller.

    Returns:
        Path: The resolved absolute root.

    Raises:
        NotADirectoryError: If *root* is missing, not a directory, or
            cannot be read.
    """
    root = Path(root).resolve()
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")
    try:
        os.scandir(root).close()
    except OSError as exc:
        raise NotADirectoryError(f"Cannot read directory: {root}") from exc
    return root


def list_children(directory: Path) -> list[TraversalNode]:
    """List the immediate children of *directory*, one readdir level.

    Unreadable directories yield an empty list and entries that cannot be
    stat'd are skipped; both are logged at debug level only.

    Args:
        directory: Directory to list.

    Returns:
        list[TraversalNode]: Children in name order.
    """
    try:
        with os.scandir(directory) as it:
            raw_entries = sorted(it, key=lambda e: e.name)
    except OSError:
        logger.debug("Cannot read directory: %s", directory)
        return []

    nodes: list[TraversalNode] = []
    for dir_entry in raw_entries:
        try:
            nodes.append(_node_from_entry(dir_entry))
        except OSError:
            logger.debug("Cannot stat: %s", dir_entry.path)
    return nodes


def iter_subtree(root: Path, show_hidden: bool) -> Iterator[os.DirEntry[str]]:
    """Yield every entry below *root* at any depth in DFS order.

    Hidden entries, and everything below hidden directories, are skipped
    unless *show_hidden* is set. Symlinks are yielded but never followed.

    Args:
        root: Directory to walk.
        show_hidden: Whether to include dot entries.

    Yields:
        os.DirEntry: Each visible entry.
    """
    stack: list[Path] = [root]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                raw_entries = sorted(it, key=lambda e: e.name)
        except OSError:
            logger.debug("Cannot read directory: %s", current)
            continue

        child_dirs: list[Path] = []
        for dir_entry in raw_entries:
            if not show_hidden and dir_entry.name.startswith("."):
                continue
            yield dir_entry
            try:
                if dir_entry.is_dir(follow_symlinks=False):
                    child_dirs.append(Path(dir_entry.path))
            except OSError:
                logger.debug("Cannot stat: %s", dir_entry.path)

        # Push children in reverse so first-alphabetical is popped first
        stack.extend(reversed(child_dirs))


def _allocated_bytes(st: os.stat_result) -> int:
    blocks = getattr(st, "st_blocks", None)
    if blocks is None:
        return st.st_size
    return blocks * 512


def disk_usage(root: Path) -> int:
    """Return allocated bytes of *root* and everything below it, like ``du -s``.

    Hidden entries are always included, symlinks are not followed and
    hard-linked inodes are counted once.
    """
    seen: set[tuple[int, int]] = set()
    total = 0
    try:
        root_stat = root.stat()
    except OSError:
        logger.debug("Cannot stat: %s", root)
        return 0
    seen.add((root_stat.st_dev, root_stat.st_ino))
    total += _allocated_bytes(root_stat)

    for dir_entry in iter_subtree(root, show_hidden=True):
        try:
            st = dir_entry.stat(follow_symlinks=False)
        except OSError:
            logger.debug("Cannot stat: %s", dir_entry.path)
            continue
        key = (st.st_dev, st.st_ino)
        if key in seen:
            continue
        seen.add(key)
        total += _allocated_bytes(st)
    return total


def measure_subtree(root: Path, show_hidden: bool) -> SubtreeTotals:
    """Count directories and regular files below *root* and measure its disk usage.

    Counts ignore any depth bound and apply only the hidden-entry rule.
    Symlinks are counted as neither.

    Args:
        root: Directory to measure.
        show_hidden: Whether hidden entries count.

    Returns:
        SubtreeTotals: Aggregate figures for the summary line.
    """
    directories = 0
    files = 0
    for dir_entry in iter_subtree(root, show_hidden):
        try:
            if dir_entry.is_dir(follow_symlinks=False):
                directories += 1
            elif dir_entry.is_file(follow_symlinks=False):
                files += 1
        except OSError:
            logger.debug("Cannot stat: %s", dir_entry.path)
    return SubtreeTotals(
        directories=directories,
        files=files,
        disk_usage=disk_usage(root),
    )
