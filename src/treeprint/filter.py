"""Entry filtering: an ordered pipeline of small exclusion predicates."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Protocol

from pathspec import GitIgnoreSpec

from treeprint.scanner import TraversalConfig, TraversalNode

logger = logging.getLogger(__name__)


class EntryFilter(Protocol):
    """Protocol for entry filtering.

    Keeps traversal logic decoupled from matching strategy.
    """

    def should_exclude(self, node: TraversalNode) -> bool: ...


class HiddenFilter:
    """Drop dot entries unless hidden entries were requested."""

    def __init__(self, show_hidden: bool = False) -> None:
        self._show_hidden = show_hidden

    def should_exclude(self, node: TraversalNode) -> bool:
        return not self._show_hidden and node.name.startswith(".")


class ExtensionFilter:
    """Closed allow-list of file extensions.

    Only entries that resolve to a regular file are checked; directories,
    dangling symlinks and special files always pass. Matching is
    case-sensitive and uses the suffix after the last dot, or the whole
    name for dotless files.
    """

    def __init__(self, extensions: Iterable[str] | None = None) -> None:
        """Initialize extension filter.

        Args:
            extensions: Allowed extensions without the leading dot. Empty
                or ``None`` disables the filter.
        """
        self._extensions: frozenset[str] = frozenset(extensions or ())

    def should_exclude(self, node: TraversalNode) -> bool:
        if not self._extensions or not node.is_file:
            return False
        return node.extension not in self._extensions


class PatternFilter:
    """Filter entries whose name matches a regular expression.

    Implements ``-x REGEX`` exclusion behavior. The pattern is searched
    anywhere in the name, not anchored.
    """

    def __init__(self, pattern: re.Pattern[str] | None = None) -> None:
        self._pattern = pattern

    def should_exclude(self, node: TraversalNode) -> bool:
        """Return whether an entry should be excluded.

        Args:
            node: Candidate entry.

        Returns:
            bool: ``True`` when the configured pattern matches the name.
        """
        if self._pattern is None:
            return False
        return self._pattern.search(node.name) is not None


class GitignoreFilter:
    """Filter entries matched by the patterns in ROOT/.gitignore.

    Paths are matched relative to the root, with a trailing slash on
    directories so that ``build/`` style patterns apply to them only.
    """

    def __init__(self, root: Path, spec: GitIgnoreSpec) -> None:
        self._root = root
        self._spec = spec

    @classmethod
    def from_root(cls, root: Path) -> GitignoreFilter | None:
        """Build a filter from ``root/.gitignore``, or ``None`` if it cannot be read."""
        ignore_file = root / ".gitignore"
        try:
            with ignore_file.open(encoding="utf-8") as fh:
                spec = GitIgnoreSpec.from_lines(fh)
        except OSError:
            logger.debug("No readable .gitignore at %s", ignore_file)
            return None
        return cls(root, spec)

    def match_path(self, node: TraversalNode) -> str:
        rel = node.path.relative_to(self._root).as_posix()
        return f"{rel}/" if node.is_dir else rel

    def should_exclude(self, node: TraversalNode) -> bool:
        return self._spec.match_file(self.match_path(node))


class KindFilter:
    """Implements ``--dirs-only`` and ``--files-only``."""

    def __init__(self, dirs_only: bool = False, files_only: bool = False) -> None:
        self._dirs_only = dirs_only
        self._files_only = files_only

    def should_exclude(self, node: TraversalNode) -> bool:
        if self._dirs_only and not node.is_dir:
            return True
        return self._files_only and node.is_dir


class FilterPipeline:
    """Apply filters in order; the first one that excludes wins."""

    def __init__(self, filters: Sequence[EntryFilter] = ()) -> None:
        self._filters: tuple[EntryFilter, ...] = tuple(filters)

    def __len__(self) -> int:
        return len(self._filters)

    def should_exclude(self, node: TraversalNode) -> bool:
        return any(f.should_exclude(node) for f in self._filters)

    def apply(self, nodes: Iterable[TraversalNode]) -> list[TraversalNode]:
        """Return the nodes that survive every filter, order preserved."""
        return [node for node in nodes if not self.should_exclude(node)]


def build_pipeline(root: Path, config: TraversalConfig) -> FilterPipeline:
    """Build the listing pipeline for a tree render.

    Order: hidden, extension, exclude pattern, gitignore, kind.

    Args:
        root: Resolved root directory (gitignore paths are relative to it).
        config: Traversal configuration.

    Returns:
        FilterPipeline: Pipeline containing only the active filters.
    """
    filters: list[EntryFilter] = [HiddenFilter(config.show_hidden)]
    if config.extensions:
        filters.append(ExtensionFilter(config.extensions))
    if config.exclude is not None:
        filters.append(PatternFilter(config.exclude))
    if config.use_gitignore:
        gitignore = GitignoreFilter.from_root(root)
        if gitignore is not None:
            filters.append(gitignore)
    if config.dirs_only or config.files_only:
        filters.append(KindFilter(config.dirs_only, config.files_only))
    return FilterPipeline(filters)
