"""Streaming box-drawing tree renderer."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from treeprint.filter import FilterPipeline, build_pipeline
from treeprint.scanner import (
    SubtreeTotals,
    TraversalConfig,
    TraversalNode,
    check_root,
    list_children,
    measure_subtree,
)
from treeprint.style import Style, classify, human_size, metadata, paint


@dataclass(frozen=True, slots=True)
class Glyphs:
    """Box-drawing character set for tree rendering."""

    branch: str  # ├──
    last_branch: str  # └──
    vertical: str  # │
    space: str  # (indent)


GLYPHS = Glyphs(
    branch="├── ",
    last_branch="└── ",
    vertical="│   ",
    space="    ",
)


@dataclass(frozen=True, slots=True)
class RenderLine:
    """One output row.

    Attributes:
        prefix: Guide glyphs inherited from ancestors.
        connector: ``├── `` or ``└── `` for entries, empty otherwise.
        label: Bold lead-in printed before *name*, e.g. ``Total:``.
        name: Annotated name (directories carry a trailing ``/``).
        style: Visual class applied to *name*.
        target: Symlink target shown after an arrow.
        meta: Metadata fields in display order.
    """

    prefix: str = ""
    connector: str = ""
    label: str = ""
    name: str = ""
    style: Style = Style.PLAIN
    target: str | None = None
    meta: tuple[str, ...] = ()

    @property
    def is_entry(self) -> bool:
        return bool(self.connector)

    def format(self, color: bool = False) -> str:
        """Render the row, with ANSI styling when *color* is set.

        The text is identical either way once escapes are stripped.
        """
        text = paint(self.name, self.style, color)
        if self.label:
            text = f"{paint(self.label, Style.BOLD, color)} {text}"
        if self.target is not None:
            text += " " + paint(f"→ {self.target}", Style.DIM, color)
        if self.meta:
            text += paint("".join(f"  {field}" for field in self.meta), Style.DIM, color)
        return f"{self.prefix}{self.connector}{text}"


def order_entries(nodes: Iterable[TraversalNode]) -> list[TraversalNode]:
    """Directories first, then files; each group by name (codepoint order)."""
    nodes = list(nodes)
    dirs = sorted((n for n in nodes if n.is_dir), key=lambda n: n.name)
    files = sorted((n for n in nodes if not n.is_dir), key=lambda n: n.name)
    return dirs + files


def entry_line(
    node: TraversalNode, prefix: str, is_last: bool, config: TraversalConfig
) -> RenderLine:
    """Build the row for one surviving entry."""
    style = classify(node)
    name = f"{node.name}/" if style is Style.DIRECTORY else node.name
    return RenderLine(
        prefix=prefix,
        connector=GLYPHS.last_branch if is_last else GLYPHS.branch,
        name=name,
        style=style,
        target=node.link_target if node.is_symlink else None,
        meta=metadata(node, config) if config.show_meta else (),
    )


def summary_line(totals: SubtreeTotals) -> RenderLine:
    return RenderLine(
        name=(
            f"{totals.directories} directories, {totals.files} files, "
            f"{human_size(totals.disk_usage)} total"
        ),
        style=Style.DIM,
    )


def render(root: Path, config: TraversalConfig | None = None) -> Iterator[RenderLine]:
    """Render *root* as a depth-bounded tree followed by a summary.

    The root is validated eagerly; lines are produced lazily, one
    directory listing at a time.

    Args:
        root: Directory to render.
        config: Traversal configuration. Defaults to ``TraversalConfig()``.

    Returns:
        Iterator[RenderLine]: Header, entry rows, blank line, summary.

    Raises:
        NotADirectoryError: If *root* is missing, not a directory, or unreadable.
    """
    opts = config or TraversalConfig()
    root = check_root(root)
    return _render(root, opts)


def _render(root: Path, config: TraversalConfig) -> Iterator[RenderLine]:
    pipeline = build_pipeline(root, config)

    yield RenderLine(name=str(root), style=Style.BOLD)
    yield from _walk(root, config, pipeline)
    yield RenderLine()
    yield summary_line(measure_subtree(root, config.show_hidden))


def _walk(
    root: Path, config: TraversalConfig, pipeline: FilterPipeline
) -> Iterator[RenderLine]:
    """Depth-first walk with an explicit stack.

    Stack items: (node, prefix, depth, is_last_sibling). Children are
    listed only when their parent is popped, so at most one pending
    listing per open directory is held in memory.
    """
    stack: list[tuple[TraversalNode, str, int, bool]] = []

    def push_children(directory: Path, prefix: str, depth: int) -> None:
        if depth > config.max_depth:
            return
        children = order_entries(pipeline.apply(list_children(directory)))
        # Push in reverse so that the first child is popped first.
        for i in range(len(children) - 1, -1, -1):
            stack.append((children[i], prefix, depth, i == len(children) - 1))

    push_children(root, "", 1)

    while stack:
        node, prefix, depth, is_last = stack.pop()
        yield entry_line(node, prefix, is_last, config)

        # Symlinks are never descended, even when they point at directories.
        if node.kind == "dir":
            next_prefix = prefix + (GLYPHS.space if is_last else GLYPHS.vertical)
            push_children(node.path, next_prefix, depth + 1)


def format_lines(lines: Iterable[RenderLine], color: bool) -> Iterator[str]:
    for line in lines:
        yield line.format(color)
