"""Compiles a documents directory into ordered sidebar navigation."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Protocol, Tuple

from ..metadata import EMPTY_METADATA, DocumentMetadata, FrontmatterReader
from ..models import (
    INDEX_FILENAME,
    MARKDOWN_SUFFIX,
    ORDER_SENTINEL,
    DocNode,
    NodeKind,
    SidebarItem,
)
from ..scanner import DirEntry, TreeScanner, is_ignored

DEFAULT_TITLE_MAX_LENGTH = 27
# Fraction of the limit after which a space is an acceptable cut point.
WORD_BOUNDARY_RATIO = 0.7
ELLIPSIS = "..."


def title_from_slug(slug: str) -> str:
    """Turn `getting-started` into `Getting Started`."""
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-"))


def truncate_title(
    title: str,
    max_length: int = DEFAULT_TITLE_MAX_LENGTH,
    *,
    boundary_ratio: float = WORD_BOUNDARY_RATIO,
) -> str:
    """Shorten a display title to `max_length` code points plus an ellipsis."""
    if len(title) <= max_length:
        return title
    truncated = title[:max_length]
    last_space = truncated.rfind(" ")
    if last_space >= 0 and last_space >= max_length * boundary_ratio:
        return truncated[:last_space] + ELLIPSIS
    return truncated + ELLIPSIS


class DocumentSource(Protocol):
    """Read-only view of a documents tree addressed by posix relative paths."""

    def list_entries(self, relative_dir: str) -> List[DirEntry]:
        ...

    def read_metadata(self, relative_path: str) -> DocumentMetadata:
        ...


class FileSystemSource:
    """Document source backed by a real directory."""

    def __init__(
        self,
        root: Path,
        *,
        scanner: TreeScanner | None = None,
        reader: FrontmatterReader | None = None,
    ) -> None:
        self.root = Path(root)
        self.scanner = scanner or TreeScanner()
        self.reader = reader or FrontmatterReader()

    def list_entries(self, relative_dir: str) -> List[DirEntry]:
        return self.scanner.list_entries(self.root / relative_dir if relative_dir else self.root)

    def read_metadata(self, relative_path: str) -> DocumentMetadata:
        return self.reader.read(self.root / relative_path)


class InMemorySource:
    """Document source built from a `relative path -> text` mapping."""

    def __init__(
        self, documents: Mapping[str, str], *, reader: FrontmatterReader | None = None
    ) -> None:
        self._documents = {path.strip("/"): text for path, text in documents.items()}
        self._reader = reader or FrontmatterReader()
        self._children: Dict[str, Dict[str, NodeKind]] = {"": {}}
        for path in self._documents:
            if is_ignored(path):
                continue
            parts = path.split("/")
            for depth in range(len(parts)):
                parent = "/".join(parts[:depth])
                kind = NodeKind.FILE if depth == len(parts) - 1 else NodeKind.DIR
                self._children.setdefault(parent, {})[parts[depth]] = kind

    def list_entries(self, relative_dir: str) -> List[DirEntry]:
        children = self._children.get(relative_dir)
        if children is None:
            raise FileNotFoundError(f"Directory not found: {relative_dir}")
        return [DirEntry(name, kind) for name, kind in sorted(children.items())]

    def read_metadata(self, relative_path: str) -> DocumentMetadata:
        text = self._documents.get(relative_path)
        if text is None:
            return EMPTY_METADATA
        return self._reader.parse(text, source=relative_path)


@dataclass(frozen=True)
class NavigationSnapshot:
    """Immutable preorder listing of a compiled tree with parent/child indices."""

    nodes: Tuple[DocNode, ...]
    parents: Tuple[Optional[int], ...]
    children: Tuple[Tuple[int, ...], ...]

    @classmethod
    def from_root(cls, root: DocNode) -> "NavigationSnapshot":
        nodes: List[DocNode] = []
        parents: List[Optional[int]] = []
        children: List[List[int]] = []

        def visit(node: DocNode, parent: Optional[int]) -> None:
            index = len(nodes)
            nodes.append(node)
            parents.append(parent)
            children.append([])
            if parent is not None:
                children[parent].append(index)
            for child in node.children:
                visit(child, index)

        visit(root, None)
        return cls(
            nodes=tuple(nodes),
            parents=tuple(parents),
            children=tuple(tuple(indices) for indices in children),
        )

    @property
    def root(self) -> DocNode:
        return self.nodes[0]

    def parent_of(self, index: int) -> Optional[DocNode]:
        parent = self.parents[index]
        return None if parent is None else self.nodes[parent]

    def children_of(self, index: int) -> Tuple[DocNode, ...]:
        return tuple(self.nodes[child] for child in self.children[index])

    def find(self, relative_path: str) -> Optional[int]:
        for index, node in enumerate(self.nodes):
            if node.relative_path == relative_path:
                return index
        return None


class SidebarCompiler:
    """Builds the ordered, pruned navigation tree for a documents directory."""

    def __init__(
        self,
        *,
        title_max_length: int = DEFAULT_TITLE_MAX_LENGTH,
        boundary_ratio: float = WORD_BOUNDARY_RATIO,
        collapse_folders: bool = False,
        scanner: TreeScanner | None = None,
        reader: FrontmatterReader | None = None,
    ) -> None:
        self.title_max_length = title_max_length
        self.boundary_ratio = boundary_ratio
        self.collapse_folders = collapse_folders
        self.scanner = scanner or TreeScanner()
        self.reader = reader or FrontmatterReader()

    def compile(self, root: Path) -> List[SidebarItem]:
        """Return sidebar items for the directory at `root`."""
        return self.render(self.snapshot(root))

    def compile_dicts(self, root: Path) -> List[Dict[str, object]]:
        return [item.to_dict() for item in self.compile(root)]

    def snapshot(self, root: Path) -> NavigationSnapshot:
        source = FileSystemSource(root, scanner=self.scanner, reader=self.reader)
        return self.snapshot_from(source, root_name=Path(root).name)

    def snapshot_from(self, source: DocumentSource, *, root_name: str = "") -> NavigationSnapshot:
        """Build a snapshot from any document source, such as `InMemorySource`."""
        return NavigationSnapshot.from_root(self._build_directory(source, "", root_name))

    def render(self, snapshot: NavigationSnapshot) -> List[SidebarItem]:
        return [self._render_node(node) for node in snapshot.root.children]

    def _render_node(self, node: DocNode) -> SidebarItem:
        if node.is_dir:
            return SidebarItem(
                text=node.title,
                link=f"/{node.relative_path}/" if node.has_index else None,
                collapsed=self.collapse_folders,
                items=tuple(self._render_node(child) for child in node.children),
            )
        return SidebarItem(text=node.title, link=f"/{_strip_suffix(node.relative_path)}")

    def _build_directory(self, source: DocumentSource, relative_dir: str, name: str) -> DocNode:
        entries = source.list_entries(relative_dir)
        has_index = any(
            entry.name == INDEX_FILENAME and not entry.is_dir for entry in entries
        )
        metadata = (
            source.read_metadata(_join(relative_dir, INDEX_FILENAME))
            if has_index
            else EMPTY_METADATA
        )

        children: List[DocNode] = []
        for entry in entries:
            relative_path = _join(relative_dir, entry.name)
            if entry.is_dir:
                child = self._build_directory(source, relative_path, entry.name)
                if child.children:
                    children.append(child)
            elif entry.name.endswith(MARKDOWN_SUFFIX) and entry.name != INDEX_FILENAME:
                children.append(self._build_file(source, relative_path, entry.name))
        children.sort(key=DocNode.sort_key)

        return DocNode(
            name=name,
            relative_path=relative_dir,
            kind=NodeKind.DIR,
            order=_order_or_sentinel(metadata),
            title=self._title(metadata.title or title_from_slug(name)),
            has_index=has_index,
            children=tuple(children),
        )

    def _build_file(self, source: DocumentSource, relative_path: str, name: str) -> DocNode:
        metadata = source.read_metadata(relative_path)
        return DocNode(
            name=name,
            relative_path=relative_path,
            kind=NodeKind.FILE,
            order=_order_or_sentinel(metadata),
            title=self._title(metadata.title or title_from_slug(_strip_suffix(name))),
        )

    def _title(self, title: str) -> str:
        return truncate_title(title, self.title_max_length, boundary_ratio=self.boundary_ratio)


def _order_or_sentinel(metadata: DocumentMetadata) -> float:
    return ORDER_SENTINEL if metadata.order is None else metadata.order


def _strip_suffix(path: str) -> str:
    return path[: -len(MARKDOWN_SUFFIX)] if path.endswith(MARKDOWN_SUFFIX) else path


def _join(relative_dir: str, name: str) -> str:
    return posixpath.join(relative_dir, name) if relative_dir else name


__all__ = [
    "DocumentSource",
    "FileSystemSource",
    "InMemorySource",
    "NavigationSnapshot",
    "SidebarCompiler",
    "title_from_slug",
    "truncate_title",
]
