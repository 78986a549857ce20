"""Directory listing for documentation trees."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List

from .models import MARKDOWN_SUFFIX, NodeKind

IGNORED_DIRS = frozenset(
    {
        "node_modules",
        ".git",
        "dist",
        ".cache",
        ".vitepress",
        ".preview",
    }
)


@dataclass(frozen=True)
class DirEntry:
    """Immediate child of a scanned directory."""

    name: str
    kind: NodeKind

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIR


def is_ignored(relative_path: str) -> bool:
    """Return True when any segment of a posix relative path is in the ignore-set."""
    return any(part in IGNORED_DIRS for part in relative_path.split("/"))


def validate_root(path: Path) -> Path:
    """Resolve a documents root, raising when it is missing or not a directory."""
    root = Path(path).expanduser().resolve()
    if not root.exists():
        raise FileNotFoundError(f"Directory not found: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Path is not a directory: {root}")
    return root


class TreeScanner:
    """Lists directory entries while skipping dependency, VCS and build directories."""

    def list_entries(self, path: Path) -> List[DirEntry]:
        directory = Path(path)
        if not directory.exists():
            raise FileNotFoundError(f"Directory not found: {directory}")
        if not directory.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {directory}")

        entries: List[DirEntry] = []
        with os.scandir(directory) as iterator:
            for item in iterator:
                # Symlinked directories are listed as files so link cycles never recurse.
                if item.is_dir(follow_symlinks=False):
                    if item.name in IGNORED_DIRS:
                        continue
                    entries.append(DirEntry(item.name, NodeKind.DIR))
                else:
                    entries.append(DirEntry(item.name, NodeKind.FILE))
        entries.sort(key=lambda entry: entry.name)
        return entries

    def iter_markdown_files(self, root: Path) -> Iterator[Path]:
        """Yield every markdown document under root in a stable order."""
        for entry in self.list_entries(root):
            child = Path(root) / entry.name
            if entry.is_dir:
                yield from self.iter_markdown_files(child)
            elif entry.name.endswith(MARKDOWN_SUFFIX):
                yield child


__all__ = ["DirEntry", "IGNORED_DIRS", "TreeScanner", "is_ignored", "validate_root"]
