"""Sidebar navigation compilation."""

from .compiler import (
    DocumentSource,
    FileSystemSource,
    InMemorySource,
    NavigationSnapshot,
    SidebarCompiler,
    title_from_slug,
    truncate_title,
)

__all__ = [
    "DocumentSource",
    "FileSystemSource",
    "InMemorySource",
    "NavigationSnapshot",
    "SidebarCompiler",
    "title_from_slug",
    "truncate_title",
]
