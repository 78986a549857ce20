"""Core data models shared across fastdocs components."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

ORDER_SENTINEL = math.inf
MARKDOWN_SUFFIX = ".md"
INDEX_FILENAME = "index.md"


class NodeKind(str, Enum):
    """Kind of entry in the documents tree."""

    FILE = "file"
    DIR = "dir"


@dataclass(frozen=True)
class DocNode:
    """Immutable node of a compiled documents tree."""

    name: str
    relative_path: str
    kind: NodeKind
    order: float = ORDER_SENTINEL
    title: str = ""
    has_index: bool = False
    children: Tuple["DocNode", ...] = ()

    @property
    def is_dir(self) -> bool:
        return self.kind is NodeKind.DIR

    def sort_key(self) -> Tuple[float, str]:
        return (self.order, self.name)


@dataclass(frozen=True)
class SidebarItem:
    """Navigation entry consumed by the rendering layer."""

    text: str
    link: Optional[str] = None
    collapsed: Optional[bool] = None
    items: Optional[Tuple["SidebarItem", ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"text": self.text}
        if self.link is not None:
            payload["link"] = self.link
        if self.collapsed is not None:
            payload["collapsed"] = self.collapsed
        if self.items is not None:
            payload["items"] = [item.to_dict() for item in self.items]
        return payload


@dataclass(frozen=True)
class LinkReference:
    """Local link found in a markdown document."""

    source_file: str
    line_number: int
    target: str
    display_text: str
    raw_target: str = ""


@dataclass(frozen=True)
class BrokenLink:
    """Link whose target could not be found under the documents root."""

    target: str
    line: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"target": self.target, "line": self.line, "text": self.text}


class WatchEventKind(str, Enum):
    """File-system change notification kinds."""

    ADDED = "added"
    DELETED = "deleted"
    CHANGED = "changed"
    ADDED_DIR = "addedDir"
    DELETED_DIR = "deletedDir"


STRUCTURAL_EVENTS = frozenset(
    {
        WatchEventKind.ADDED,
        WatchEventKind.DELETED,
        WatchEventKind.ADDED_DIR,
        WatchEventKind.DELETED_DIR,
    }
)


@dataclass(frozen=True)
class WatchEvent:
    """Single change notification for a path under the live documents root."""

    kind: WatchEventKind
    path: str
    timestamp: float = field(default_factory=time.monotonic)


BrokenLinkMap = Dict[str, List[BrokenLink]]
