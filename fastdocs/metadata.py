"""Frontmatter metadata lookups for markdown documents."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import frontmatter

from .logging import get_logger

logger = get_logger("metadata")


@dataclass(frozen=True)
class DocumentMetadata:
    """Ordering and title fields read from a document's frontmatter."""

    order: Optional[float] = None
    title: Optional[str] = None


EMPTY_METADATA = DocumentMetadata()


class FrontmatterReader:
    """Reads `order` and `title` from a leading frontmatter block, never raising."""

    def read(self, path: Path) -> DocumentMetadata:
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("Skipping metadata for %s: %s", path, exc)
            return EMPTY_METADATA
        return self.parse(text, source=str(path))

    def parse(self, text: str, *, source: str = "<string>") -> DocumentMetadata:
        try:
            post = frontmatter.loads(text)
        except Exception as exc:  # yaml, toml and json handlers raise unrelated error types
            logger.debug("Ignoring unreadable frontmatter in %s: %s", source, exc)
            return EMPTY_METADATA
        return metadata_from_mapping(post.metadata)


def metadata_from_mapping(data: Mapping[str, Any]) -> DocumentMetadata:
    return DocumentMetadata(order=_as_order(data.get("order")), title=_as_title(data.get("title")))


def _as_order(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return None if math.isnan(number) else number
    if isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
        return None if math.isnan(number) else number
    return None


def _as_title(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (str, int, float)):
        title = str(value).strip()
        return title or None
    return None


__all__ = ["DocumentMetadata", "EMPTY_METADATA", "FrontmatterReader", "metadata_from_mapping"]
