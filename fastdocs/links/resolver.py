"""Resolution of extracted link targets against the documents root."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from ..models import INDEX_FILENAME, MARKDOWN_SUFFIX, LinkReference


class LinkResolver:
    """Checks whether a link target exists as a file, a markdown page, or a directory index."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def candidate(self, reference: LinkReference) -> Path:
        target = reference.target
        if target.startswith("/"):
            base = self.root
            target = target[1:]
        else:
            source = Path(reference.source_file)
            if not source.is_absolute():
                source = self.root / source
            base = source.parent
        return Path(os.path.normpath(base / target))

    def resolve(self, reference: LinkReference) -> Optional[Path]:
        """Return the path that satisfies the link, or None when it is broken."""
        candidate = self.candidate(reference)
        if candidate.exists():
            return candidate
        if not str(candidate).endswith(MARKDOWN_SUFFIX):
            with_suffix = Path(str(candidate) + MARKDOWN_SUFFIX)
            if with_suffix.exists():
                return with_suffix
        index = candidate / INDEX_FILENAME
        if index.exists():
            return index
        return None

    def is_resolved(self, reference: LinkReference) -> bool:
        return self.resolve(reference) is not None


__all__ = ["LinkResolver"]
