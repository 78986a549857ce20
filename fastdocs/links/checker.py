"""Aggregates broken local links across a documents tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from ..logging import get_logger
from ..models import BrokenLink, BrokenLinkMap
from ..scanner import TreeScanner, validate_root
from .extractor import LinkExtractor
from .resolver import LinkResolver

_RULE = "─" * 60

logger = get_logger("links")


@dataclass
class LinkReport:
    """Broken links grouped by the relative path of the document containing them."""

    root: Path
    broken: BrokenLinkMap = field(default_factory=dict)
    files_checked: int = 0

    @property
    def file_count(self) -> int:
        return len(self.broken)

    @property
    def total_broken(self) -> int:
        return sum(len(links) for links in self.broken.values())

    @property
    def ok(self) -> bool:
        return not self.broken

    def to_dict(self) -> Dict[str, List[Dict[str, object]]]:
        return {path: [link.to_dict() for link in links] for path, links in self.broken.items()}


class LinkChecker:
    """Extracts and resolves local links in every markdown document under a root."""

    def __init__(
        self,
        *,
        scanner: TreeScanner | None = None,
        extractor: LinkExtractor | None = None,
    ) -> None:
        self.scanner = scanner or TreeScanner()
        self.extractor = extractor or LinkExtractor()

    def check(self, path: Path) -> LinkReport:
        root = validate_root(path)
        resolver = LinkResolver(root)
        report = LinkReport(root=root)

        for document in self.scanner.iter_markdown_files(root):
            report.files_checked += 1
            relative = document.relative_to(root).as_posix()
            try:
                text = document.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("Skipping unreadable document %s: %s", relative, exc)
                continue

            broken = [
                BrokenLink(target=ref.target, line=ref.line_number, text=ref.display_text)
                for ref in self.extractor.extract(text, source_file=str(document))
                if not resolver.is_resolved(ref)
            ]
            if broken:
                report.broken[relative] = broken

        logger.debug(
            "Checked %d documents, %d broken link(s)", report.files_checked, report.total_broken
        )
        return report


def format_report(report: LinkReport) -> str:
    """Render a human-readable link check summary."""
    lines: List[str] = ["", "Link Check Results", "", _RULE, ""]
    if report.ok:
        lines.extend(["✓ All links are valid!", ""])
    else:
        lines.append(
            f"✗ Found {report.total_broken} broken link(s) in {report.file_count} file(s)"
        )
        lines.append("")
        for path, links in report.broken.items():
            lines.append(f"  {path}:")
            for link in links:
                lines.append(f"    Line {link.line}: {link.target}")
                lines.append(f'    Text: "{link.text}"')
                lines.append("")
        lines.extend([_RULE, "", "  Fix these links to ensure proper navigation."])
    lines.extend(["", _RULE, ""])
    return "\n".join(lines)


__all__ = ["LinkChecker", "LinkReport", "format_report"]
