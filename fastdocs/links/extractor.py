"""Line scanner that pulls local link targets out of markdown."""

from __future__ import annotations

import re
from typing import Iterator, List

from ..models import MARKDOWN_SUFFIX, LinkReference

_LINK_PATTERN = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_EXTERNAL_PREFIXES = ("http", "https", "//")
_LOCAL_PREFIXES = ("./", "../", "/")
_MIN_FENCE = 3


def leading_backticks(text: str) -> int:
    count = 0
    for char in text:
        if char != "`":
            break
        count += 1
    return count


def is_indented_code(line: str) -> bool:
    return line.startswith("    ") or line.startswith("\t")


def is_local_target(target: str) -> bool:
    if target.startswith(_EXTERNAL_PREFIXES):
        return False
    return MARKDOWN_SUFFIX in target or target.startswith(_LOCAL_PREFIXES)


class LinkExtractor:
    """Yields local link references, skipping fenced, indented and inline code.

    The only state carried between lines is the length of the currently open
    fence (0 when outside a fenced block). Inline code is detected per match by
    the parity of backticks seen earlier on the same line.
    """

    def __init__(self) -> None:
        self._fence = 0

    def extract(self, text: str, *, source_file: str = "") -> Iterator[LinkReference]:
        self._fence = 0
        for index, raw_line in enumerate(text.split("\n")):
            line = raw_line.rstrip("\r")
            if self._consume_fence(line):
                continue
            if self._fence or is_indented_code(line):
                continue
            yield from self.scan_line(line, line_number=index + 1, source_file=source_file)

    def extract_all(self, text: str, *, source_file: str = "") -> List[LinkReference]:
        return list(self.extract(text, source_file=source_file))

    def _consume_fence(self, line: str) -> bool:
        ticks = leading_backticks(line.strip())
        if ticks < _MIN_FENCE:
            return False
        if self._fence == 0:
            self._fence = ticks
        elif ticks >= self._fence:
            self._fence = 0
        return True

    def scan_line(
        self, line: str, *, line_number: int, source_file: str = ""
    ) -> Iterator[LinkReference]:
        """Scan a single prose line for `[text](target)` links."""
        backticks = 0
        position = 0
        for match in _LINK_PATTERN.finditer(line):
            start, end = match.span()
            backticks += line.count("`", position, start)
            position = start
            if backticks % 2:
                continue
            if start > 0 and line[start - 1] == "`" and end < len(line) and line[end] == "`":
                continue

            raw_target = match.group(2)
            if not is_local_target(raw_target):
                continue
            target = raw_target.split("#", 1)[0]
            if not target:
                continue
            yield LinkReference(
                source_file=source_file,
                line_number=line_number,
                target=target,
                display_text=match.group(1),
                raw_target=raw_target,
            )


__all__ = ["LinkExtractor", "is_local_target"]
