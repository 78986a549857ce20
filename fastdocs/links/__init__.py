"""Local link extraction and integrity checking."""

from .checker import LinkChecker, LinkReport, format_report
from .extractor import LinkExtractor
from .resolver import LinkResolver

__all__ = ["LinkChecker", "LinkExtractor", "LinkReport", "LinkResolver", "format_report"]
