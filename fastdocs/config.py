"""Configuration loading for fastdocs (.fastdocs)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

import yaml

from .logging import get_logger

CONFIG_FILENAME = ".fastdocs"

_KNOWN_KEYS = {
    "title",
    "description",
    "logo",
    "favicon",
    "search",
    "sidebar",
    "outline",
    "preview",
}
_ICON_KEYS = {"type", "icon", "color"}
_SIDEBAR_KEYS = {"collapseFolders", "titleMaxLength"}
_OUTLINE_KEYS = {"enabled", "depth", "label"}
_PREVIEW_KEYS = {"debounceMs", "cooldownMs"}

logger = get_logger("config")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class IconConfig:
    """Icon settings used for both logo and favicon."""

    type: str = "lucide"
    icon: str = "book-open"
    color: str = "#62d144"
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {**self.extra, "type": self.type, "icon": self.icon, "color": self.color}


@dataclass
class SidebarConfig:
    """Sidebar presentation options."""

    collapse_folders: bool = False
    title_max_length: int = 27
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class OutlineConfig:
    """On-page outline options."""

    enabled: bool = True
    depth: Tuple[int, int] = (2, 3)
    label: str = "On this page"
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class PreviewSettings:
    """Debounce and cooldown windows for the preview synchronizer."""

    debounce_ms: int = 300
    cooldown_ms: int = 1000
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    @property
    def cooldown_seconds(self) -> float:
        return self.cooldown_ms / 1000.0


@dataclass
class SiteConfig:
    """Represents the settings defined in .fastdocs merged with defaults."""

    root: Path
    title: str
    description: str = "Documentation"
    logo: IconConfig = field(default_factory=IconConfig)
    favicon: IconConfig = field(default_factory=IconConfig)
    search: bool = True
    sidebar: SidebarConfig = field(default_factory=SidebarConfig)
    outline: OutlineConfig = field(default_factory=OutlineConfig)
    preview: PreviewSettings = field(default_factory=PreviewSettings)
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Return the merged record handed to the rendering layer."""
        payload: Dict[str, Any] = dict(self.extra)
        payload.update(
            {
                "title": self.title,
                "description": self.description,
                "logo": self.logo.to_dict(),
                "favicon": self.favicon.to_dict(),
                "search": self.search,
                "sidebar": {
                    **self.sidebar.extra,
                    "collapseFolders": self.sidebar.collapse_folders,
                    "titleMaxLength": self.sidebar.title_max_length,
                },
                "outline": {
                    **self.outline.extra,
                    "enabled": self.outline.enabled,
                    "depth": list(self.outline.depth),
                    "label": self.outline.label,
                },
                "preview": {
                    **self.preview.extra,
                    "debounceMs": self.preview.debounce_ms,
                    "cooldownMs": self.preview.cooldown_ms,
                },
            }
        )
        return payload


def default_config(root: Path) -> SiteConfig:
    root = root.expanduser().resolve()
    return SiteConfig(root=root, title=root.name or "Documentation")


def load_config(docs_path: Path) -> SiteConfig:
    """Load configuration for a docs root, falling back to defaults on any parse problem."""
    root = docs_path.expanduser().resolve()
    config_file = root / CONFIG_FILENAME
    if not config_file.is_file():
        return default_config(root)

    try:
        data = read_config_record(config_file)
    except ConfigError as exc:
        logger.warning("Could not parse %s: %s", CONFIG_FILENAME, exc)
        logger.warning("Using default configuration")
        return default_config(root)

    return build_config(root, data)


def read_config_record(path: Path) -> Dict[str, Any]:
    """Read the raw key/value record. JSON is the canonical format, YAML is accepted."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}

    try:
        loaded = json.loads(text)
    except json.JSONDecodeError:
        try:
            loaded = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return loaded


def build_config(root: Path, data: Dict[str, Any]) -> SiteConfig:
    """Merge a raw record over the defaults."""
    config = default_config(root)

    title = _as_str(data.get("title"))
    if title:
        config.title = title
    description = _as_str(data.get("description"))
    if description is not None:
        config.description = description

    config.logo = _as_icon(data.get("logo"), config.logo)
    config.favicon = _as_icon(data.get("favicon"), config.favicon)

    search = _as_bool(data.get("search"))
    if search is not None:
        config.search = search

    sidebar_data = _as_dict(data.get("sidebar"))
    collapse = _as_bool(sidebar_data.get("collapseFolders"))
    if collapse is not None:
        config.sidebar.collapse_folders = collapse
    max_length = _as_int(sidebar_data.get("titleMaxLength"))
    if max_length is not None and max_length > 0:
        config.sidebar.title_max_length = max_length
    config.sidebar.extra = _unknown_keys(sidebar_data, _SIDEBAR_KEYS)

    outline_data = _as_dict(data.get("outline"))
    enabled = _as_bool(outline_data.get("enabled"))
    if enabled is not None:
        config.outline.enabled = enabled
    depth = _as_depth(outline_data.get("depth"))
    if depth is not None:
        config.outline.depth = depth
    label = _as_str(outline_data.get("label"))
    if label is not None:
        config.outline.label = label
    config.outline.extra = _unknown_keys(outline_data, _OUTLINE_KEYS)

    preview_data = _as_dict(data.get("preview"))
    debounce = _as_int(preview_data.get("debounceMs"))
    if debounce is not None and debounce >= 0:
        config.preview.debounce_ms = debounce
    cooldown = _as_int(preview_data.get("cooldownMs"))
    if cooldown is not None and cooldown >= 0:
        config.preview.cooldown_ms = cooldown
    config.preview.extra = _unknown_keys(preview_data, _PREVIEW_KEYS)

    config.extra = _unknown_keys(data, _KNOWN_KEYS)
    return config


def _as_icon(value: Any, default: IconConfig) -> IconConfig:
    data = _as_dict(value)
    if not data:
        return default
    return IconConfig(
        type=_as_str(data.get("type")) or default.type,
        icon=_as_str(data.get("icon")) or default.icon,
        color=_as_str(data.get("color")) or default.color,
        extra=_unknown_keys(data, _ICON_KEYS),
    )


def _unknown_keys(data: Dict[str, Any], known: Set[str]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if key not in known}


def _as_depth(value: Any) -> Optional[Tuple[int, int]]:
    if isinstance(value, int) and not isinstance(value, bool):
        return (value, value)
    if isinstance(value, Sequence) and not isinstance(value, str) and len(value) == 2:
        levels: List[int] = []
        for item in value:
            level = _as_int(item)
            if level is None:
                return None
            levels.append(level)
        return (levels[0], levels[1])
    return None


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None
