"""Tests for fastdocs.config."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from fastdocs.config import (
    CONFIG_FILENAME,
    ConfigError,
    SiteConfig,
    load_config,
    read_config_record,
)


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, SiteConfig)
    assert config.root == tmp_path.resolve()
    assert config.title == tmp_path.name
    assert config.description == "Documentation"
    assert config.logo.icon == "book-open"
    assert config.favicon.color == "#62d144"
    assert config.search is True
    assert config.sidebar.collapse_folders is False
    assert config.sidebar.title_max_length == 27
    assert config.outline.enabled is True
    assert config.outline.depth == (2, 3)
    assert config.outline.label == "On this page"
    assert config.preview.debounce_ms == 300
    assert config.preview.cooldown_ms == 1000
    assert config.extra == {}


def test_load_config_merges_json_record(tmp_path: Path) -> None:
    record = {
        "title": "Handbook",
        "description": "Team handbook",
        "logo": {"type": "emoji", "icon": "📘"},
        "search": False,
        "sidebar": {"collapseFolders": True},
        "outline": {"depth": [2, 4]},
        "preview": {"debounceMs": 50},
        "socialLinks": [{"icon": "github", "link": "https://example.com"}],
    }
    (tmp_path / CONFIG_FILENAME).write_text(json.dumps(record), encoding="utf-8")

    config = load_config(tmp_path)

    assert config.title == "Handbook"
    assert config.description == "Team handbook"
    assert config.logo.type == "emoji"
    assert config.logo.icon == "📘"
    assert config.logo.color == "#62d144"
    assert config.search is False
    assert config.sidebar.collapse_folders is True
    assert config.outline.enabled is True
    assert config.outline.depth == (2, 4)
    assert config.outline.label == "On this page"
    assert config.preview.debounce_ms == 50
    assert config.preview.cooldown_ms == 1000
    assert config.extra == {"socialLinks": [{"icon": "github", "link": "https://example.com"}]}

    payload = config.to_dict()
    assert payload["title"] == "Handbook"
    assert payload["sidebar"]["collapseFolders"] is True
    assert payload["outline"]["depth"] == [2, 4]
    assert payload["socialLinks"][0]["icon"] == "github"


def test_load_config_accepts_yaml(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(
        """
title: YAML Docs
search: "no"
outline:
  depth: deep
  label: Contents
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.title == "YAML Docs"
    assert config.search is False
    assert config.outline.depth == (2, 3)
    assert config.outline.label == "Contents"


def test_load_config_warns_and_falls_back_on_malformed_record(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    (tmp_path / CONFIG_FILENAME).write_text('{"title": "Broken",\n  - [', encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="fastdocs"):
        config = load_config(tmp_path)

    assert config.title == tmp_path.name
    assert any("Could not parse" in record.message for record in caplog.records)


def test_read_config_record_rejects_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / CONFIG_FILENAME
    path.write_text("[1, 2, 3]", encoding="utf-8")

    with pytest.raises(ConfigError):
        read_config_record(path)

    assert load_config(tmp_path).title == tmp_path.name


def test_read_config_record_treats_blank_file_as_empty(tmp_path: Path) -> None:
    path = tmp_path / CONFIG_FILENAME
    path.write_text("\n\n", encoding="utf-8")

    assert read_config_record(path) == {}


def test_unknown_nested_keys_pass_through_to_record(tmp_path: Path) -> None:
    record = {
        "logo": {"icon": "rocket", "size": 24},
        "favicon": {"href": "/favicon.ico"},
        "sidebar": {"titleMaxLength": 40, "foo": 1},
        "outline": {"level": "deep"},
        "preview": {"port": 5173},
    }
    (tmp_path / CONFIG_FILENAME).write_text(json.dumps(record), encoding="utf-8")

    config = load_config(tmp_path)
    payload = config.to_dict()

    assert config.sidebar.title_max_length == 40
    assert payload["sidebar"] == {"foo": 1, "collapseFolders": False, "titleMaxLength": 40}
    assert payload["outline"]["level"] == "deep"
    assert payload["outline"]["label"] == "On this page"
    assert payload["preview"] == {"port": 5173, "debounceMs": 300, "cooldownMs": 1000}
    assert payload["logo"] == {"size": 24, "type": "lucide", "icon": "rocket", "color": "#62d144"}
    assert payload["favicon"]["href"] == "/favicon.ico"
    assert payload["favicon"]["icon"] == "book-open"
    assert config.extra == {}
