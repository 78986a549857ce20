"""Tests for the staging area lifecycle."""

from __future__ import annotations

import atexit
import json
import os
import shutil
import signal
from pathlib import Path
from typing import Callable, List

import pytest

from fastdocs.config import load_config
from fastdocs.preview import StagingArea
from fastdocs.preview.staging import ARTIFACTS_DIR, CONFIG_ARTIFACT, SIDEBAR_ARTIFACT
from tests._fixtures.docs_builder import DocsBuilder


def _staging(docs_builder: DocsBuilder, tmp_path: Path) -> StagingArea:
    temp_root = tmp_path / "tmp"
    temp_root.mkdir()
    return StagingArea(docs_builder.path(), temp_dir=temp_root)


def test_create_copies_tree_without_ignored_directories(
    docs_builder: DocsBuilder, tmp_path: Path
) -> None:
    docs_builder.write(
        {
            "index.md": "# Welcome\n",
            "guide/setup.md": "# Setup\n",
            "node_modules/pkg/readme.md": "# Pkg\n",
            ".git/HEAD": "ref\n",
            "dist/out.html": "<html></html>\n",
        }
    )
    staging = _staging(docs_builder, tmp_path)

    root = staging.create()

    assert root.parent == tmp_path / "tmp"
    assert root.name.startswith("fastdocs-")
    assert (root / "index.md").read_text(encoding="utf-8") == "# Welcome\n"
    assert (root / "guide" / "setup.md").read_text(encoding="utf-8") == "# Setup\n"
    assert not (root / "node_modules").exists()
    assert not (root / ".git").exists()
    assert not (root / "dist").exists()
    assert (root / ARTIFACTS_DIR).is_dir()


def test_create_synthesizes_missing_index_documents(
    docs_builder: DocsBuilder, tmp_path: Path
) -> None:
    docs_builder.write(
        {
            "getting-started/install.md": "# Install\n",
            "reference/index.md": "# Reference\n",
            "reference/cli/commands.md": "# Commands\n",
        }
    )
    staging = _staging(docs_builder, tmp_path)

    root = staging.create()

    assert (root / "index.md").read_text(encoding="utf-8") == (
        "# Documentation\n\n<FullContents />\n"
    )
    assert (root / "getting-started" / "index.md").read_text(encoding="utf-8") == (
        "# Getting Started\n\n<SubPages />\n"
    )
    assert (root / "reference" / "index.md").read_text(encoding="utf-8") == "# Reference\n"
    assert (root / "reference" / "cli" / "index.md").read_text(encoding="utf-8") == (
        "# Cli\n\n<SubPages />\n"
    )
    assert not (root / ARTIFACTS_DIR / "index.md").exists()
    assert not (docs_builder.path() / "index.md").exists()


def test_write_artifacts_emits_sidebar_and_config(
    docs_builder: DocsBuilder, tmp_path: Path
) -> None:
    docs_builder.write(
        {
            ".fastdocs": '{"title": "Handbook", "sidebar": {"collapseFolders": true}}',
            "guide/intro.md": "---\norder: 1\n---\n# Intro\n",
            "about.md": "# About\n",
        }
    )
    staging = _staging(docs_builder, tmp_path)
    root = staging.create()

    staging.write_artifacts(load_config(docs_builder.path()))

    sidebar = json.loads((root / ARTIFACTS_DIR / SIDEBAR_ARTIFACT).read_text(encoding="utf-8"))
    config = json.loads((root / ARTIFACTS_DIR / CONFIG_ARTIFACT).read_text(encoding="utf-8"))
    assert sidebar == [
        {"text": "About", "link": "/about"},
        {
            "text": "Guide",
            "link": "/guide/",
            "collapsed": True,
            "items": [{"text": "Intro", "link": "/guide/intro"}],
        },
    ]
    assert config["title"] == "Handbook"
    assert config["sidebar"]["collapseFolders"] is True


def test_teardown_is_idempotent(docs_builder: DocsBuilder, tmp_path: Path) -> None:
    docs_builder.write({"index.md": "# Home\n"})
    staging = _staging(docs_builder, tmp_path)
    root = staging.create()

    staging.teardown()
    staging.teardown()

    assert not root.exists()
    assert staging.path is None


def test_teardown_tolerates_directory_already_removed(
    docs_builder: DocsBuilder, tmp_path: Path
) -> None:
    docs_builder.write({"index.md": "# Home\n"})
    staging = _staging(docs_builder, tmp_path)
    root = staging.create()
    shutil.rmtree(root)

    staging.teardown()

    assert staging.path is None


def test_create_keeps_dangling_symlinks_as_links(
    docs_builder: DocsBuilder, tmp_path: Path
) -> None:
    docs_builder.write({"index.md": "# Home\n"})
    os.symlink(docs_builder.path() / "gone.md", docs_builder.path() / "stale.md")
    staging = _staging(docs_builder, tmp_path)

    root = staging.create()

    assert (root / "stale.md").is_symlink()
    assert (root / "index.md").read_text(encoding="utf-8") == "# Home\n"


def test_create_does_not_descend_into_directory_symlinks(
    docs_builder: DocsBuilder, tmp_path: Path
) -> None:
    docs_builder.write({"guide/setup.md": "# Setup\n"})
    os.symlink(docs_builder.path(), docs_builder.path() / "guide" / "loop")
    staging = _staging(docs_builder, tmp_path)

    root = staging.create()

    assert (root / "guide" / "loop").is_symlink()
    assert (root / "guide" / "index.md").is_file()
    assert not (docs_builder.path() / "guide" / "index.md").exists()
    assert not (docs_builder.path() / "index.md").exists()


def test_create_logs_copy_errors_and_continues(
    docs_builder: DocsBuilder,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    docs_builder.write({"guide/setup.md": "# Setup\n"})
    staging = _staging(docs_builder, tmp_path)

    def failing_copytree(src: Path, dst: Path, **kwargs: object) -> None:
        Path(dst, "guide").mkdir(parents=True)
        raise shutil.Error([(str(Path(src, "locked.md")), str(dst), "Permission denied")])

    monkeypatch.setattr(shutil, "copytree", failing_copytree)

    with caplog.at_level("ERROR", logger="fastdocs"):
        root = staging.create()

    assert "Error copying" in caplog.text
    assert "locked.md" in caplog.text
    assert (root / "guide" / "index.md").is_file()


def test_signal_handler_tears_down_and_exits_cleanly(
    docs_builder: DocsBuilder, tmp_path: Path
) -> None:
    docs_builder.write({"index.md": "# Home\n"})
    staging = _staging(docs_builder, tmp_path)
    root = staging.create()

    with pytest.raises(SystemExit) as excinfo:
        staging._handle_signal(signal.SIGTERM, None)

    assert excinfo.value.code == 0
    assert not root.exists()
    assert staging.path is None
    staging.teardown()


def test_register_cleanup_installs_exit_and_signal_hooks(
    docs_builder: DocsBuilder, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    docs_builder.write({"index.md": "# Home\n"})
    staging = _staging(docs_builder, tmp_path)
    staging.create()
    registered: List[Callable[[], None]] = []
    monkeypatch.setattr(atexit, "register", registered.append)
    previous = {signum: signal.getsignal(signum) for signum in (signal.SIGINT, signal.SIGTERM)}

    try:
        staging.register_cleanup()

        assert registered == [staging.teardown]
        assert signal.getsignal(signal.SIGINT) == staging._handle_signal
        assert signal.getsignal(signal.SIGTERM) == staging._handle_signal
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
        staging.teardown()
