"""Disposable staging copy of a documents tree used for previews."""

from __future__ import annotations

import atexit
import json
import os
import shutil
import signal
import tempfile
import threading
from pathlib import Path
from typing import Any, List, Optional

from jinja2 import Environment, FileSystemLoader

from ..config import SiteConfig
from ..logging import get_logger
from ..models import INDEX_FILENAME
from ..navigation import SidebarCompiler, title_from_slug
from ..scanner import IGNORED_DIRS

ARTIFACTS_DIR = ".preview"
SIDEBAR_ARTIFACT = "sidebar.json"
CONFIG_ARTIFACT = "config.json"
ROOT_HEADING = "Documentation"
ROOT_PLACEHOLDER = "<FullContents />"
CHILD_PLACEHOLDER = "<SubPages />"
STAGING_PREFIX = "fastdocs-"

logger = get_logger("preview.staging")


def _create_env() -> Environment:
    loader = FileSystemLoader(str(Path(__file__).with_name("templates")))
    return Environment(
        loader=loader,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


class StagingArea:
    """Owns the staging directory for one preview session."""

    def __init__(
        self,
        docs_root: Path,
        *,
        temp_dir: Path | None = None,
        prefix: str = STAGING_PREFIX,
    ) -> None:
        self.docs_root = Path(docs_root)
        self._temp_dir = temp_dir
        self._prefix = prefix
        self._env = _create_env()
        self._lock = threading.Lock()
        self.path: Optional[Path] = None

    @property
    def artifacts_dir(self) -> Path:
        return self._require_path() / ARTIFACTS_DIR

    def create(self) -> Path:
        """Create a fresh staging directory, copy the tree and fill in missing index pages."""
        staging = Path(
            tempfile.mkdtemp(
                prefix=self._prefix,
                dir=str(self._temp_dir) if self._temp_dir is not None else None,
            )
        )
        self.path = staging
        try:
            shutil.copytree(
                self.docs_root,
                staging,
                symlinks=True,
                ignore=shutil.ignore_patterns(*IGNORED_DIRS),
                dirs_exist_ok=True,
            )
        except shutil.Error as exc:
            for source, _target, reason in exc.args[0]:
                logger.error("Error copying %s: %s", source, reason)
        (staging / ARTIFACTS_DIR).mkdir(exist_ok=True)
        created = self.ensure_index_documents()
        logger.debug("Staging created at %s (%d index stubs)", staging, len(created))
        return staging

    def ensure_index_documents(self) -> List[Path]:
        """Write a minimal index page into every staged directory that lacks one."""
        created: List[Path] = []
        self._fill_index(self._require_path(), is_root=True, created=created)
        return created

    def _fill_index(self, directory: Path, *, is_root: bool, created: List[Path]) -> None:
        try:
            entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
        except OSError as exc:
            logger.warning("Could not list %s: %s", directory, exc)
            return

        if not any(entry.name == INDEX_FILENAME for entry in entries):
            index_path = directory / INDEX_FILENAME
            try:
                content = self.render_index(directory.name, is_root=is_root)
                index_path.write_text(content, encoding="utf-8")
            except OSError as exc:
                logger.warning("Could not write %s: %s", index_path, exc)
            else:
                created.append(index_path)

        for entry in entries:
            if entry.name in IGNORED_DIRS or not entry.is_dir(follow_symlinks=False):
                continue
            self._fill_index(Path(entry.path), is_root=False, created=created)

    def render_index(self, directory_name: str, *, is_root: bool) -> str:
        template = self._env.get_template("index.md.j2")
        return template.render(
            heading=ROOT_HEADING if is_root else title_from_slug(directory_name),
            placeholder=ROOT_PLACEHOLDER if is_root else CHILD_PLACEHOLDER,
        )

    def write_artifacts(self, config: SiteConfig) -> None:
        """Compile navigation from the staged tree and write it next to the merged config."""
        compiler = SidebarCompiler(
            title_max_length=config.sidebar.title_max_length,
            collapse_folders=config.sidebar.collapse_folders,
        )
        sidebar = compiler.compile_dicts(self._require_path())
        artifacts = self.artifacts_dir
        artifacts.mkdir(parents=True, exist_ok=True)
        _write_json(artifacts / SIDEBAR_ARTIFACT, sidebar)
        _write_json(artifacts / CONFIG_ARTIFACT, config.to_dict())

    def teardown(self) -> None:
        """Remove the staging directory. Safe to call more than once."""
        with self._lock:
            path = self.path
            if path is None:
                return
            try:
                shutil.rmtree(path)
            except FileNotFoundError:
                pass
            except OSError as exc:
                logger.warning("Could not clean up staging directory %s: %s", path, exc)
                return
            self.path = None
            logger.debug("Removed staging directory %s", path)

    def register_cleanup(self) -> None:
        """Tear down on interpreter exit and on SIGINT/SIGTERM."""
        atexit.register(self.teardown)
        if threading.current_thread() is not threading.main_thread():
            return
        for signum in (signal.SIGINT, signal.SIGTERM):
            signal.signal(signum, self._handle_signal)

    def _handle_signal(self, signum: int, frame: Any) -> None:
        logger.info("Shutting down...")
        self.teardown()
        raise SystemExit(0)

    def _require_path(self) -> Path:
        if self.path is None:
            raise RuntimeError("Staging directory has not been created")
        return self.path


def _write_json(path: Path, payload: Any) -> None:
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


__all__ = [
    "ARTIFACTS_DIR",
    "CONFIG_ARTIFACT",
    "SIDEBAR_ARTIFACT",
    "StagingArea",
]
