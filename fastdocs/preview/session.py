"""Preview session wiring: staging tree, file watcher and regeneration loop."""

from __future__ import annotations

import queue
import threading
from pathlib import Path
from typing import Callable, Optional

from watchdog.observers.api import BaseObserver

from ..config import SiteConfig, load_config
from ..logging import get_logger
from ..models import WatchEvent
from ..scanner import validate_root
from .mirror import MirrorSynchronizer
from .staging import StagingArea
from .watcher import start_observer

logger = get_logger("preview.session")


class PreviewSession:
    """One live preview: created on `start()`, torn down on `close()`."""

    def __init__(
        self,
        docs_path: Path,
        *,
        debounce_ms: int | None = None,
        cooldown_ms: int | None = None,
        on_regenerated: Optional[Callable[[Path], None]] = None,
        temp_dir: Path | None = None,
        observer_factory: Optional[Callable[[], BaseObserver]] = None,
    ) -> None:
        self.docs_root = validate_root(docs_path)
        self.config: SiteConfig = load_config(self.docs_root)
        if debounce_ms is not None:
            self.config.preview.debounce_ms = debounce_ms
        if cooldown_ms is not None:
            self.config.preview.cooldown_ms = cooldown_ms
        self.staging = StagingArea(self.docs_root, temp_dir=temp_dir)
        self.events: "queue.Queue[WatchEvent]" = queue.Queue()
        self._on_regenerated = on_regenerated
        self._observer_factory = observer_factory
        self._observer: Optional[BaseObserver] = None
        self._stop = threading.Event()
        self.synchronizer: Optional[MirrorSynchronizer] = None

    @property
    def staging_root(self) -> Path:
        if self.staging.path is None:
            raise RuntimeError("Preview session has not been started")
        return self.staging.path

    def start(self, *, watch: bool = True, register_cleanup: bool = True) -> Path:
        """Create the staging tree, write initial artifacts and begin watching."""
        staging_root = self.staging.create()
        if register_cleanup:
            self.staging.register_cleanup()
        self.staging.write_artifacts(self.config)
        self.synchronizer = MirrorSynchronizer(
            self.docs_root,
            staging_root,
            regenerate=self.regenerate,
            debounce=self.config.preview.debounce_seconds,
            cooldown=self.config.preview.cooldown_seconds,
        )
        if watch:
            self._observer = start_observer(
                self.docs_root, self.events, observer_factory=self._observer_factory
            )
        logger.info("Preview staged at %s", staging_root)
        return staging_root

    def regenerate(self) -> None:
        """Refresh index stubs, navigation and config artifacts in the staging tree."""
        self.staging.ensure_index_documents()
        self.config = _reload_config(self.docs_root, self.config)
        self.staging.write_artifacts(self.config)
        if self._on_regenerated is not None:
            self._on_regenerated(self.staging_root)

    def serve_forever(self) -> None:
        """Process change events on the calling thread until `stop()` is called."""
        if self.synchronizer is None:
            raise RuntimeError("Preview session has not been started")
        self.synchronizer.run(self.events, self._stop)

    def stop(self) -> None:
        self._stop.set()

    def close(self) -> None:
        """Stop watching and remove the staging tree. Safe to call repeatedly."""
        self.stop()
        observer = self._observer
        self._observer = None
        if observer is not None:
            observer.stop()
            observer.join(timeout=5)
        self.staging.teardown()

    def __enter__(self) -> "PreviewSession":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _reload_config(docs_root: Path, previous: SiteConfig) -> SiteConfig:
    config = load_config(docs_root)
    # Window overrides from the command line outlive config reloads.
    config.preview.debounce_ms = previous.preview.debounce_ms
    config.preview.cooldown_ms = previous.preview.cooldown_ms
    return config


__all__ = ["PreviewSession"]
