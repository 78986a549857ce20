"""watchdog adapter that turns file-system notifications into WatchEvents."""

from __future__ import annotations

import os
import queue
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from ..logging import get_logger
from ..models import WatchEvent, WatchEventKind
from ..scanner import is_ignored

logger = get_logger("preview.watcher")


class MirrorEventHandler(FileSystemEventHandler):
    """Queues change notifications for the synchronizer thread."""

    def __init__(self, docs_root: Path, events: "queue.Queue[WatchEvent]") -> None:
        super().__init__()
        self.docs_root = Path(docs_root)
        self.events = events

    def on_created(self, event: FileSystemEvent) -> None:
        kind = WatchEventKind.ADDED_DIR if event.is_directory else WatchEventKind.ADDED
        self._emit(kind, event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        kind = WatchEventKind.DELETED_DIR if event.is_directory else WatchEventKind.DELETED
        self._emit(kind, event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._emit(WatchEventKind.CHANGED, event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            self._emit(WatchEventKind.DELETED_DIR, event.src_path)
            self._emit(WatchEventKind.ADDED_DIR, event.dest_path)
        else:
            self._emit(WatchEventKind.DELETED, event.src_path)
            self._emit(WatchEventKind.ADDED, event.dest_path)

    def _emit(self, kind: WatchEventKind, raw_path: object) -> None:
        path = Path(os.fsdecode(raw_path))  # type: ignore[arg-type]
        try:
            relative = path.relative_to(self.docs_root).as_posix()
        except ValueError:
            return
        if relative == "." or is_ignored(relative):
            return
        self.events.put(WatchEvent(kind=kind, path=str(path)))


def start_observer(
    docs_root: Path,
    events: "queue.Queue[WatchEvent]",
    *,
    observer_factory: Optional[Callable[[], BaseObserver]] = None,
) -> BaseObserver:
    """Watch `docs_root` recursively and feed events into `events`."""
    factory = observer_factory or Observer
    observer = factory()
    observer.schedule(MirrorEventHandler(docs_root, events), str(docs_root), recursive=True)
    observer.daemon = True
    observer.start()
    logger.debug("Watching %s for changes", docs_root)
    return observer


__all__ = ["MirrorEventHandler", "start_observer"]
