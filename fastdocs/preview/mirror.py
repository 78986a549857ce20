"""Keeps a staging tree in step with live edits and debounces regeneration."""

from __future__ import annotations

import posixpath
import queue
import shutil
import threading
import time
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from ..config import CONFIG_FILENAME
from ..logging import get_logger
from ..models import MARKDOWN_SUFFIX, STRUCTURAL_EVENTS, WatchEvent, WatchEventKind
from ..scanner import is_ignored

DEFAULT_DEBOUNCE_SECONDS = 0.3
DEFAULT_COOLDOWN_SECONDS = 1.0
_IDLE_POLL_SECONDS = 0.5

logger = get_logger("preview.mirror")


class RegenerationState(str, Enum):
    """Gate that keeps regenerations from overlapping."""

    IDLE = "idle"
    PENDING = "pending"
    REGENERATING = "regenerating"
    COOLDOWN = "cooldown"


def is_navigation_relevant(path: str) -> bool:
    return path.endswith(MARKDOWN_SUFFIX) or Path(path).name == CONFIG_FILENAME


class MirrorSynchronizer:
    """Applies change events to the staging tree and schedules regeneration.

    Copies and deletions happen as soon as an event is handled. Regeneration is
    debounced: qualifying events move the machine to PENDING and push the
    deadline out; `poll()` runs the regeneration once the deadline passes, then
    holds a cooldown during which new events only mirror files.

    Everything runs on the caller's thread. `run()` drains an event queue and
    waits on the next deadline instead of using timer threads.
    """

    def __init__(
        self,
        docs_root: Path,
        staging_root: Path,
        *,
        regenerate: Callable[[], None],
        debounce: float = DEFAULT_DEBOUNCE_SECONDS,
        cooldown: float = DEFAULT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.docs_root = Path(docs_root)
        self.staging_root = Path(staging_root)
        self._regenerate = regenerate
        self.debounce = debounce
        self.cooldown = cooldown
        self._clock = clock
        self._state = RegenerationState.IDLE
        self._deadline: Optional[float] = None
        self._trigger: Optional[WatchEvent] = None
        self.regenerations = 0

    @property
    def state(self) -> RegenerationState:
        return self._state

    def next_deadline(self) -> Optional[float]:
        if self._state in (RegenerationState.PENDING, RegenerationState.COOLDOWN):
            return self._deadline
        return None

    def handle(self, event: WatchEvent) -> None:
        """Mirror one change event, then arm regeneration if it changes navigation."""
        relative = self._relative(event.path)
        if relative is None or relative == "." or is_ignored(relative):
            return

        self._apply(event.kind, relative)
        if event.kind in STRUCTURAL_EVENTS or (
            event.kind is WatchEventKind.CHANGED and is_navigation_relevant(relative)
        ):
            self._arm(event)

    def poll(self) -> bool:
        """Advance the state machine. Returns True when a regeneration ran."""
        now = self._clock()
        if self._state is RegenerationState.PENDING and self._deadline is not None:
            if now >= self._deadline:
                self._run_regeneration()
                return True
        elif self._state is RegenerationState.COOLDOWN and self._deadline is not None:
            if now >= self._deadline:
                self._state = RegenerationState.IDLE
                self._deadline = None
        return False

    def run(self, events: "queue.Queue[WatchEvent]", stop: threading.Event) -> None:
        """Consume events until `stop` is set."""
        while not stop.is_set():
            deadline = self.next_deadline()
            timeout = _IDLE_POLL_SECONDS
            if deadline is not None:
                timeout = min(timeout, max(0.0, deadline - self._clock()))
            try:
                event = events.get(timeout=timeout)
            except queue.Empty:
                pass
            else:
                self.handle(event)
            self.poll()

    def _arm(self, event: WatchEvent) -> None:
        if self._state in (RegenerationState.REGENERATING, RegenerationState.COOLDOWN):
            logger.debug("Regeneration in progress, not re-arming for %s", event.path)
            return
        self._trigger = event
        self._deadline = self._clock() + self.debounce
        self._state = RegenerationState.PENDING

    def _run_regeneration(self) -> None:
        self._state = RegenerationState.REGENERATING
        self._deadline = None
        trigger = self._trigger
        if trigger is not None:
            logger.debug("File %s: %s", trigger.kind.value, trigger.path)
        logger.debug("Updating...")
        try:
            self._regenerate()
        except Exception:  # previous artifacts stay in place until a later regeneration
            logger.exception("Regeneration failed")
        else:
            logger.info("Changes reloaded")
        self.regenerations += 1
        self._trigger = None
        self._state = RegenerationState.COOLDOWN
        self._deadline = self._clock() + self.cooldown

    def _apply(self, kind: WatchEventKind, relative: str) -> None:
        source = self.docs_root / relative
        target = self.staging_root / relative
        try:
            if kind in (WatchEventKind.ADDED, WatchEventKind.CHANGED):
                if source.is_file():
                    target.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(source, target)
            elif kind is WatchEventKind.DELETED:
                if target.is_file() or target.is_symlink():
                    target.unlink()
            elif kind is WatchEventKind.DELETED_DIR:
                if target.is_symlink():
                    target.unlink()
                elif target.is_dir():
                    shutil.rmtree(target)
            elif kind is WatchEventKind.ADDED_DIR:
                target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Error syncing %s (%s): %s", relative, kind.value, exc)

    def _relative(self, path: str) -> Optional[str]:
        candidate = Path(path)
        if candidate.is_absolute():
            try:
                candidate = candidate.relative_to(self.docs_root)
            except ValueError:
                logger.debug("Ignoring event outside docs root: %s", path)
                return None
        relative = posixpath.normpath(candidate.as_posix())
        if relative == ".." or relative.startswith("../"):
            logger.debug("Ignoring event outside docs root: %s", path)
            return None
        return relative


__all__ = ["MirrorSynchronizer", "RegenerationState", "is_navigation_relevant"]
