"""Keep the combined output in sync with the files it was built from.

A watchdog observer thread reports file changes; everything else (the debounce
timer, the watched set, rebuilds) lives on the asyncio event loop.
"""

from __future__ import annotations

import asyncio
from enum import StrEnum, auto
from pathlib import Path
from typing import TYPE_CHECKING

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from vibex.assembler import build_artifact
from vibex.binary_detection import BinaryDetector
from vibex.config import DEBOUNCE_SECONDS
from vibex.logging import logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from watchdog.observers.api import BaseObserver

    from vibex.file_resolver import FileSpec
    from vibex.settings import Settings


class WatchState(StrEnum):
    IDLE = auto()
    WATCHING = auto()
    DEBOUNCING = auto()
    REBUILDING = auto()
    STOPPED = auto()


class Debouncer:
    """Run a coroutine once a burst of triggers has settled.

    The timer state is either None or the pending timer handle. Every trigger
    restarts the timer, so a burst inside the delay produces a single run after
    the last trigger. Must only be used from the event loop thread.
    """

    def __init__(self, delay: float, callback: Callable[[], Awaitable[None]]) -> None:
        self._delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._handle = asyncio.get_running_loop().call_later(self._delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        task = asyncio.get_running_loop().create_task(self._callback())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


class _ChangeHandler(FileSystemEventHandler):
    """Forward file changes from the observer thread."""

    def __init__(self, callback: Callable[[Path], None]) -> None:
        super().__init__()
        self._callback = callback

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._callback(Path(str(event.src_path)))

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._callback(Path(str(event.src_path)))

    def on_moved(self, event: FileSystemEvent) -> None:
        # Editors often save by renaming a temporary file over the original.
        if not event.is_directory:
            self._callback(Path(str(event.dest_path)))


class WatchController:
    """Rebuild the combined output whenever a watched file changes.

    States go IDLE -> WATCHING -> DEBOUNCING -> REBUILDING -> WATCHING, and end in
    STOPPED. A rebuild is a full pass over the re-resolved file set, never a patch
    of the changed file alone.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        detector: BinaryDetector | None = None,
        delay: float = DEBOUNCE_SECONDS,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        self._settings = settings
        self._detector = detector or BinaryDetector()
        self._observer_factory = observer_factory
        self._observer: BaseObserver | None = None
        self._debouncer = Debouncer(delay, self.rebuild)
        self._rebuild_lock = asyncio.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._watched: set[Path] = set()
        self._directories: set[Path] = set()
        self.state = WatchState.IDLE
        self.rebuilds = 0

    @property
    def watched(self) -> frozenset[Path]:
        return frozenset(self._watched)

    def _watch(self, files: Iterable[FileSpec]) -> None:
        self._watched = {f.path.resolve() for f in files}

    async def run(self, files: Iterable[FileSpec], stop_event: asyncio.Event | None = None) -> None:
        """Watch `files` until `stop_event` is set or the task is cancelled.

        Args:
            files (Iterable[FileSpec]): the files the current output was built from
            stop_event (asyncio.Event | None): set it to stop watching
        """
        self._loop = asyncio.get_running_loop()
        self._watch(files)
        stop_event = stop_event or asyncio.Event()

        observer = self._observer_factory()
        self._observer = observer
        self._schedule()
        observer.start()
        self.state = WatchState.WATCHING
        logger.info("Monitoring %d file(s) for changes... Press Ctrl+C to stop.", len(self._watched))
        try:
            await stop_event.wait()
        finally:
            self._debouncer.cancel()
            observer.stop()
            observer.join(timeout=5.0)
            self._observer = None
            self._directories = set()
            self.state = WatchState.STOPPED
            logger.info("Stopped monitoring.")

    def notify(self, path: Path) -> None:
        """Report a changed path. Safe to call from any thread."""
        if self._loop is None or self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self.on_change, path)

    def on_change(self, path: Path) -> None:
        """Handle a change on the event loop: restart the debounce timer."""
        if self.state is WatchState.STOPPED:
            return
        if Path(path).resolve() not in self._watched:
            return
        logger.info("Change detected in %s. Rebuilding output...", path)
        if self.state is not WatchState.REBUILDING:
            self.state = WatchState.DEBOUNCING
        self._debouncer.trigger()

    async def rebuild(self) -> None:
        """Run a full pass and overwrite the output. Failures are logged, not raised."""
        async with self._rebuild_lock:
            if self.state is WatchState.STOPPED:
                return
            self.state = WatchState.REBUILDING
            try:
                result = await build_artifact(self._settings, detector=self._detector)
            except Exception:
                logger.exception("Error updating the combined output")
            else:
                self.rebuilds += 1
                if result is not None:
                    self._watch(result.files)
                    self._schedule()
                    logger.info("Updated %s", result.output_path)
            finally:
                if self.state is WatchState.REBUILDING:
                    self.state = WatchState.DEBOUNCING if self._debouncer.pending else WatchState.WATCHING

    def _schedule(self) -> None:
        """Point the observer at the directories holding the watched files."""
        directories = {p.parent for p in self._watched}
        if self._observer is None or directories == self._directories:
            return
        handler = _ChangeHandler(self.notify)
        self._observer.unschedule_all()
        for directory in sorted(directories):
            self._observer.schedule(handler, str(directory), recursive=False)
        self._directories = directories
