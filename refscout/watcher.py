"""Watchdog-backed change notifications for a single project file."""

from __future__ import annotations

import logging
import os
import threading
from typing import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from refscout.config import ChangeEvent, ChangeType

logger = logging.getLogger(__name__)

EventSink = Callable[[ChangeEvent], None]


def _same_path(a: str, b: str) -> bool:
    return os.path.normcase(os.path.abspath(a)) == os.path.normcase(os.path.abspath(b))


class _ProjectFileHandler(FileSystemEventHandler):
    """Turns directory events into ChangeEvents for the watched file only."""

    def __init__(self, watcher: ChangeWatcher) -> None:
        super().__init__()
        self._watcher = watcher

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._watcher.matches(event.src_path):
            self._watcher.emit(ChangeEvent(ChangeType.CREATED, event.src_path))

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._watcher.matches(event.src_path):
            self._watcher.emit(ChangeEvent(ChangeType.CHANGED, event.src_path))

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._watcher.matches(event.src_path):
            self._watcher.emit(ChangeEvent(ChangeType.DELETED, event.src_path))

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        if self._watcher.matches(event.src_path):
            self._watcher.emit(ChangeEvent(ChangeType.RENAMED, event.dest_path))
        elif self._watcher.matches(event.dest_path):
            # Editors often save by writing a temp file and moving it over the original
            self._watcher.emit(ChangeEvent(ChangeType.CHANGED, event.dest_path))


class ChangeWatcher:
    """Watches one file and forwards its changes to a sink.

    The sink runs on the observer thread and should only enqueue.
    After a rename the watcher follows the file to its new name.
    """

    def __init__(self, file_path: str, sink: EventSink) -> None:
        self.file_path = os.path.abspath(file_path)
        self._sink = sink
        self._observer: Observer | None = None
        self._lock = threading.Lock()
        self._stopped = False

    def matches(self, path: str) -> bool:
        return _same_path(path, self.file_path)

    def emit(self, event: ChangeEvent) -> None:
        with self._lock:
            if self._stopped:
                return
            if event.change_type is ChangeType.RENAMED:
                self.file_path = os.path.abspath(event.path)
        logger.debug(f"{event.change_type.value}: {event.path}")
        self._sink(event)

    def start(self) -> None:
        with self._lock:
            if self._observer is not None or self._stopped:
                return
            observer = Observer()
            observer.schedule(_ProjectFileHandler(self), os.path.dirname(self.file_path), recursive=False)
            observer.daemon = True
            observer.start()
            self._observer = observer
        logger.debug(f"Watching {self.file_path}")

    def stop(self) -> None:
        """Stop raising events and release the observer. Safe to call repeatedly."""
        with self._lock:
            self._stopped = True
            observer, self._observer = self._observer, None
        if observer is None:
            return
        try:
            observer.stop()
            if observer is not threading.current_thread():
                observer.join(timeout=2.0)
        except Exception as e:
            logger.warning(f"Failed to stop watcher for {self.file_path}: {e}")
