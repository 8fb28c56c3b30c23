"""Resolve a project's NuGet assemblies and keep them current as the project file changes."""

from __future__ import annotations

import logging
import os
import queue
import threading
from typing import Callable, Protocol

from refscout.config import (
    ChangeEvent,
    ChangeType,
    PackageReference,
    ProjectFacts,
    ResolverConfig,
    ResolverState,
)
from refscout.dotnet.assets import AssetIndex
from refscout.dotnet.project import (
    load_basic_info,
    load_declared_references,
    load_package_cache_root,
)
from refscout.errors import ConfigurationError, RefscoutError, UnresolvedReferenceError
from refscout.watcher import ChangeWatcher, EventSink

logger = logging.getLogger(__name__)

_STOP = object()


class Watcher(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...


WatcherFactory = Callable[[str, EventSink], Watcher]


def build_references(
    file_path: str, package_cache_root: str, asset_index: AssetIndex
) -> list[PackageReference]:
    """Join the declared packages of a project file against the asset index.

    A declared package missing from the index fails the whole pass.
    """
    references: list[PackageReference] = []
    for key in load_declared_references(file_path):
        assemblies = asset_index.lookup(key)
        if assemblies is None:
            raise UnresolvedReferenceError(key.name, key.version)

        package_dir = os.path.join(package_cache_root, key.name, key.version)
        for assembly in assemblies:
            references.append(PackageReference(
                name=key.name,
                version=key.version,
                path=os.path.normpath(os.path.join(package_dir, assembly)),
            ))
    return references


def _coalesce(events: list[ChangeEvent]) -> list[ChangeEvent]:
    """Collapse runs of plain content changes into a single event."""
    result: list[ChangeEvent] = []
    for event in events:
        if (
            result
            and event.change_type in (ChangeType.CHANGED, ChangeType.CREATED)
            and result[-1].change_type in (ChangeType.CHANGED, ChangeType.CREATED)
        ):
            continue
        result.append(event)
    return result


class ProjectResolver:
    """Loads and keeps the NuGet assembly references of one .csproj file.

    Use ProjectResolver.open(); a failed initial load raises and leaves
    nothing behind. Later failures (from change events or explicit calls)
    put the resolver in FAILED but keep the last good references.

    All loads and resolution passes run under one lock. Watched changes
    are fed through a queue to a single worker thread per resolver.
    """

    def __init__(
        self,
        file_path: str,
        config: ResolverConfig | None = None,
        watcher_factory: WatcherFactory | None = None,
    ) -> None:
        if not file_path:
            raise ConfigurationError("Project file path is required.")
        self.config = config or ResolverConfig()
        self._watcher_factory = watcher_factory or ChangeWatcher
        self._facts = load_basic_info(os.path.abspath(file_path))
        self._package_cache_root: str | None = None
        self._asset_index: AssetIndex | None = None
        self._references: tuple[PackageReference, ...] = ()
        self._state = ResolverState.UNINITIALIZED
        self._last_error: RefscoutError | None = None
        self._needs_reload = True

        self._lock = threading.RLock()
        self._dispose_lock = threading.Lock()
        self._disposed = False
        self._events: queue.Queue = queue.Queue()
        self._watcher: Watcher | None = None
        self._worker: threading.Thread | None = None

    @classmethod
    def open(
        cls,
        file_path: str,
        watch: bool = False,
        config: ResolverConfig | None = None,
        watcher_factory: WatcherFactory | None = None,
    ) -> ProjectResolver:
        """Load a project file and resolve its references.

        Raises ConfigurationError or a ResolutionError if the first load
        fails. The watcher is only started once that load succeeded.
        """
        resolver = cls(file_path, config=config, watcher_factory=watcher_factory)
        resolver.reload()
        if watch or resolver.config.watch:
            try:
                resolver._start_watching()
            except Exception:
                resolver.dispose()
                raise
        return resolver

    # --- Accessors ---

    @property
    def references(self) -> tuple[PackageReference, ...]:
        return self._references

    @property
    def facts(self) -> ProjectFacts:
        return self._facts

    @property
    def name(self) -> str:
        return self._facts.name

    @property
    def file_path(self) -> str:
        return self._facts.file_path

    @property
    def package_cache_root(self) -> str | None:
        return self._package_cache_root

    @property
    def asset_index(self) -> AssetIndex | None:
        return self._asset_index

    @property
    def state(self) -> ResolverState:
        return self._state

    @property
    def last_error(self) -> RefscoutError | None:
        return self._last_error

    @property
    def is_watching(self) -> bool:
        return self._watcher is not None

    # --- Loading ---

    def reload(self) -> tuple[PackageReference, ...]:
        """Re-read the package root and assets file, then resolve references."""
        with self._lock:
            self._begin_pass()
            facts = self._facts
            try:
                package_cache_root = load_package_cache_root(facts, self.config.msbuild_namespace)
                asset_index = AssetIndex.build(facts.assets_path)
                references = build_references(facts.file_path, package_cache_root, asset_index)
            except RefscoutError as e:
                self._fail(e)
                raise

            with self._dispose_lock:
                if self._disposed:
                    return self._references
                self._package_cache_root = package_cache_root
                self._asset_index = asset_index
                self._needs_reload = False
                self._succeed(references)
            return self._references

    def resolve_references(self) -> tuple[PackageReference, ...]:
        """Re-read the project file's PackageReferences and rebuild the reference list.

        The package root and asset index from the last load are reused. On
        failure the previous references stay in place.
        """
        with self._lock:
            self._ensure_open()
            if self._asset_index is None or self._package_cache_root is None:
                return self.reload()

            self._begin_pass()
            try:
                references = build_references(
                    self._facts.file_path, self._package_cache_root, self._asset_index
                )
            except RefscoutError as e:
                self._fail(e)
                raise

            with self._dispose_lock:
                if self._disposed:
                    return self._references
                self._succeed(references)
            return self._references

    def _succeed(self, references: list[PackageReference]) -> None:
        # Caller holds _dispose_lock and has checked _disposed
        self._references = tuple(references)
        self._last_error = None
        self._state = ResolverState.READY
        logger.info(f"Resolved {len(references)} assemblies for {self._facts.name}")

    def _fail(self, error: RefscoutError) -> None:
        with self._dispose_lock:
            self._last_error = error
            if not self._disposed:
                self._state = ResolverState.FAILED

    def _begin_pass(self) -> None:
        with self._dispose_lock:
            self._ensure_open()
            self._state = ResolverState.LOADING

    def _ensure_open(self) -> None:
        if self._disposed:
            raise ConfigurationError(f"Project {self._facts.name} has been disposed")

    # --- Change handling ---

    def handle_event(self, event: ChangeEvent) -> None:
        """Apply one change notification to this resolver.

        Renames reload everything under the new name, deletes dispose, and
        any other change re-resolves references. Failures are logged and
        leave the resolver in FAILED rather than raising.
        """
        if self._disposed:
            return
        if event.change_type is ChangeType.DELETED:
            logger.info(f"{self._facts.file_path} was deleted; disposing")
            self.dispose()
            return

        with self._lock:
            if self._disposed:
                return
            try:
                if event.change_type is ChangeType.RENAMED:
                    self._facts = load_basic_info(os.path.abspath(event.path))
                    self._needs_reload = True
                if self._needs_reload:
                    self.reload()
                else:
                    self.resolve_references()
            except RefscoutError as e:
                logger.warning(f"Failed to update {self._facts.name} after {event.change_type.value}: {e}")

    def _start_watching(self) -> None:
        self._watcher = self._watcher_factory(self._facts.file_path, self._events.put)
        self._worker = threading.Thread(
            target=self._run_worker,
            name=f"refscout-{self._facts.name}",
            daemon=True,
        )
        self._worker.start()
        self._watcher.start()

    def _run_worker(self) -> None:
        while True:
            item = self._events.get()
            pending = [item]
            while True:
                try:
                    pending.append(self._events.get_nowait())
                except queue.Empty:
                    break

            if any(p is _STOP for p in pending):
                return
            for event in _coalesce(pending):
                if self._disposed:
                    return
                try:
                    self.handle_event(event)
                except Exception:
                    logger.exception(f"Unexpected error handling {event} for {self._facts.name}")

    # --- Teardown ---

    def dispose(self) -> None:
        """Stop watching and mark the resolver disposed. Idempotent, never raises."""
        with self._dispose_lock:
            if self._disposed:
                return
            self._disposed = True
            self._state = ResolverState.DISPOSED

        watcher, self._watcher = self._watcher, None
        if watcher is not None:
            try:
                watcher.stop()
            except Exception as e:
                logger.warning(f"Failed to stop watcher for {self._facts.name}: {e}")

        worker = self._worker
        if worker is not None:
            self._events.put(_STOP)
            if worker is not threading.current_thread():
                worker.join(timeout=2.0)

    def __enter__(self) -> ProjectResolver:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()

    def __repr__(self) -> str:
        return f"ProjectResolver({self._facts.file_path!r}, state={self._state.value})"
