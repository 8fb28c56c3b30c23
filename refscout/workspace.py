"""A set of project resolvers addressed by project name."""

from __future__ import annotations

import logging
from typing import Iterable

from refscout.config import PackageReference, ResolverConfig
from refscout.dotnet.solution import parse_solution
from refscout.errors import ConfigurationError, ProjectNotFoundError
from refscout.resolver import ProjectResolver, WatcherFactory

logger = logging.getLogger(__name__)


def expand_project_paths(paths: Iterable[str]) -> list[str]:
    """Replace each .sln path with the .csproj files it lists."""
    expanded: list[str] = []
    for path in paths:
        if path.endswith(".sln"):
            expanded.extend(p.path for p in parse_solution(path))
        else:
            expanded.append(path)
    return expanded


class Workspace:
    """Owns one ProjectResolver per loaded project.

    Projects are keyed by name (the .csproj base name), so two projects
    with the same file name can't be loaded side by side.
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        watcher_factory: WatcherFactory | None = None,
    ) -> None:
        self.config = config or ResolverConfig()
        self._watcher_factory = watcher_factory
        self._projects: dict[str, ProjectResolver] = {}

    @classmethod
    def from_paths(
        cls,
        paths: Iterable[str],
        config: ResolverConfig | None = None,
        watcher_factory: WatcherFactory | None = None,
    ) -> Workspace:
        """Open every given .csproj (and every project of every given .sln)."""
        project_paths = expand_project_paths(paths)
        if not project_paths:
            raise ConfigurationError("You need to pass at least one path to a `.csproj` file.")

        workspace = cls(config, watcher_factory)
        try:
            for path in project_paths:
                workspace.add(path)
        except Exception:
            workspace.dispose()
            raise
        return workspace

    def add(self, file_path: str) -> ProjectResolver:
        """Open a project and register it, replacing any project of the same name."""
        resolver = ProjectResolver.open(
            file_path,
            watch=self.config.watch,
            config=self.config,
            watcher_factory=self._watcher_factory,
        )
        previous = self._projects.pop(resolver.name, None)
        if previous is not None:
            logger.info(f"Replacing loaded project {resolver.name}")
            previous.dispose()
        self._projects[resolver.name] = resolver
        return resolver

    def get(self, name: str) -> ProjectResolver:
        if not name:
            raise ConfigurationError("Project name is required.")
        resolver = self._projects.get(name)
        if resolver is None:
            raise ProjectNotFoundError(name)
        return resolver

    def remove(self, name: str) -> None:
        self.get(name)
        self._projects.pop(name).dispose()

    def projects(self) -> list[ProjectResolver]:
        return list(self._projects.values())

    def references(self) -> list[PackageReference]:
        """All resolved references across projects, project by project."""
        refs: list[PackageReference] = []
        for resolver in self._projects.values():
            refs.extend(resolver.references)
        return refs

    def dispose(self) -> None:
        for resolver in self._projects.values():
            resolver.dispose()
        self._projects.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._projects

    def __len__(self) -> int:
        return len(self._projects)

    def __enter__(self) -> Workspace:
        return self

    def __exit__(self, *exc_info) -> None:
        self.dispose()
