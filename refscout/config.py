"""Core data types and configuration for Refscout."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

MSBUILD_NAMESPACE = "http://schemas.microsoft.com/developer/msbuild/2003"


class ResolverState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"
    DISPOSED = "disposed"


class ChangeType(str, Enum):
    CREATED = "created"
    CHANGED = "changed"
    RENAMED = "renamed"
    DELETED = "deleted"


@dataclass(frozen=True)
class Hierarchy:
    """A namespace and its ancestor namespaces, nearest first.

    Consumed by using/import suggestion; compared structurally.
    """
    namespace: str
    parents: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "parents", tuple(self.parents))


@dataclass(frozen=True)
class PackageReference:
    """One compiled artifact of a referenced NuGet package."""
    name: str
    version: str
    path: str


@dataclass(frozen=True)
class PackageKey:
    """A declared (name, version) pair from the project manifest."""
    name: str
    version: str

    @property
    def asset_key(self) -> str:
        """Library key as written in project.assets.json."""
        return f"{self.name}/{self.version}"


@dataclass(frozen=True)
class ProjectFacts:
    """Path facts about a project file, always derived together."""
    root_directory: str
    name: str
    file_path: str
    file_name: str

    @property
    def props_path(self) -> str:
        return os.path.join(self.root_directory, "obj", f"{self.name}.csproj.nuget.g.props")

    @property
    def assets_path(self) -> str:
        return os.path.join(self.root_directory, "obj", "project.assets.json")


@dataclass(frozen=True)
class ChangeEvent:
    """A change to a watched project file. For renames, path is the new location."""
    change_type: ChangeType
    path: str


@dataclass
class ResolverConfig:
    watch: bool = False
    msbuild_namespace: str = MSBUILD_NAMESPACE


@dataclass
class ResolutionResult:
    version: str = "1.0"
    metadata: dict[str, Any] = field(default_factory=dict)
    projects: list[dict[str, Any]] = field(default_factory=list)
