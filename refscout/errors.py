"""Typed exception hierarchy for Refscout."""

from __future__ import annotations


class RefscoutError(Exception):
    """Base exception for all Refscout errors."""


class ConfigurationError(RefscoutError):
    """A required input is missing, or the resolver can no longer be used."""


class ProjectNotFoundError(ConfigurationError):
    """No project with the given name is loaded."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Can't find specified project: {name}")


# --- Resolution failures: abort the current load or resolution pass ---


class ResolutionError(RefscoutError):
    """Base for failures that abort a load or resolution pass."""


class MissingCompanionFileError(ResolutionError):
    """The generated nuget.g.props file does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Companion props file not found: {path}")


class MalformedCompanionFileError(ResolutionError):
    """The props file is unreadable or has no NuGetPackageRoot."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed companion props file {path}: {reason}")


class MissingAssetsFileError(ResolutionError):
    """obj/project.assets.json does not exist (the project was never restored)."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Assets file not found: {path}")


class MalformedAssetsFileError(ResolutionError):
    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Malformed assets file {path}: {reason}")


class UnresolvedReferenceError(ResolutionError):
    """A declared package has no entry in the assets file."""

    def __init__(self, name: str, version: str) -> None:
        self.name = name
        self.version = version
        super().__init__(f"Package {name} {version} has no entry in project.assets.json")
