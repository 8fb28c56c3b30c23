"""Find the C# projects listed in a .sln file (custom text format, not XML)."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass

from refscout.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolutionProject:
    """A project entry from a .sln file, with its path made absolute."""
    name: str
    path: str
    type_guid: str


# Project("{TYPE-GUID}") = "Name", "Path\To\Project.csproj", "{PROJECT-GUID}"
_PROJECT_RE = re.compile(
    r'^Project\(\"\{([^}]+)\}\"\)\s*=\s*\"([^\"]+)\"\s*,\s*\"([^\"]+)\"',
    re.MULTILINE,
)

_SOLUTION_FOLDER_GUID = "2150E333-8FDC-42A3-9474-1A3956D46DE8"


def parse_solution(sln_path: str) -> list[SolutionProject]:
    """Return the .csproj entries of a solution, in file order.

    Solution folders and non-C# projects are left out.
    """
    try:
        with open(sln_path, "r", encoding="utf-8-sig") as f:
            content = f.read()
    except OSError as e:
        raise ConfigurationError(f"Can't read solution file {sln_path}: {e}") from e

    sln_dir = os.path.dirname(os.path.abspath(sln_path))
    projects = []
    for match in _PROJECT_RE.finditer(content):
        type_guid = match.group(1).upper()
        name = match.group(2)
        rel_path = match.group(3).replace("\\", "/")

        if type_guid == _SOLUTION_FOLDER_GUID or not rel_path.endswith(".csproj"):
            continue

        path = os.path.normpath(os.path.join(sln_dir, rel_path))
        logger.debug(f"Solution project: {name} -> {path}")
        projects.append(SolutionProject(name=name, path=path, type_guid=type_guid))

    return projects
