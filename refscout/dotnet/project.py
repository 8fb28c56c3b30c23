"""Read .csproj files and the props NuGet restore generates beside them."""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET

from refscout.config import MSBUILD_NAMESPACE, PackageKey, ProjectFacts
from refscout.errors import (
    ConfigurationError,
    MalformedCompanionFileError,
    MissingCompanionFileError,
)

logger = logging.getLogger(__name__)


def load_basic_info(file_path: str) -> ProjectFacts:
    """Split a project file path into the facts the resolver keys off.

    Never raises; an odd path just yields empty components.
    """
    return ProjectFacts(
        root_directory=os.path.dirname(file_path),
        name=os.path.splitext(os.path.basename(file_path))[0],
        file_path=file_path,
        file_name=os.path.basename(file_path),
    )


def _tag_namespace(root: ET.Element) -> str:
    """Return the '{uri}' prefix of the root tag, or '' for SDK-style projects."""
    if root.tag.startswith("{"):
        return root.tag.split("}")[0] + "}"
    return ""


def load_package_cache_root(facts: ProjectFacts, msbuild_namespace: str = MSBUILD_NAMESPACE) -> str:
    """Return the NuGetPackageRoot directory from obj/{name}.csproj.nuget.g.props.

    The props file is what `dotnet restore` writes, so reading it avoids
    waiting for a build to find the user's package folder.
    """
    props_path = facts.props_path
    try:
        tree = ET.parse(props_path)
    except FileNotFoundError:
        raise MissingCompanionFileError(props_path) from None
    except OSError as e:
        raise MalformedCompanionFileError(props_path, str(e)) from e
    except ET.ParseError as e:
        raise MalformedCompanionFileError(props_path, str(e)) from e

    root = tree.getroot()
    elem = root.find(f".//{{{msbuild_namespace}}}NuGetPackageRoot")
    if elem is None:
        elem = root.find(".//NuGetPackageRoot")
    if elem is None or not (elem.text or "").strip():
        raise MalformedCompanionFileError(props_path, "no NuGetPackageRoot element")

    package_root = elem.text.strip()
    logger.debug(f"NuGet package root for {facts.name}: {package_root}")
    return package_root


def load_declared_references(file_path: str) -> list[PackageKey]:
    """Return the (name, version) of every PackageReference, in document order.

    The file is parsed again on every call. Entries without a name or a
    version attribute are skipped: placeholders and Update items are normal
    in manifests. A child <Version> element does not count.
    """
    try:
        tree = ET.parse(file_path)
    except FileNotFoundError:
        raise ConfigurationError(f"Project file not found: {file_path}") from None
    except (ET.ParseError, OSError) as e:
        raise ConfigurationError(f"Can't read project file {file_path}: {e}") from e

    root = tree.getroot()
    ns = _tag_namespace(root)

    keys: list[PackageKey] = []
    for pkg in root.iter(f"{ns}PackageReference"):
        name = pkg.get("Include", "").strip()
        version = pkg.get("Version", "").strip()
        if not name or not version:
            logger.debug(f"Skipping incomplete PackageReference in {file_path}: {pkg.attrib}")
            continue
        keys.append(PackageKey(name=name, version=version))

    return keys
