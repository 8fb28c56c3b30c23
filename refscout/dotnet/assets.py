"""Index of compile-time assemblies from obj/project.assets.json."""

from __future__ import annotations

import json
import logging
from typing import Any

from refscout.config import PackageKey
from refscout.errors import MalformedAssetsFileError, MissingAssetsFileError

logger = logging.getLogger(__name__)


def _load_targets(assets_path: str) -> dict[str, Any]:
    try:
        with open(assets_path, "r", encoding="utf-8-sig") as f:
            document = json.load(f)
    except FileNotFoundError:
        raise MissingAssetsFileError(assets_path) from None
    except OSError as e:
        raise MalformedAssetsFileError(assets_path, str(e)) from e
    except ValueError as e:
        raise MalformedAssetsFileError(assets_path, f"invalid JSON: {e}") from e

    if not isinstance(document, dict):
        raise MalformedAssetsFileError(assets_path, "top level is not an object")
    targets = document.get("targets")
    if not isinstance(targets, dict):
        raise MalformedAssetsFileError(assets_path, "missing 'targets' section")
    return targets


def list_targets(assets_path: str) -> list[str]:
    """Return target names (e.g. 'net8.0') in file order."""
    return list(_load_targets(assets_path))


def _index_first_target(assets_path: str) -> tuple[str, dict[str, list[str]]]:
    targets = _load_targets(assets_path)
    if not targets:
        raise MalformedAssetsFileError(assets_path, "'targets' section is empty")

    target_name, libraries = next(iter(targets.items()))
    if len(targets) > 1:
        logger.warning(
            f"{assets_path} lists {len(targets)} targets; using the first ({target_name})"
        )
    if not isinstance(libraries, dict):
        raise MalformedAssetsFileError(assets_path, f"target {target_name!r} is not an object")

    index: dict[str, list[str]] = {}
    for library_key, library in libraries.items():
        if not isinstance(library, dict):
            raise MalformedAssetsFileError(assets_path, f"library {library_key!r} is not an object")
        compile_assets = library.get("compile")
        if compile_assets is None:
            continue
        if not isinstance(compile_assets, dict):
            raise MalformedAssetsFileError(
                assets_path, f"'compile' of {library_key!r} is not an object"
            )
        if compile_assets:
            index[library_key] = list(compile_assets)

    logger.debug(f"Indexed {len(index)} libraries from target {target_name}")
    return target_name, index


def build_asset_index(assets_path: str) -> dict[str, list[str]]:
    """Map 'name/version' to the relative paths of its compile assemblies.

    Only the first target is read; multi-targeting projects are not
    disambiguated. Libraries with no compile assets are left out entirely.
    """
    return _index_first_target(assets_path)[1]


class AssetIndex:
    """Read-only view over a built asset index."""

    def __init__(self, entries: dict[str, list[str]], target: str = "") -> None:
        self._entries = {key: tuple(paths) for key, paths in entries.items()}
        self.target = target

    @classmethod
    def build(cls, assets_path: str) -> AssetIndex:
        target, entries = _index_first_target(assets_path)
        return cls(entries, target=target)

    def lookup(self, key: PackageKey) -> tuple[str, ...] | None:
        return self._entries.get(key.asset_key)

    def as_dict(self) -> dict[str, list[str]]:
        return {key: list(paths) for key, paths in self._entries.items()}

    def __contains__(self, key: object) -> bool:
        if isinstance(key, PackageKey):
            key = key.asset_key
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
