"""Shared fixtures: build throwaway restored projects under tmp_path."""

from __future__ import annotations

import json
import os
import shutil
from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"

MSBUILD_NS = "http://schemas.microsoft.com/developer/msbuild/2003"


def write_csproj(path: Path, packages: list[tuple[str | None, str | None]]) -> None:
    """Write an SDK-style project. A None name/version omits that attribute."""
    items = []
    for name, version in packages:
        attrs = ""
        if name is not None:
            attrs += f' Include="{name}"'
        if version is not None:
            attrs += f' Version="{version}"'
        items.append(f"    <PackageReference{attrs} />")
    path.write_text(
        '<Project Sdk="Microsoft.NET.Sdk">\n'
        "  <ItemGroup>\n" + "\n".join(items) + "\n  </ItemGroup>\n"
        "</Project>\n"
    )


def write_props(path: Path, cache_root: str | None) -> None:
    root_elem = f"    <NuGetPackageRoot>{cache_root}</NuGetPackageRoot>\n" if cache_root is not None else ""
    path.write_text(
        '<?xml version="1.0" encoding="utf-8"?>\n'
        f'<Project ToolsVersion="14.0" xmlns="{MSBUILD_NS}">\n'
        "  <PropertyGroup>\n" + root_elem + "  </PropertyGroup>\n"
        "</Project>\n"
    )


def write_assets(path: Path, targets: dict[str, dict[str, list[str] | None]]) -> None:
    """targets: target -> library key -> compile paths (None omits 'compile')."""
    doc: dict = {"version": 3, "targets": {}}
    for target, libraries in targets.items():
        libs = {}
        for key, compile_paths in libraries.items():
            entry: dict = {"type": "package"}
            if compile_paths is not None:
                entry["compile"] = {p: {} for p in compile_paths}
            libs[key] = entry
        doc["targets"][target] = libs
    path.write_text(json.dumps(doc, indent=2))


@pytest.fixture()
def make_project(tmp_path):
    """Create a restored project and return the path to its .csproj."""

    def _make(
        name: str = "Foo",
        packages: list[tuple[str | None, str | None]] | None = None,
        libraries: dict[str, list[str] | None] | None = None,
        cache_root: str | None = "/cache",
        directory: Path | None = None,
    ) -> str:
        root = directory or tmp_path
        (root / "obj").mkdir(parents=True, exist_ok=True)
        if packages is None:
            packages = [("PackageA", "1.2.3")]
        if libraries is None:
            libraries = {"PackageA/1.2.3": ["lib/net6.0/PackageA.dll"]}
        project = root / f"{name}.csproj"
        write_csproj(project, packages)
        write_props(root / "obj" / f"{name}.csproj.nuget.g.props", cache_root)
        write_assets(root / "obj" / "project.assets.json", {"net6.0": libraries})
        return str(project)

    return _make


@pytest.fixture()
def simple_project(tmp_path) -> str:
    """A writable copy of fixtures/dotnet_simple; returns the .csproj path."""
    dest = tmp_path / "dotnet_simple"
    shutil.copytree(FIXTURES / "dotnet_simple", dest)
    return os.path.join(dest, "App.csproj")
