"""Tests for the project.assets.json index."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from refscout.config import PackageKey
from refscout.dotnet.assets import AssetIndex, build_asset_index, list_targets
from refscout.errors import MalformedAssetsFileError, MissingAssetsFileError

FIXTURES = Path(__file__).parent / "fixtures"
SIMPLE_ASSETS = str(FIXTURES / "dotnet_simple" / "obj" / "project.assets.json")


class TestBuildAssetIndex:
    def test_indexes_compile_assets(self):
        index = build_asset_index(SIMPLE_ASSETS)
        assert index["Newtonsoft.Json/13.0.3"] == ["lib/net6.0/Newtonsoft.Json.dll"]
        assert index["Serilog/3.1.1"] == ["lib/net7.0/Serilog.dll"]

    def test_keeps_compile_order(self):
        index = build_asset_index(SIMPLE_ASSETS)
        assert index["Microsoft.Extensions.Logging.Abstractions/8.0.0"] == [
            "lib/net8.0/Microsoft.Extensions.Logging.Abstractions.dll",
            "lib/net8.0/Microsoft.Extensions.Logging.Abstractions.Extra.dll",
        ]

    def test_drops_empty_and_absent_compile(self):
        index = build_asset_index(SIMPLE_ASSETS)
        assert "Microsoft.NETCore.Platforms/1.1.0" not in index
        assert "Microsoft.Build.Tasks.Git/8.0.0" not in index

    def test_exact_key_set(self):
        index = build_asset_index(SIMPLE_ASSETS)
        assert set(index) == {
            "Newtonsoft.Json/13.0.3",
            "Serilog/3.1.1",
            "Microsoft.Extensions.Logging/8.0.0",
            "Microsoft.Extensions.Logging.Abstractions/8.0.0",
        }

    def test_uses_first_target_only(self):
        # The second target maps Newtonsoft.Json to netstandard2.0
        index = build_asset_index(SIMPLE_ASSETS)
        assert index["Newtonsoft.Json/13.0.3"] == ["lib/net6.0/Newtonsoft.Json.dll"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(MissingAssetsFileError):
            build_asset_index(str(tmp_path / "project.assets.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "project.assets.json"
        path.write_text("{ not json")
        with pytest.raises(MalformedAssetsFileError):
            build_asset_index(str(path))

    def test_missing_targets(self, tmp_path):
        path = tmp_path / "project.assets.json"
        path.write_text(json.dumps({"version": 3}))
        with pytest.raises(MalformedAssetsFileError):
            build_asset_index(str(path))

    def test_empty_targets(self, tmp_path):
        path = tmp_path / "project.assets.json"
        path.write_text(json.dumps({"version": 3, "targets": {}}))
        with pytest.raises(MalformedAssetsFileError):
            build_asset_index(str(path))

    def test_utf8_bom(self, tmp_path):
        path = tmp_path / "project.assets.json"
        doc = {"targets": {"net8.0": {"A/1.0.0": {"compile": {"lib/A.dll": {}}}}}}
        path.write_bytes(b"\xef\xbb\xbf" + json.dumps(doc).encode())
        assert build_asset_index(str(path)) == {"A/1.0.0": ["lib/A.dll"]}

    def test_compile_not_an_object(self, tmp_path):
        path = tmp_path / "project.assets.json"
        for bad in (5, "lib/A.dll", ["lib/A.dll"]):
            doc = {"targets": {"net8.0": {"A/1.0.0": {"compile": bad}}}}
            path.write_text(json.dumps(doc))
            with pytest.raises(MalformedAssetsFileError) as exc:
                build_asset_index(str(path))
            assert "A/1.0.0" in exc.value.reason

    def test_library_not_an_object(self, tmp_path):
        path = tmp_path / "project.assets.json"
        path.write_text(json.dumps({"targets": {"net8.0": {"A/1.0.0": "lib/A.dll"}}}))
        with pytest.raises(MalformedAssetsFileError):
            build_asset_index(str(path))


class TestListTargets:
    def test_lists_in_file_order(self):
        assert list_targets(SIMPLE_ASSETS) == ["net8.0", "net8.0/linux-x64"]


class TestAssetIndex:
    def test_build_records_target(self):
        index = AssetIndex.build(SIMPLE_ASSETS)
        assert index.target == "net8.0"
        assert len(index) == 4

    def test_lookup_by_key(self):
        index = AssetIndex.build(SIMPLE_ASSETS)
        assert index.lookup(PackageKey("Serilog", "3.1.1")) == ("lib/net7.0/Serilog.dll",)
        assert index.lookup(PackageKey("Serilog", "9.9.9")) is None

    def test_contains(self):
        index = AssetIndex({"A/1.0.0": ["lib/A.dll"]})
        assert PackageKey("A", "1.0.0") in index
        assert "A/1.0.0" in index
        assert PackageKey("A", "2.0.0") not in index

    def test_not_affected_by_source_mutation(self):
        entries = {"A/1.0.0": ["lib/A.dll"]}
        index = AssetIndex(entries)
        entries["A/1.0.0"].append("lib/B.dll")
        assert index.as_dict() == {"A/1.0.0": ["lib/A.dll"]}
