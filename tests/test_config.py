"""Tests for the core data types."""

from __future__ import annotations

from refscout.config import Hierarchy, PackageKey, PackageReference


class TestHierarchy:
    def test_structural_equality(self):
        a = Hierarchy("App.Services", ["App"])
        b = Hierarchy("App.Services", ["App"])
        assert a == b
        assert hash(a) == hash(b)

    def test_parent_order_matters(self):
        assert Hierarchy("C", ["B", "A"]) != Hierarchy("C", ["A", "B"])

    def test_namespace_matters(self):
        assert Hierarchy("A", []) != Hierarchy("B", [])

    def test_parents_are_immutable(self):
        parents = ["App"]
        h = Hierarchy("App.Services", parents)
        parents.append("Other")
        assert h.parents == ("App",)


class TestPackageKey:
    def test_asset_key(self):
        assert PackageKey("Newtonsoft.Json", "13.0.3").asset_key == "Newtonsoft.Json/13.0.3"

    def test_keeps_fields_separate(self):
        # Different splits of the same composite string are different keys
        assert PackageKey("a/b", "c") != PackageKey("a", "b/c")


class TestPackageReference:
    def test_value_equality(self):
        assert PackageReference("A", "1.0.0", "/p") == PackageReference("A", "1.0.0", "/p")
