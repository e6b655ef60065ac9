"""
Tests for geoconnect.spatial.regions — RegionCatalog.
"""
from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from geoconnect.spatial.bounds import ViewportBounds
from geoconnect.spatial.regions import DEFAULT_REGIONS, RegionCatalog


class TestRegionCatalog:
    def test_default_table(self):
        catalog = RegionCatalog()
        ny = catalog.lookup("NY")
        assert isinstance(ny, ViewportBounds)
        assert ny.contains_point(43.0481, -76.1474)  # Syracuse
        assert len(catalog) == len(DEFAULT_REGIONS)

    @pytest.mark.parametrize("key", ["ny", " NY ", "Ny"])
    def test_lookup_normalizes_key(self, key):
        assert RegionCatalog().lookup(key) == DEFAULT_REGIONS["NY"]

    @pytest.mark.parametrize("key", ["ZZ", "", None, 42])
    def test_unknown_key(self, key):
        assert RegionCatalog().lookup(key) is None

    def test_contains(self):
        catalog = RegionCatalog()
        assert "ca" in catalog
        assert "XX" not in catalog
        assert 1 not in catalog

    def test_custom_mapping(self):
        bounds = ViewportBounds(north=1, south=0, east=1, west=0)
        catalog = RegionCatalog({"home": bounds})
        assert catalog.keys() == ["HOME"]
        assert catalog.lookup("home") is bounds

    def test_immutable(self):
        catalog = RegionCatalog()
        with pytest.raises(TypeError):
            catalog._regions["XX"] = DEFAULT_REGIONS["NY"]  # type: ignore[index]

    def test_source_mutation_not_visible(self):
        source = {"A": ViewportBounds(north=1, south=0, east=1, west=0)}
        catalog = RegionCatalog(source)
        source["B"] = ViewportBounds(north=2, south=1, east=2, west=1)
        assert catalog.lookup("B") is None


class TestFromJson:
    def test_merges_over_defaults(self, tmp_path):
        path = tmp_path / "regions.json"
        path.write_text(json.dumps({
            "NY": {"north": 45, "south": 40, "east": -70, "west": -80},
            "cny": {"north": 43.5, "south": 42.5, "east": -75.5, "west": -76.5},
        }))
        catalog = RegionCatalog.from_json(path)
        assert catalog.lookup("NY") == ViewportBounds(north=45, south=40, east=-70, west=-80)
        assert catalog.lookup("CNY") is not None
        assert catalog.lookup("CA") == DEFAULT_REGIONS["CA"]

    def test_without_base(self, tmp_path):
        path = tmp_path / "regions.json"
        path.write_text(json.dumps({"X": {"north": 1, "south": 0, "east": 1, "west": 0}}))
        catalog = RegionCatalog.from_json(path, base=None)
        assert catalog.keys() == ["X"]

    def test_malformed_entry(self, tmp_path):
        path = tmp_path / "regions.json"
        path.write_text(json.dumps({"X": {"north": "high"}}))
        with pytest.raises(ValidationError):
            RegionCatalog.from_json(path)

    def test_inverted_bounds(self, tmp_path):
        path = tmp_path / "regions.json"
        path.write_text(json.dumps({"X": {"north": 0, "south": 1, "east": 1, "west": 0}}))
        with pytest.raises(ValueError):
            RegionCatalog.from_json(path)
