import pytest

from skyscope.domain.regions import (
    REGIONS,
    BoundingBox,
    Region,
    RegionRegistry,
    default_registry,
)


def test_resolve_is_case_insensitive():
    assert default_registry.resolve("CALGARY") == default_registry.resolve("calgary")
    assert default_registry.resolve("  Toronto ").key == "toronto"


def test_unknown_region_falls_back_to_default():
    region = default_registry.resolve("nonexistent")

    assert region.key == "calgary"
    assert default_registry.resolve(None).key == "calgary"
    assert default_registry.resolve("").key == "calgary"


def test_supported_regions_have_valid_boxes():
    assert set(default_registry.keys()) == {"calgary", "alberta", "vancouver", "toronto"}
    for region in REGIONS:
        box = region.bounding_box
        assert box.min_lat < box.max_lat
        assert box.min_lon < box.max_lon


def test_calgary_reference_elevation():
    assert default_registry.resolve("calgary").reference_elevation_m == 1084.0


def test_bounding_box_query_params():
    params = default_registry.resolve("vancouver").bounding_box.to_params()

    assert params == {"lamin": 48.6, "lomin": -124.0, "lamax": 50.6, "lomax": -121.0}


def test_registry_rejects_inverted_box():
    bad = Region(
        key="bad",
        label="Bad",
        bounding_box=BoundingBox(min_lat=10.0, max_lat=5.0, min_lon=0.0, max_lon=1.0),
        reference_elevation_m=0.0,
        map_center_lat=0.0,
        map_center_lon=0.0,
        map_zoom=1,
    )

    with pytest.raises(ValueError):
        RegionRegistry([bad], default_key="bad")


def test_registry_requires_known_default():
    with pytest.raises(ValueError):
        RegionRegistry(REGIONS, default_key="atlantis")


def test_custom_default_region():
    registry = RegionRegistry(REGIONS, default_key="Toronto")

    assert registry.default_key == "toronto"
    assert registry.resolve("nowhere").key == "toronto"
