"""Supported map regions and their OpenSky query boxes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from skyscope.config import settings

DEFAULT_REGION_KEY = "calgary"


@dataclass(frozen=True)
class BoundingBox:
    """Geographic bounding box used to scope an OpenSky query."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def to_params(self) -> dict[str, float]:
        """Convert to OpenSky ``states/all`` query parameters."""

        return {
            "lamin": self.min_lat,
            "lomin": self.min_lon,
            "lamax": self.max_lat,
            "lomax": self.max_lon,
        }


@dataclass(frozen=True)
class Region:
    """A named viewport with the reference ground elevation used for AGL."""

    key: str
    label: str
    bounding_box: BoundingBox
    reference_elevation_m: float
    map_center_lat: float
    map_center_lon: float
    map_zoom: float


# Elevations are rough regional averages, not per-point terrain.
REGIONS: tuple[Region, ...] = (
    Region(
        key="calgary",
        label="Calgary (Default)",
        bounding_box=BoundingBox(min_lat=50.0, max_lat=52.3, min_lon=-115.8, max_lon=-112.6),
        reference_elevation_m=1084.0,
        map_center_lat=51.0447,
        map_center_lon=-114.0719,
        map_zoom=8,
    ),
    Region(
        key="alberta",
        label="Alberta",
        bounding_box=BoundingBox(min_lat=48.8, max_lat=60.0, min_lon=-120.0, max_lon=-109.0),
        reference_elevation_m=800.0,
        map_center_lat=54.5,
        map_center_lon=-114.5,
        map_zoom=5.2,
    ),
    Region(
        key="vancouver",
        label="Vancouver / Lower Mainland",
        bounding_box=BoundingBox(min_lat=48.6, max_lat=50.6, min_lon=-124.0, max_lon=-121.0),
        reference_elevation_m=70.0,
        map_center_lat=49.2827,
        map_center_lon=-123.1207,
        map_zoom=8,
    ),
    Region(
        key="toronto",
        label="Toronto / GTA",
        bounding_box=BoundingBox(min_lat=43.0, max_lat=44.4, min_lon=-80.4, max_lon=-78.5),
        reference_elevation_m=173.0,
        map_center_lat=43.6532,
        map_center_lon=-79.3832,
        map_zoom=8,
    ),
)


def _normalize_key(key: str | None) -> str:
    return (key or "").strip().lower()


class RegionRegistry:
    """Case-insensitive lookup of regions with a fallback default."""

    def __init__(self, regions: Iterable[Region], default_key: str = DEFAULT_REGION_KEY) -> None:
        self._regions: dict[str, Region] = {}
        for region in regions:
            box = region.bounding_box
            if not (box.min_lat < box.max_lat and box.min_lon < box.max_lon):
                raise ValueError(f"Region {region.key!r} has an empty bounding box")
            self._regions[_normalize_key(region.key)] = region

        default = _normalize_key(default_key)
        if default not in self._regions:
            raise ValueError(f"Default region {default_key!r} is not registered")
        self.default_key = default

    @property
    def default(self) -> Region:
        return self._regions[self.default_key]

    @property
    def regions(self) -> Mapping[str, Region]:
        return dict(self._regions)

    def keys(self) -> list[str]:
        return list(self._regions)

    def resolve(self, key: str | None) -> Region:
        """Return the region for ``key`` or the default region when unknown."""

        return self._regions.get(_normalize_key(key), self.default)


def _build_default_registry() -> RegionRegistry:
    known = {region.key for region in REGIONS}
    default_key = _normalize_key(settings.default_region)
    if default_key not in known:
        default_key = DEFAULT_REGION_KEY
    return RegionRegistry(REGIONS, default_key=default_key)


default_registry = _build_default_registry()

__all__ = [
    "BoundingBox",
    "DEFAULT_REGION_KEY",
    "REGIONS",
    "Region",
    "RegionRegistry",
    "default_registry",
]
