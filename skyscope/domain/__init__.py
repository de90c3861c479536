"""Static domain definitions for SkyScope."""

from .regions import (
    DEFAULT_REGION_KEY,
    REGIONS,
    BoundingBox,
    Region,
    RegionRegistry,
    default_registry,
)

__all__ = [
    "BoundingBox",
    "DEFAULT_REGION_KEY",
    "REGIONS",
    "Region",
    "RegionRegistry",
    "default_registry",
]
