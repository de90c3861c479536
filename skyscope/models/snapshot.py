"""Snapshot documents returned by the flights endpoint."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from skyscope.domain.regions import Region
from skyscope.models.aircraft import AircraftRecord


class RegionView(BaseModel):
    """Serialized region: query box plus map viewport hints."""

    label: str
    minimum_latitude: float = Field(..., alias="minimumLatitude")
    maximum_latitude: float = Field(..., alias="maximumLatitude")
    minimum_longitude: float = Field(..., alias="minimumLongitude")
    maximum_longitude: float = Field(..., alias="maximumLongitude")
    map_center_latitude: float = Field(..., alias="mapCenterLatitude")
    map_center_longitude: float = Field(..., alias="mapCenterLongitude")
    map_zoom: float = Field(..., alias="mapZoom")
    reference_elevation_m: float = Field(..., alias="referenceElevationMeters")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @classmethod
    def from_region(cls, region: Region) -> "RegionView":
        box = region.bounding_box
        return cls(
            label=region.label,
            minimum_latitude=box.min_lat,
            maximum_latitude=box.max_lat,
            minimum_longitude=box.min_lon,
            maximum_longitude=box.max_lon,
            map_center_latitude=region.map_center_lat,
            map_center_longitude=region.map_center_lon,
            map_zoom=region.map_zoom,
            reference_elevation_m=region.reference_elevation_m,
        )


class Snapshot(BaseModel):
    """One complete result of an ingestion cycle for a region."""

    region_key: str = Field(..., alias="regionKey")
    region: Optional[RegionView] = None
    aircraft: tuple[AircraftRecord, ...] = Field(default=())
    data_timestamp: Optional[int] = Field(
        default=None,
        alias="dataTimestamp",
        description="OpenSky server time the state vectors refer to",
    )
    error: Optional[str] = Field(
        default=None, description="Human-readable reason when the snapshot is degraded"
    )
    upstream_status: Optional[int] = Field(
        default=None,
        alias="upstreamStatus",
        description="HTTP status returned by the upstream when it caused the failure",
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def is_degraded(self) -> bool:
        return self.error is not None

    @classmethod
    def degraded(
        cls, region: Region, error: str, *, upstream_status: int | None = None
    ) -> "Snapshot":
        """Build an empty-aircraft snapshot describing a failure."""

        return cls(
            region_key=region.key,
            region=RegionView.from_region(region),
            aircraft=(),
            data_timestamp=None,
            error=error,
            upstream_status=upstream_status,
        )


class RegionSummary(BaseModel):
    """Entry of the supported-regions listing."""

    key: str
    default: bool = False
    region: RegionView

    model_config = ConfigDict(populate_by_name=True)


class CallsignSearchResult(BaseModel):
    """Outcome of a callsign search against the latest polled snapshot."""

    query: str
    aircraft: Optional[AircraftRecord] = None
    data_timestamp: Optional[int] = Field(default=None, alias="dataTimestamp")

    model_config = ConfigDict(populate_by_name=True)


__all__ = ["CallsignSearchResult", "RegionSummary", "RegionView", "Snapshot"]
