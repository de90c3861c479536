"""Normalized aircraft records served to map clients."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AircraftRecord(BaseModel):
    """Display-ready representation of one OpenSky state vector."""

    icao24: str = Field(..., description="ICAO 24-bit transponder address (hex)")
    callsign: Optional[str] = Field(
        default=None, description="Trimmed callsign; absent when blank"
    )
    origin_country: Optional[str] = Field(
        default=None, alias="originCountry", description="Country of registration"
    )
    longitude: float = Field(..., description="WGS84 longitude in decimal degrees")
    latitude: float = Field(..., description="WGS84 latitude in decimal degrees")
    altitude_m: Optional[float] = Field(
        default=None,
        alias="altitudeMeters",
        description="Geometric altitude, falling back to barometric, in meters",
    )
    altitude_agl_m: Optional[int] = Field(
        default=None,
        alias="altitudeAglMeters",
        description="Altitude above the region reference elevation, never negative",
    )
    is_on_ground: bool = Field(default=False, alias="isOnGround")
    velocity_mps: Optional[float] = Field(
        default=None, alias="velocityMps", description="Ground speed in m/s"
    )
    heading_deg: float = Field(
        default=0.0, alias="headingDegrees", description="True track in degrees"
    )
    vertical_rate_mps: Optional[float] = Field(
        default=None, alias="verticalRateMps", description="Vertical rate in m/s"
    )
    last_contact: Optional[int] = Field(
        default=None,
        alias="lastContactEpochSec",
        description="Unix time of the last message received from the transponder",
    )

    model_config = ConfigDict(populate_by_name=True, frozen=True)


__all__ = ["AircraftRecord"]
