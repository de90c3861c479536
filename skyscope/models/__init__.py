"""Pydantic models for the SkyScope backend."""

from .aircraft import AircraftRecord
from .snapshot import CallsignSearchResult, RegionSummary, RegionView, Snapshot

__all__ = [
    "AircraftRecord",
    "CallsignSearchResult",
    "RegionSummary",
    "RegionView",
    "Snapshot",
]
