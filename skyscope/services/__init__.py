"""Service-layer helpers for the SkyScope backend."""

from .poller import SnapshotPoller, find_aircraft_by_callsign, normalize_callsign
from .snapshots import SnapshotService, snapshot_for_request

__all__ = [
    "SnapshotPoller",
    "SnapshotService",
    "find_aircraft_by_callsign",
    "normalize_callsign",
    "snapshot_for_request",
]
