"""Decoding and normalization of OpenSky state vectors.

OpenSky returns each aircraft as a positional array:

    0  icao24            ICAO 24-bit address (hex string)
    1  callsign          8 characters, space padded
    2  origin_country
    3  time_position     Unix time of the last position update
    4  last_contact      Unix time of the last message
    5  longitude
    6  latitude
    7  baro_altitude     meters
    8  on_ground
    9  velocity          m/s over ground
    10 true_track        degrees clockwise from north
    11 vertical_rate     m/s
    12 sensors
    13 geo_altitude      meters
    14 squawk
    15 spi
    16 position_source   0=ADS-B, 1=ASTERIX, 2=MLAT, 3=FLARM

Any slot may be null, and older responses stop after slot 16 or earlier.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
from typing import Any, Optional

from skyscope.models.aircraft import AircraftRecord

logger = logging.getLogger("skyscope.ingestors.opensky")

ICAO24 = 0
CALLSIGN = 1
ORIGIN_COUNTRY = 2
TIME_POSITION = 3
LAST_CONTACT = 4
LONGITUDE = 5
LATITUDE = 6
BARO_ALTITUDE = 7
ON_GROUND = 8
VELOCITY = 9
TRUE_TRACK = 10
VERTICAL_RATE = 11
GEO_ALTITUDE = 13
SQUAWK = 14


def _slot(entry: list[Any] | tuple[Any, ...], index: int) -> Any:
    return entry[index] if index < len(entry) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


def _as_int(value: Any) -> Optional[int]:
    number = _as_float(value)
    return int(number) if number is not None else None


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class DecodedState:
    """Typed view of a raw state vector; every field is optional."""

    icao24: Optional[str]
    callsign: Optional[str]
    origin_country: Optional[str]
    time_position: Optional[int]
    last_contact: Optional[int]
    longitude: Optional[float]
    latitude: Optional[float]
    baro_altitude: Optional[float]
    on_ground: bool
    velocity: Optional[float]
    true_track: Optional[float]
    vertical_rate: Optional[float]
    geo_altitude: Optional[float]
    squawk: Optional[str]

    @property
    def altitude(self) -> Optional[float]:
        """Geometric altitude when reported, otherwise barometric."""

        if self.geo_altitude is not None:
            return self.geo_altitude
        return self.baro_altitude


def decode_state_vector(entry: Any) -> Optional[DecodedState]:
    """Map the positional slots of ``entry`` to named fields.

    Returns None when ``entry`` is not an array at all. Slots holding a value
    of the wrong type are treated as absent.
    """

    if not isinstance(entry, (list, tuple)):
        return None

    return DecodedState(
        icao24=_as_str(_slot(entry, ICAO24)),
        callsign=_as_str(_slot(entry, CALLSIGN)),
        origin_country=_as_str(_slot(entry, ORIGIN_COUNTRY)),
        time_position=_as_int(_slot(entry, TIME_POSITION)),
        last_contact=_as_int(_slot(entry, LAST_CONTACT)),
        longitude=_as_float(_slot(entry, LONGITUDE)),
        latitude=_as_float(_slot(entry, LATITUDE)),
        baro_altitude=_as_float(_slot(entry, BARO_ALTITUDE)),
        on_ground=_slot(entry, ON_GROUND) is True,
        velocity=_as_float(_slot(entry, VELOCITY)),
        true_track=_as_float(_slot(entry, TRUE_TRACK)),
        vertical_rate=_as_float(_slot(entry, VERTICAL_RATE)),
        geo_altitude=_as_float(_slot(entry, GEO_ALTITUDE)),
        squawk=_as_str(_slot(entry, SQUAWK)),
    )


def altitude_above_ground(altitude_m: Optional[float], reference_elevation_m: float) -> Optional[int]:
    """Whole meters above the reference elevation, clamped at zero."""

    if altitude_m is None:
        return None
    return max(0, _round_half_up(altitude_m - reference_elevation_m))


def normalize_state_vector(entry: Any, reference_elevation_m: float) -> Optional[AircraftRecord]:
    """Convert one raw state vector into an AircraftRecord, or None to drop it."""

    state = decode_state_vector(entry)
    if state is None:
        return None

    if state.longitude is None or state.latitude is None:
        return None

    icao24 = (state.icao24 or "").strip()
    if not icao24:
        return None

    callsign = (state.callsign or "").strip() or None
    altitude = state.altitude

    return AircraftRecord(
        icao24=icao24,
        callsign=callsign,
        origin_country=state.origin_country or None,
        longitude=state.longitude,
        latitude=state.latitude,
        altitude_m=altitude,
        altitude_agl_m=altitude_above_ground(altitude, reference_elevation_m),
        is_on_ground=state.on_ground,
        velocity_mps=state.velocity,
        heading_deg=state.true_track if state.true_track is not None else 0.0,
        vertical_rate_mps=state.vertical_rate,
        last_contact=state.last_contact,
    )


def normalize_states(raw_states: Any, reference_elevation_m: float) -> list[AircraftRecord]:
    """Normalize an OpenSky ``states`` array, preserving upstream order."""

    if not isinstance(raw_states, (list, tuple)):
        return []

    records: list[AircraftRecord] = []
    dropped = 0
    for entry in raw_states:
        record = normalize_state_vector(entry, reference_elevation_m)
        if record is None:
            dropped += 1
            continue
        records.append(record)

    if dropped:
        logger.debug("Dropped %s state vectors without a usable position or identifier", dropped)
    return records


__all__ = [
    "DecodedState",
    "altitude_above_ground",
    "decode_state_vector",
    "normalize_state_vector",
    "normalize_states",
]
