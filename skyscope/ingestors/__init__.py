"""OpenSky ingestion building blocks."""

from .auth import AccessToken, TokenCache
from .fetcher import ResilientFetcher, linear_backoff
from .opensky import (
    DecodedState,
    altitude_above_ground,
    decode_state_vector,
    normalize_state_vector,
    normalize_states,
)

__all__ = [
    "AccessToken",
    "DecodedState",
    "ResilientFetcher",
    "TokenCache",
    "altitude_above_ground",
    "decode_state_vector",
    "linear_backoff",
    "normalize_state_vector",
    "normalize_states",
]
