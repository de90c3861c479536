"""OpenSky OAuth2 client-credentials token cache."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import math
import time
from typing import Callable

from skyscope.config import get_opensky_credentials
from skyscope.errors import UpstreamAuthError
from skyscope.ingestors.fetcher import ResilientFetcher

logger = logging.getLogger("skyscope.ingestors.auth")

CredentialsProvider = Callable[[], tuple[str, str]]
Clock = Callable[[], float]


@dataclass(frozen=True)
class AccessToken:
    """Bearer token and the epoch second at which it expires."""

    value: str
    expires_at: float

    def is_fresh(self, now: float, safety_margin: float) -> bool:
        return now < self.expires_at - safety_margin


def _parse_expires_in(raw: object, default: float) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return default
    if not math.isfinite(raw) or raw <= 0:
        return default
    return float(raw)


class TokenCache:
    """Single-slot, process-wide cache for the OpenSky bearer token.

    A cached token is handed out only while it is still valid for at least
    ``safety_margin`` seconds; otherwise a new client-credentials exchange
    is performed. Concurrent callers are not serialized, so two of them may
    refresh at the same time; either token is valid.
    """

    def __init__(
        self,
        fetcher: ResilientFetcher,
        *,
        token_url: str,
        credentials_provider: CredentialsProvider = get_opensky_credentials,
        clock: Clock = time.time,
        safety_margin: float = 30.0,
        default_ttl: float = 1800.0,
    ) -> None:
        self.fetcher = fetcher
        self.token_url = token_url
        self.credentials_provider = credentials_provider
        self.clock = clock
        self.safety_margin = safety_margin
        self.default_ttl = default_ttl
        self._token: AccessToken | None = None

    @property
    def token(self) -> AccessToken | None:
        return self._token

    async def get_token(self) -> str:
        """Return a valid access token, refreshing it when missing or near expiry."""

        token = self._token
        if token is not None and token.is_fresh(self.clock(), self.safety_margin):
            return token.value

        token = await self._refresh()
        return token.value

    def invalidate(self) -> None:
        """Drop the cached token so the next call performs a new exchange."""

        self._token = None

    async def _refresh(self) -> AccessToken:
        client_id, client_secret = self.credentials_provider()

        logger.info("Requesting new OpenSky access token")
        response = await self.fetcher.fetch(
            self.token_url,
            method="POST",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            data={
                "grant_type": "client_credentials",
                "client_id": client_id,
                "client_secret": client_secret,
            },
        )

        if not response.is_success:
            logger.error(
                "OpenSky token exchange failed: status=%s body=%s",
                response.status_code,
                response.text[:200],
            )
            raise UpstreamAuthError(
                f"Token exchange failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamAuthError(
                "Token exchange returned a non-JSON body",
                status_code=response.status_code,
            ) from exc

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(access_token, str) or not access_token:
            raise UpstreamAuthError(
                "Token exchange response has no access_token",
                status_code=response.status_code,
            )

        expires_in = _parse_expires_in(payload.get("expires_in"), self.default_ttl)
        token = AccessToken(value=access_token, expires_at=self.clock() + expires_in)
        self._token = token
        logger.info("OpenSky access token obtained (expires in %ss)", int(expires_in))
        return token


__all__ = ["AccessToken", "TokenCache"]
