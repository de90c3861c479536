"""Build region snapshots from the OpenSky state-vector API."""

from __future__ import annotations

import logging

from fastapi import status

from skyscope.domain.regions import RegionRegistry, default_registry
from skyscope.errors import (
    ConfigurationError,
    UpstreamAuthError,
    UpstreamPayloadError,
    UpstreamUnavailableError,
)
from skyscope.ingestors.auth import TokenCache
from skyscope.ingestors.fetcher import ResilientFetcher
from skyscope.ingestors.opensky import normalize_states
from skyscope.models.snapshot import RegionView, Snapshot

logger = logging.getLogger("skyscope.services.snapshots")


class SnapshotService:
    """Resolve a region, authenticate, query OpenSky and normalize the result."""

    def __init__(
        self,
        *,
        fetcher: ResilientFetcher,
        token_cache: TokenCache,
        states_url: str,
        registry: RegionRegistry = default_registry,
    ) -> None:
        self.fetcher = fetcher
        self.token_cache = token_cache
        self.states_url = states_url
        self.registry = registry

    async def get_snapshot(self, region_key: str | None) -> Snapshot:
        """Return the current snapshot for ``region_key``.

        A non-2xx answer from OpenSky yields an empty, degraded snapshot
        carrying the status code. Credential, token and transport failures
        are raised for the caller to map.
        """

        region = self.registry.resolve(region_key)
        token = await self.token_cache.get_token()

        response = await self.fetcher.fetch(
            self.states_url,
            params=region.bounding_box.to_params(),
            headers={"Authorization": f"Bearer {token}"},
        )

        if not response.is_success:
            if response.status_code == status.HTTP_401_UNAUTHORIZED:
                # Token rejected before its expiry; force a new exchange next time.
                self.token_cache.invalidate()
            if response.status_code == status.HTTP_429_TOO_MANY_REQUESTS:
                logger.warning(
                    "OpenSky rate limit encountered for region %s (retry-after=%s)",
                    region.key,
                    response.headers.get("Retry-After"),
                )
            else:
                logger.warning(
                    "OpenSky returned HTTP %s for region %s", response.status_code, region.key
                )
            return Snapshot.degraded(
                region,
                f"OpenSky returned HTTP {response.status_code}",
                upstream_status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamPayloadError(
                "OpenSky returned a body that is not JSON", status_code=response.status_code
            ) from exc

        if not isinstance(payload, dict):
            raise UpstreamPayloadError(
                "OpenSky returned an unexpected JSON document", status_code=response.status_code
            )

        aircraft = normalize_states(payload.get("states"), region.reference_elevation_m)
        data_time = payload.get("time")
        if isinstance(data_time, bool) or not isinstance(data_time, int):
            data_time = None

        logger.debug("Region %s snapshot has %s aircraft", region.key, len(aircraft))
        return Snapshot(
            region_key=region.key,
            region=RegionView.from_region(region),
            aircraft=tuple(aircraft),
            data_timestamp=data_time,
        )


async def snapshot_for_request(
    service: SnapshotService, region_key: str | None
) -> tuple[int, Snapshot]:
    """Run ``get_snapshot`` and convert every failure into a well-formed snapshot.

    Returns the HTTP status the endpoint should answer with alongside the
    snapshot; upstream trouble is reported as a 200 with ``error`` set so the
    client keeps polling, while configuration faults and unexpected errors
    are 500 and undecodable upstream bodies are 502.
    """

    region = service.registry.resolve(region_key)

    try:
        return status.HTTP_200_OK, await service.get_snapshot(region_key)
    except ConfigurationError as exc:
        logger.error("Snapshot unavailable, configuration error: %s", exc)
        return status.HTTP_500_INTERNAL_SERVER_ERROR, Snapshot.degraded(region, str(exc))
    except UpstreamAuthError as exc:
        logger.warning("OpenSky authentication failed: %s", exc)
        return status.HTTP_200_OK, Snapshot.degraded(
            region,
            "Failed to authenticate with OpenSky Network",
            upstream_status=exc.status_code,
        )
    except UpstreamPayloadError as exc:
        logger.warning("OpenSky payload could not be decoded: %s", exc)
        return status.HTTP_502_BAD_GATEWAY, Snapshot.degraded(
            region,
            "Received an invalid response from OpenSky Network",
            upstream_status=exc.status_code,
        )
    except UpstreamUnavailableError as exc:
        logger.warning("OpenSky unavailable: %s", exc)
        return status.HTTP_200_OK, Snapshot.degraded(
            region,
            "Failed to fetch data from OpenSky Network",
            upstream_status=exc.status_code,
        )
    except Exception:
        logger.exception("Unexpected error while building snapshot for %s", region.key)
        return status.HTTP_500_INTERNAL_SERVER_ERROR, Snapshot.degraded(
            region, "Unexpected error while fetching aircraft data"
        )


__all__ = ["SnapshotService", "snapshot_for_request"]
