"""Flight snapshot endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse

from skyscope.domain.regions import default_registry
from skyscope.models import CallsignSearchResult, RegionSummary, RegionView, Snapshot
from skyscope.services.poller import SnapshotPoller
from skyscope.services.snapshots import SnapshotService, snapshot_for_request

router = APIRouter(prefix="/api", tags=["flights"])

logger = logging.getLogger("skyscope.flights")

NO_STORE = {"Cache-Control": "no-store"}


def get_snapshot_service(request: Request) -> SnapshotService:
    service = getattr(request.app.state, "snapshot_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Snapshot service is not initialized",
        )
    return service


def get_poller(request: Request) -> SnapshotPoller | None:
    return getattr(request.app.state, "poller", None)


@router.get(
    "/flights",
    response_model=Snapshot,
    summary="Current aircraft in a region",
)
async def get_flights(
    region: str | None = Query(
        default=None, description="Region key (calgary, alberta, vancouver, toronto)"
    ),
    service: SnapshotService = Depends(get_snapshot_service),
) -> JSONResponse:
    """Return the normalized aircraft snapshot for ``region``.

    Unknown regions fall back to the default. Upstream failures still answer
    with a snapshot whose ``aircraft`` list is empty and whose ``error``
    explains what went wrong.
    """

    status_code, snapshot = await snapshot_for_request(service, region)
    logger.info(
        "Snapshot served: region=%s aircraft=%s status=%s error=%s",
        snapshot.region_key,
        len(snapshot.aircraft),
        status_code,
        snapshot.error,
    )
    return JSONResponse(
        status_code=status_code,
        content=snapshot.model_dump(mode="json", by_alias=True),
        headers=NO_STORE,
    )


@router.get(
    "/flights/search",
    response_model=CallsignSearchResult,
    summary="Find an aircraft by callsign in the latest polled snapshot",
)
async def search_flights(
    callsign: str = Query(default="", description="Full or partial callsign"),
    poller: SnapshotPoller | None = Depends(get_poller),
) -> CallsignSearchResult:
    if poller is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Background polling is disabled",
        )

    latest = poller.latest
    return CallsignSearchResult(
        query=callsign,
        aircraft=poller.search(callsign),
        data_timestamp=latest.data_timestamp if latest else None,
    )


@router.get(
    "/regions",
    response_model=list[RegionSummary],
    summary="Supported regions",
)
def list_regions() -> list[RegionSummary]:
    return [
        RegionSummary(
            key=key,
            default=key == default_registry.default_key,
            region=RegionView.from_region(region),
        )
        for key, region in default_registry.regions.items()
    ]
