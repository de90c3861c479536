"""Periodic snapshot polling and callsign search over the latest result."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Awaitable, Callable, Optional, Sequence

from skyscope.models.aircraft import AircraftRecord
from skyscope.models.snapshot import Snapshot

logger = logging.getLogger("skyscope.services.poller")

SnapshotFetcher = Callable[[str], Awaitable[Snapshot]]


def normalize_callsign(text: str | None) -> str:
    # OpenSky pads callsigns with trailing spaces.
    return (text or "").strip().upper()


def find_aircraft_by_callsign(
    aircraft: Sequence[AircraftRecord], query: str | None
) -> Optional[AircraftRecord]:
    """Exact callsign match first, then the first partial match; None if nothing matches."""

    needle = normalize_callsign(query)
    if not needle:
        return None

    for record in aircraft:
        if normalize_callsign(record.callsign) == needle:
            return record

    for record in aircraft:
        if needle in normalize_callsign(record.callsign):
            return record

    return None


class SnapshotPoller:
    """Keep the latest good snapshot for a region, refreshing it on an interval.

    At most one fetch is outstanding: starting a cycle cancels the previous
    one if it is still running. Failed or degraded cycles leave ``latest``
    untouched so consumers keep showing the last known good data.
    """

    def __init__(
        self,
        fetch_snapshot: SnapshotFetcher,
        *,
        region_key: str,
        interval: float = 30.0,
        is_visible: Callable[[], bool] = lambda: True,
        on_snapshot: Callable[[Snapshot], Any] | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.fetch_snapshot = fetch_snapshot
        self.region_key = region_key
        self.interval = interval
        self.is_visible = is_visible
        self.on_snapshot = on_snapshot
        self.sleep = sleep
        self.latest: Snapshot | None = None
        self._inflight: asyncio.Task | None = None

    @property
    def inflight(self) -> asyncio.Task | None:
        return self._inflight

    def start_cycle(self) -> asyncio.Task:
        """Start a fetch, superseding any cycle that is still running."""

        previous = self._inflight
        if previous is not None and not previous.done():
            logger.debug("Cancelling stale poll for region %s", self.region_key)
            previous.cancel()

        self._inflight = asyncio.create_task(self._cycle())
        return self._inflight

    async def _cycle(self) -> Snapshot | None:
        try:
            snapshot = await self.fetch_snapshot(self.region_key)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("Poll for region %s failed: %s", self.region_key, exc)
            return None

        if snapshot.is_degraded:
            logger.warning(
                "Poll for region %s degraded (%s); keeping previous snapshot",
                self.region_key,
                snapshot.error,
            )
            return snapshot

        self.latest = snapshot
        if self.on_snapshot is not None:
            self.on_snapshot(snapshot)
        return snapshot

    async def run(self) -> None:
        """Poll until cancelled, skipping cycles while the consumer is hidden."""

        self.start_cycle()
        try:
            while True:
                await self.sleep(self.interval)
                if not self.is_visible():
                    logger.debug("Consumer not visible; skipping poll for %s", self.region_key)
                    continue
                self.start_cycle()
        except asyncio.CancelledError:
            logger.info("Snapshot poller for %s cancelled", self.region_key)
            raise
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Cancel and wait for the in-flight cycle, if any."""

        task = self._inflight
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

    def search(self, query: str | None) -> Optional[AircraftRecord]:
        """Resolve ``query`` against the latest snapshot."""

        if self.latest is None:
            return None
        return find_aircraft_by_callsign(self.latest.aircraft, query)


__all__ = [
    "SnapshotPoller",
    "find_aircraft_by_callsign",
    "normalize_callsign",
]
