"""HTTP fetch with per-attempt deadlines and bounded retries."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from skyscope.errors import UpstreamUnavailableError

logger = logging.getLogger("skyscope.ingestors.fetcher")

BackoffPolicy = Callable[[int], float]
Sleep = Callable[[float], Awaitable[Any]]


def linear_backoff(base_delay: float) -> BackoffPolicy:
    """Delay of ``base_delay * (attempt_index + 1)`` seconds before a retry."""

    def policy(attempt_index: int) -> float:
        return base_delay * (attempt_index + 1)

    return policy


class ResilientFetcher:
    """Send requests through a shared client, retrying transport failures only.

    A response is returned as soon as the upstream answers, whatever its
    status code. Only failures where no response was received (connection
    errors, timeouts, the attempt deadline expiring) are retried.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout: float = 10.0,
        max_retries: int = 2,
        backoff: BackoffPolicy | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self.client = client
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff = backoff or linear_backoff(0.5)
        self.sleep = sleep

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        timeout: float | None = None,
        max_retries: int | None = None,
        **request_kwargs: Any,
    ) -> httpx.Response:
        """Perform the request, raising UpstreamUnavailableError once retries are exhausted."""

        deadline = self.timeout if timeout is None else timeout
        retries = self.max_retries if max_retries is None else max_retries
        attempts = retries + 1
        last_error: Exception | None = None

        for attempt_index in range(attempts):
            try:
                return await self._attempt(method, url, deadline, **request_kwargs)
            except (httpx.TransportError, asyncio.TimeoutError) as exc:
                last_error = exc
                if attempt_index + 1 >= attempts:
                    break
                delay = self.backoff(attempt_index)
                logger.warning(
                    "%s %s failed (attempt %s/%s): %r; retrying in %.2fs",
                    method,
                    url,
                    attempt_index + 1,
                    attempts,
                    exc,
                    delay,
                )
                await self.sleep(delay)

        logger.error("%s %s failed after %s attempts: %r", method, url, attempts, last_error)
        raise UpstreamUnavailableError(
            f"{method} {url} failed after {attempts} attempts"
        ) from last_error

    async def _attempt(
        self, method: str, url: str, deadline: float, **request_kwargs: Any
    ) -> httpx.Response:
        # Each attempt gets a fresh deadline covering the whole exchange.
        return await asyncio.wait_for(
            self.client.request(method, url, timeout=deadline, **request_kwargs),
            timeout=deadline,
        )


__all__ = ["BackoffPolicy", "ResilientFetcher", "linear_backoff"]
