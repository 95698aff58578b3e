"""
Health gate: poll the endpoint's /ping until it answers 200 or the attempt
budget runs out.

Serverless workers typically need tens of seconds (sometimes minutes) to load
the model after a cold start, so a single failed check is not fatal. The gate
is a two-state loop, Polling -> Ready | Exhausted:

  - the first 200 ends the loop immediately (no re-confirmation)
  - a transport failure counts the same as a non-200 status
  - the delay runs only between attempts, never after the last one
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from tts_batch.endpoint_client import EndpointClient
from tts_batch.logging_setup import success
from tts_batch.models import HealthCheckAttempt, HealthCheckPolicy

log = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class HealthGate:
    """Bounded retry loop guarding entry into the batch phase."""

    def __init__(
        self,
        client: EndpointClient,
        policy: HealthCheckPolicy,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._client = client
        self._policy = policy
        self._sleep = sleep

    @property
    def policy(self) -> HealthCheckPolicy:
        return self._policy

    async def check_once(self, attempt: int = 1) -> HealthCheckAttempt:
        """Issue one liveness check bounded by policy.request_timeout."""
        log.info("Pinging endpoint: %s", self._client.endpoint.ping_url)
        status, reason = await self._client.ping(self._policy.request_timeout)
        result = HealthCheckAttempt(attempt=attempt, status=status, reason=reason)
        if result.healthy:
            success(log, "Endpoint is healthy (HTTP %d)", status)
        else:
            log.warning(
                "Endpoint returned %s on attempt %d", result.describe(), attempt,
            )
        return result

    async def await_ready(self) -> bool:
        """Poll until healthy or out of attempts. Returns True when ready."""
        max_attempts = self._policy.max_attempts
        log.info("Starting health check for endpoint %s", self._client.endpoint.base_url)
        log.info(
            "Maximum attempts: %d, Retry delay: %gs",
            max_attempts, self._policy.retry_delay,
        )

        for attempt in range(1, max_attempts + 1):
            log.info("Health check attempt %d/%d", attempt, max_attempts)
            result = await self.check_once(attempt)
            if result.healthy:
                success(log, "Endpoint ready after %d attempt(s)", attempt)
                return True

            if attempt < max_attempts:
                log.warning(
                    "Health check failed. Retrying in %g seconds...",
                    self._policy.retry_delay,
                )
                await self._sleep(self._policy.retry_delay)

        log.error("Health check failed after %d attempts", max_attempts)
        return False
