"""
HTTP client for the remote inference endpoint.

The endpoint sits behind a bearer-authenticated proxy and exposes:
  GET  /ping  liveness check, 200 once the model has finished loading
  POST /tts   JSON body in, raw WAV bytes out
"""

from __future__ import annotations

import logging

import httpx

from tts_batch.models import UNREACHABLE, Endpoint

log = logging.getLogger(__name__)


class EndpointClient:
    """Async HTTP client for one inference endpoint."""

    def __init__(self, endpoint: Endpoint) -> None:
        self._endpoint = endpoint
        self._client: httpx.AsyncClient | None = None

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    async def start(self) -> None:
        """Create the persistent httpx.AsyncClient."""
        self._client = httpx.AsyncClient(
            timeout=30.0,
            headers={"Authorization": f"Bearer {self._endpoint.api_key}"},
        )

    async def close(self) -> None:
        """Close the httpx client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> EndpointClient:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _ensure_started(self) -> httpx.AsyncClient:
        """Return the active client or raise if not started."""
        if self._client is None:
            raise RuntimeError(
                "EndpointClient not started. Call await client.start() first."
            )
        return self._client

    # -- Liveness ----------------------------------------------------------------

    async def ping(self, timeout: float) -> tuple[int, str]:
        """GET /ping. Returns (status_code, reason).

        Transport failures (refused, timeout, DNS) come back as
        (UNREACHABLE, description) instead of raising.
        """
        client = self._ensure_started()
        try:
            resp = await client.get(self._endpoint.ping_url, timeout=timeout)
        except httpx.HTTPError as exc:
            return UNREACHABLE, describe_transport_error(exc)
        return resp.status_code, ""

    # -- Synthesis ---------------------------------------------------------------

    async def synthesize(self, payload: dict, timeout: float = 600.0) -> httpx.Response:
        """POST /tts with a JSON payload.

        Returns the response whatever its status; the caller decides what a
        non-200 means. Raises httpx.HTTPError on transport failure.
        """
        client = self._ensure_started()
        return await client.post(
            self._endpoint.tts_url,
            json=payload,
            timeout=timeout,  # synthesis can take minutes on a cold worker
        )


def describe_transport_error(exc: httpx.HTTPError) -> str:
    """Short reason string for a transport failure, for logs and results."""
    if isinstance(exc, httpx.TimeoutException):
        return "timeout"
    detail = str(exc)
    name = type(exc).__name__
    return f"{name}: {detail}" if detail else name

