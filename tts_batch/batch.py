"""
Batch synthesis: one POST /tts per input line, one <n>.wav per success.

Items run strictly one at a time and in input order so a cold backend is never
flooded and file numbering is trivially stable. A failed item is logged,
recorded and skipped; it never stops the batch. The aggregate is counted
item by item, so a failure early in the batch is not masked by a later
success.

Blank lines are dropped before numbering: the n-th non-blank line becomes
n.wav.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

import httpx

from tts_batch.endpoint_client import EndpointClient, describe_transport_error
from tts_batch.logging_setup import success
from tts_batch.models import BatchOutcome, SynthesisRequest, SynthesisResult

log = logging.getLogger(__name__)


def read_input_lines(path: str | Path) -> list[str]:
    """Read the input file as UTF-8 lines (without line endings).

    Raises OSError if the file cannot be read and UnicodeDecodeError if it
    is not UTF-8.
    """
    with open(path, "r", encoding="utf-8") as f:
        return f.read().splitlines()


def build_requests(lines: list[str]) -> list[SynthesisRequest]:
    """Number the non-blank lines 1..n, trimming surrounding whitespace."""
    requests: list[SynthesisRequest] = []
    for line in lines:
        text = line.strip()
        if not text:
            continue
        requests.append(SynthesisRequest(sequence=len(requests) + 1, text=text))
    return requests


def _reject_constant(name: str) -> float:
    raise ValueError(f"non-finite number {name} is not valid JSON")


def payload_for(text: str) -> dict:
    """JSON body for one line.

    Input files are usually JSONL, one request object per line, and those are
    forwarded untouched. Any other line is wrapped as {"text": line}.

    Raises ValueError for an object containing NaN or Infinity, which cannot
    be sent as JSON.
    """
    if text.startswith("{"):
        try:
            parsed = json.loads(text, parse_constant=_reject_constant)
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, dict):
            return parsed
    return {"text": text}


def write_audio_atomic(path: Path, content: bytes) -> None:
    """Write bytes to a temp file and rename, so readers never see a partial file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    try:
        with open(tmp, "wb") as f:
            f.write(content)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


class BatchSynthesizer:
    """Sequential text-to-speech over a list of input lines."""

    def __init__(
        self,
        client: EndpointClient,
        output_dir: str | Path = ".",
        timeout: float = 600.0,
    ) -> None:
        self._client = client
        self._output_dir = Path(output_dir)
        self._timeout = timeout

    async def run(self, lines: list[str]) -> BatchOutcome:
        """Synthesize every non-blank line in order and return the aggregate."""
        requests = build_requests(lines)
        outcome = BatchOutcome()

        if not requests:
            log.warning("No input lines to synthesize")
            return outcome

        log.info("Starting text to speech for %d line(s)", len(requests))
        for request in requests:
            result = await self.synthesize_one(request, total=len(requests))
            outcome.record(result)

        if outcome.ok:
            success(
                log, "Text to speech completed: %d/%d succeeded",
                outcome.succeeded, outcome.total,
            )
        else:
            log.error(
                "Text to speech finished with failures: %d succeeded, %d failed (lines %s)",
                outcome.succeeded, outcome.failed,
                ", ".join(str(r.sequence) for r in outcome.failures),
            )
        return outcome

    async def synthesize_one(
        self, request: SynthesisRequest, total: int | None = None,
    ) -> SynthesisResult:
        """Run one item. Never raises for transport, HTTP or disk errors."""
        n = request.sequence
        log.info("Processing line %d%s...", n, f"/{total}" if total else "")

        try:
            payload = payload_for(request.text)
        except ValueError as exc:
            log.error("Line %d has an invalid payload: %s", n, exc)
            return SynthesisResult.failure(n, f"invalid payload: {exc}")

        try:
            resp = await self._client.synthesize(payload, timeout=self._timeout)
        except (ValueError, TypeError) as exc:
            # httpx refuses to encode the body
            log.error("Line %d could not be encoded: %s", n, exc)
            return SynthesisResult.failure(n, f"invalid payload: {exc}")
        except httpx.HTTPError as exc:
            reason = describe_transport_error(exc)
            log.error("Line %d failed: %s", n, reason)
            return SynthesisResult.failure(n, reason)

        if resp.status_code != 200:
            body = resp.text[:200]
            log.error(
                "Line %d failed with HTTP code: %d%s",
                n, resp.status_code, f" ({body})" if body else "",
            )
            return SynthesisResult.failure(n, f"HTTP {resp.status_code}")

        path = self._output_dir / request.file_name
        content = resp.content
        try:
            write_audio_atomic(path, content)
        except OSError as exc:
            log.error("Line %d: could not write %s: %s", n, path, exc)
            return SynthesisResult.failure(n, f"write failed: {exc}")

        log.info("Line %d -> %s (%d bytes)", n, path, len(content))
        return SynthesisResult.success(n, len(content), str(path))
