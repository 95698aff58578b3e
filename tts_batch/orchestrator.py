"""Health gate first, then the batch. Returns a ProcessResult, never exits."""

from __future__ import annotations

import logging

from tts_batch.batch import BatchSynthesizer
from tts_batch.health_gate import HealthGate
from tts_batch.logging_setup import success
from tts_batch.models import ProcessResult

log = logging.getLogger(__name__)

NOT_HEALTHY = "endpoint not healthy"


class Orchestrator:
    """Sequences the two phases and decides the process-level result."""

    def __init__(self, gate: HealthGate, synthesizer: BatchSynthesizer) -> None:
        self._gate = gate
        self._synthesizer = synthesizer

    async def check_health(self) -> ProcessResult:
        """Gate only (--health-only)."""
        if not await self._gate.await_ready():
            log.error("Endpoint is not healthy")
            return ProcessResult.fatal(NOT_HEALTHY)
        success(log, "Endpoint is healthy! ✓")
        return ProcessResult.ok()

    async def run(self, lines: list[str]) -> ProcessResult:
        if not await self._gate.await_ready():
            log.error("Cannot proceed with text to speech - endpoint is not healthy")
            return ProcessResult.fatal(NOT_HEALTHY)

        outcome = await self._synthesizer.run(lines)
        if outcome.ok:
            return ProcessResult.ok(outcome)

        if outcome.total == 0:
            reason = "no input lines"
        else:
            reason = f"{outcome.failed} of {outcome.total} item(s) failed"
        return ProcessResult.partial_failure(outcome, reason)
