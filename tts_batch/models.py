"""
Value types shared by the health gate, the batch loop and the orchestrator.

Endpoint and HealthCheckPolicy are built once from Config and never mutated.
Attempts and per-item results are produced and consumed inside a single run.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Status recorded when the health check never got an HTTP response.
UNREACHABLE = 0

# SynthesisResult.outcome values
SUCCESS = "success"
FAILURE = "failure"

# ProcessResult.kind values
OK = "ok"
PARTIAL_FAILURE = "partial_failure"
FATAL = "fatal"


@dataclass(frozen=True)
class Endpoint:
    """Remote inference endpoint: base address plus bearer credential."""

    base_url: str
    api_key: str
    endpoint_id: str = ""

    ping_path = "/ping"
    tts_path = "/tts"

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def ping_url(self) -> str:
        return self.base_url + self.ping_path

    @property
    def tts_url(self) -> str:
        return self.base_url + self.tts_path


@dataclass(frozen=True)
class HealthCheckPolicy:
    """Attempt budget and timing for the health gate."""

    max_attempts: int = 10
    retry_delay: float = 60.0
    request_timeout: float = 30.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(
                f"max_attempts must be >= 1, got {self.max_attempts}"
            )
        if self.retry_delay < 0:
            raise ValueError(
                f"retry_delay must be >= 0, got {self.retry_delay}"
            )
        if self.request_timeout <= 0:
            raise ValueError(
                f"request_timeout must be > 0, got {self.request_timeout}"
            )


@dataclass(frozen=True)
class HealthCheckAttempt:
    attempt: int
    status: int
    reason: str = ""

    @property
    def healthy(self) -> bool:
        return self.status == 200

    def describe(self) -> str:
        """Human-readable status for log lines ("HTTP 503", "unreachable")."""
        if self.status == UNREACHABLE:
            if self.reason:
                return f"unreachable ({self.reason})"
            return "unreachable"
        return f"HTTP {self.status}"


@dataclass(frozen=True)
class SynthesisRequest:
    """One non-blank input line and its 1-based sequence number."""

    sequence: int
    text: str

    @property
    def file_name(self) -> str:
        return f"{self.sequence}.wav"


@dataclass(frozen=True)
class SynthesisResult:
    sequence: int
    outcome: str
    bytes_written: int = 0
    status_or_reason: str = ""
    path: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome == SUCCESS

    @classmethod
    def success(cls, sequence: int, bytes_written: int, path: str) -> SynthesisResult:
        return cls(
            sequence=sequence,
            outcome=SUCCESS,
            bytes_written=bytes_written,
            path=path,
        )

    @classmethod
    def failure(cls, sequence: int, status_or_reason: str) -> SynthesisResult:
        return cls(
            sequence=sequence,
            outcome=FAILURE,
            status_or_reason=status_or_reason,
        )


@dataclass
class BatchOutcome:
    """Ordered per-item results plus the counters derived from them.

    Counters are accumulated per item through record(); the overall flag is
    True only when at least one item ran and none failed.
    """

    results: list[SynthesisResult] = field(default_factory=list)
    succeeded: int = 0
    failed: int = 0

    def record(self, result: SynthesisResult) -> None:
        if self.results and result.sequence <= self.results[-1].sequence:
            raise ValueError(
                f"Result {result.sequence} recorded out of order "
                f"(last was {self.results[-1].sequence})"
            )
        self.results.append(result)
        if result.succeeded:
            self.succeeded += 1
        else:
            self.failed += 1

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def ok(self) -> bool:
        return self.total > 0 and self.failed == 0

    @property
    def failures(self) -> list[SynthesisResult]:
        return [r for r in self.results if not r.succeeded]


@dataclass(frozen=True)
class ProcessResult:
    """Process-level result of one orchestrator run."""

    kind: str
    outcome: BatchOutcome | None = None
    reason: str = ""

    @classmethod
    def ok(cls, outcome: BatchOutcome | None = None) -> ProcessResult:
        return cls(kind=OK, outcome=outcome)

    @classmethod
    def partial_failure(cls, outcome: BatchOutcome, reason: str = "") -> ProcessResult:
        return cls(kind=PARTIAL_FAILURE, outcome=outcome, reason=reason)

    @classmethod
    def fatal(cls, reason: str) -> ProcessResult:
        return cls(kind=FATAL, reason=reason)

    @property
    def exit_code(self) -> int:
        return 0 if self.kind == OK else 1
