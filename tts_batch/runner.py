"""
Command-line entry point: health-check the endpoint, then synthesize a file.

    tts-batch -f lines.jsonl
    tts-batch --health-only --max-attempts 3

Exit codes: 0 success, 1 failure (config, health, any item, empty batch),
2 usage error, 130 interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import os
import signal
import sys

from tts_batch.batch import BatchSynthesizer, read_input_lines
from tts_batch.config import Config, ConfigurationError, load_env_files
from tts_batch.endpoint_client import EndpointClient
from tts_batch.health_gate import HealthGate
from tts_batch.logging_setup import setup_logging, success
from tts_batch.models import ProcessResult
from tts_batch.orchestrator import Orchestrator

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tts-batch",
        description=(
            "Wait for a RunPod text-to-speech endpoint to become healthy, "
            "then synthesize one WAV file per input line."
        ),
        epilog=(
            "examples:\n"
            "  tts-batch -f mytext.jsonl        # health check + tts\n"
            "  tts-batch --health-only          # health check only"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-f", "--file", help="Input file, one item per line (JSONL or plain text)")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Health check request timeout in seconds (default: 30)")
    parser.add_argument("--max-attempts", type=int, default=None,
                        help="Health check attempts before giving up (default: 10)")
    parser.add_argument("--retry-delay", type=float, default=None,
                        help="Seconds between health check attempts (default: 60)")
    parser.add_argument("--synthesis-timeout", type=float, default=None,
                        help="Per-line synthesis timeout in seconds (default: 600)")
    parser.add_argument("--output-dir", default=None,
                        help="Directory for <n>.wav files (default: current directory)")
    parser.add_argument("--log-file", default=None,
                        help="Append-only log file (default: runpod_script.log)")
    parser.add_argument("--health-only", action="store_true",
                        help="Only run the health check, skip synthesis")
    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Return config with any CLI flags layered over the environment values."""
    overrides = {
        "health_timeout": args.timeout,
        "health_max_attempts": args.max_attempts,
        "health_retry_delay": args.retry_delay,
        "synthesis_timeout": args.synthesis_timeout,
        "output_dir": args.output_dir,
    }
    return dataclasses.replace(
        config, **{k: v for k, v in overrides.items() if v is not None}
    )


async def run(config: Config, lines: list[str] | None) -> ProcessResult:
    """Run the gate (and the batch unless lines is None) against the endpoint."""
    task = asyncio.current_task()
    loop = asyncio.get_running_loop()

    def _signal_handler() -> None:
        log.warning("Interrupt received, aborting")
        if task is not None:
            task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    try:
        async with EndpointClient(config.endpoint()) as client:
            gate = HealthGate(client, config.health_policy())
            synthesizer = BatchSynthesizer(
                client,
                output_dir=config.output_dir,
                timeout=config.synthesis_timeout,
            )
            orchestrator = Orchestrator(gate, synthesizer)
            if lines is None:
                return await orchestrator.check_health()
            return await orchestrator.run(lines)
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(sig)


def main(argv: list[str] | None = None) -> int:
    """Parse args, load config, run, and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.file and not args.health_only:
        parser.error("-f/--file is required unless --health-only is given")

    load_env_files()
    log_file = args.log_file or os.environ.get("LOG_FILE", "runpod_script.log").strip()
    setup_logging(log_file, os.environ.get("LOG_LEVEL", "INFO").strip())

    log.info("=== TTS batch started ===")
    log.info("Log file: %s", log_file)

    try:
        config = apply_overrides(Config.load(), args)
        config.health_policy()  # rejects max_attempts < 1 and bad timings
    except ConfigurationError as exc:
        log.error("%s", exc)
        return EXIT_FAILURE

    lines: list[str] | None = None
    if not args.health_only:
        try:
            lines = read_input_lines(args.file)
        except (OSError, UnicodeDecodeError) as exc:
            log.error("Cannot read input file %s: %s", args.file, exc)
            return EXIT_FAILURE
        log.info("Read %d line(s) from %s", len(lines), args.file)

    try:
        result = asyncio.run(run(config, lines))
    except (KeyboardInterrupt, asyncio.CancelledError):
        log.warning("Interrupted; no partial output files were left behind")
        return EXIT_INTERRUPTED

    if result.exit_code == EXIT_OK:
        success(log, "=== Script completed successfully! ===")
    else:
        log.error("=== Script failed: %s ===", result.reason)
    return result.exit_code


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
