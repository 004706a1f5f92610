"""
Command-line entry points.

wol-detect and wol-remediate take no arguments and are meant to be run by
a fleet-management orchestrator. The orchestrator reads only the exit
code (1 = schedule remediation) and keeps stdout as an audit trail.
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from ._types import Mode, Severity
from .config import CheckerConfig, load_config
from .evaluator import ComplianceEvaluator
from .models import ComplianceResult
from .powershell import build_runner

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging for the checker.

    Logs go to stderr so stdout stays a clean audit trail.
    """
    logging.basicConfig(
        level=getattr(logging, log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr,
    )


def exit_code_for(status: Severity, config: CheckerConfig) -> int:
    """
    Map a status to the process exit code.

    Negative statuses (error, unsupported) use the configured
    negative_status_exit_code, which defaults to 0 so unsupported hardware
    does not raise alarms in the orchestrator.
    """
    if status == Severity.COMPLIANT:
        return 0
    if status == Severity.WARNING:
        return 1
    return config.negative_status_exit_code


def render(result: ComplianceResult) -> str:
    """Free-text summary printed to stdout."""
    lines = [
        f"Mode: {result.mode.value}",
        f"Manufacturer: {result.manufacturer_raw or result.manufacturer.value}",
        f"Firmware: {result.firmware_state or 'n/a'}",
        f"OS: {result.os_state or 'n/a'}",
        f"Status: {result.status.value}",
        "",
    ]
    lines.extend(result.trace)
    return "\n".join(lines)


def run(mode: Mode, log_level: Optional[str] = None) -> int:
    """Run one detect or remediate pass and return the exit code."""
    try:
        config = load_config()
    except (ValidationError, ValueError) as e:
        setup_logging(log_level or 'INFO')
        logger.error(f"Invalid configuration: {e}")
        print(f"Configuration error: {e}")
        return CheckerConfig().negative_status_exit_code

    if log_level:
        config.log_level = log_level
    setup_logging(config.log_level)

    evaluator = ComplianceEvaluator(config, build_runner(config))
    result = evaluator.run(mode)

    print(render(result))
    return exit_code_for(result.status, config)


def _main(mode: Mode, log_level: Optional[str] = None) -> None:
    try:
        code = run(mode, log_level)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        code = 130
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        code = 1
    sys.exit(code)


def detect_main() -> None:
    """Entry point for wol-detect."""
    _main(Mode.DETECT)


def remediate_main() -> None:
    """Entry point for wol-remediate."""
    _main(Mode.REMEDIATE)


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for wol-compliance {detect,remediate}."""
    parser = argparse.ArgumentParser(description="Wake-on-LAN compliance checker")
    parser.add_argument(
        "mode",
        choices=[m.value for m in Mode],
        help="detect reports drift; remediate fixes it"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (overrides WOL_LOG_LEVEL)"
    )

    args = parser.parse_args(argv)
    _main(Mode(args.mode), args.log_level)


if __name__ == "__main__":
    main()
