"""
get-wireguard: install or upgrade the WireGuard package on an EdgeOS device.

Usage:
    get-wireguard [VERSION] [--json-events] [--verbose] [--config FILE]

Without VERSION the newest release is installed when it is newer than the
installed package. With VERSION that exact release tag is installed, even
when it is the same or an older version.
"""

import argparse
import os
import sys
import traceback
from typing import List, Optional

from loguru import logger

from wireguard_upgrade import __version__
from wireguard_upgrade.core.config import Settings
from wireguard_upgrade.core.enums import UpgradeOutcome
from wireguard_upgrade.core.exceptions import UpgradeError
from wireguard_upgrade.core.log_config import setup_logging
from wireguard_upgrade.progress.event_sender import EventEmitter
from wireguard_upgrade.progress.formatter import HumanReadableFormatter
from wireguard_upgrade.upgrade.install_coordinator import InstallCoordinator


# =============================================================================
# SECTION 1: ARGUMENTS
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="get-wireguard",
        description="Install or upgrade WireGuard on an EdgeOS device",
    )
    parser.add_argument(
        "pinned_version",
        metavar="VERSION",
        nargs="?",
        default=None,
        help="Exact release tag to install (default: latest)",
    )
    parser.add_argument(
        "--json-events",
        action="store_true",
        help="Print JSON progress events to stdout",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--config", default=None, help="YAML settings file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


# =============================================================================
# SECTION 2: ERROR REPORTING
# =============================================================================


def error_location(error: BaseException) -> str:
    """'<module>:<line>' of the frame that raised the error."""
    frames = traceback.extract_tb(error.__traceback__)
    if not frames:
        return "unknown:0"
    frame = frames[-1]
    module = os.path.splitext(os.path.basename(frame.filename))[0]
    return f"{module}:{frame.lineno}"


def format_error(error: UpgradeError) -> str:
    """Single-line operator report: '<code>@<phase>:<module>:<line> <message>'."""
    return f"{error.exit_code}@{error.phase.value}:{error_location(error)} {error.message}"


def report_failure(error: UpgradeError, emitter: EventEmitter):
    logger.error(format_error(error))
    if error.detail:
        logger.error(f"Detail: {error.detail}")
    if error.returncode is not None:
        logger.error(f"Command exit status: {error.returncode}")
    if error.remediation:
        logger.warning(error.remediation)

    emitter.operation_complete(
        success=False,
        message=error.message,
        error={
            "type": type(error).__name__,
            "exit_code": error.exit_code,
            "phase": error.phase,
            "location": error_location(error),
            "returncode": error.returncode,
            "detail": error.detail,
            "remediation": error.remediation,
        },
    )


# =============================================================================
# SECTION 3: MAIN
# =============================================================================


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.load(args.config)
    except (OSError, ValueError) as e:
        setup_logging(log_path=None, verbose=args.verbose)
        logger.error(f"Invalid settings: {e}")
        return 2

    setup_logging(log_path=settings.log_path, verbose=args.verbose)
    logger.debug(f"[MAIN] get-wireguard {__version__}, pinned={args.pinned_version or 'latest'}")

    emitter = EventEmitter(enabled=args.json_events)
    coordinator = InstallCoordinator.from_settings(settings, emitter)

    try:
        result = coordinator.run(args.pinned_version)
    except UpgradeError as e:
        report_failure(e, emitter)
        return e.exit_code
    finally:
        coordinator.close()

    emitter.operation_complete(
        success=True,
        message=(
            "Your installation is up to date."
            if result.outcome is UpgradeOutcome.UP_TO_DATE
            else "WireGuard has been successfully installed."
        ),
        result=result,
    )
    if not args.json_events:
        HumanReadableFormatter().print_upgrade_results(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
