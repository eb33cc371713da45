"""
Device environment detection.

Reads the board identifier from /proc/cpuinfo and the firmware version from
the Vyatta version file, and normalizes them into a DeviceProfile. Pure
reads only: no retries, no side effects.
"""

from pathlib import Path
from typing import Mapping, Optional

from loguru import logger

from wireguard_upgrade.core.constants import (
    BOARD_ID_PREFIX,
    BOARD_REWRITES,
    CPUINFO_BOARD_FIELD,
    CPUINFO_PATH,
    FIRMWARE_VERSION_PATH,
)
from wireguard_upgrade.core.dataclasses import DeviceProfile
from wireguard_upgrade.core.enums import FirmwareGeneration
from wireguard_upgrade.core.exceptions import EnvironmentProbeError


def canonical_board_id(raw_board: str, rewrites: Mapping[str, str] = BOARD_REWRITES) -> str:
    """
    Map a raw hardware id onto the board tag used by release asset names.

    Args:
        raw_board: Board id as reported by the hardware (e.g. 'UBNT_E120')
        rewrites: Raw id -> canonical tag table

    Returns:
        Canonical board tag; unmapped ids pass through lower-cased
    """
    board = raw_board.strip().lower()
    if board.startswith(BOARD_ID_PREFIX):
        board = board[len(BOARD_ID_PREFIX):]
    return rewrites.get(board, board)


def parse_firmware_generation(firmware_version: str) -> FirmwareGeneration:
    """
    Derive the firmware generation from a version such as 'v2.0.9-hotfix.2'.

    Raises:
        EnvironmentProbeError: If the major component is not a supported generation
    """
    major = firmware_version.strip().split(".", 1)[0].lower()
    try:
        return FirmwareGeneration(major)
    except ValueError:
        raise EnvironmentProbeError(
            f"Unable to proceed with your firmware ({firmware_version or 'unknown'}).",
            remediation="Only EdgeOS v1.x and v2.x firmware are supported.",
        )


class EnvironmentProbe:
    """
    Detects board and firmware facts of the running device.

    Both paths are injectable so the probe can be exercised against fixture
    files instead of the live system.
    """

    def __init__(
        self,
        cpuinfo_path: str = CPUINFO_PATH,
        version_path: str = FIRMWARE_VERSION_PATH,
        rewrites: Optional[Mapping[str, str]] = None,
    ):
        self.cpuinfo_path = Path(cpuinfo_path)
        self.version_path = Path(version_path)
        self.rewrites = BOARD_REWRITES if rewrites is None else rewrites

    def read_raw_board_id(self) -> str:
        """Return the 'system type' value from cpuinfo, or '' when absent."""
        try:
            text = self.cpuinfo_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise EnvironmentProbeError(
                "Unable to get board type.",
                detail=f"{self.cpuinfo_path}: {e}",
            )

        for line in text.splitlines():
            key, sep, value = line.partition(":")
            if sep and key.strip().lower() == CPUINFO_BOARD_FIELD:
                return value.strip()
        return ""

    def read_firmware_version(self) -> str:
        """Return the second field of the firmware version file."""
        try:
            text = self.version_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise EnvironmentProbeError(
                "Unable to read firmware version.",
                detail=f"{self.version_path}: {e}",
            )

        for line in text.splitlines():
            parts = line.split()
            if len(parts) >= 2:
                return parts[1]
        return ""

    def probe(self) -> DeviceProfile:
        """
        Detect the device profile.

        Returns:
            DeviceProfile with canonical board id and firmware generation

        Raises:
            EnvironmentProbeError: If board or firmware cannot be determined
        """
        raw_board = self.read_raw_board_id()
        if not raw_board.strip():
            raise EnvironmentProbeError(
                "Unable to get board type.",
                detail=f"No '{CPUINFO_BOARD_FIELD}' entry in {self.cpuinfo_path}",
            )

        board = canonical_board_id(raw_board, self.rewrites)
        logger.info(f"Board type detected: {board}")

        firmware = self.read_firmware_version()
        logger.info(f"Firmware version: {firmware or 'unknown'}")
        generation = parse_firmware_generation(firmware)

        return DeviceProfile(
            board_id=board,
            firmware_generation=generation,
            firmware_version=firmware,
        )
