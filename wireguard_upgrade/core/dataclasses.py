"""
Data classes for the upgrade orchestrator.

Defines structured data containers for device facts, command results,
interface state, and upgrade results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Set

from .enums import FirmwareGeneration, UpgradeOutcome, VersionAction


@dataclass(frozen=True)
class DeviceProfile:
    """Board and firmware facts, derived once per run."""

    board_id: str
    firmware_generation: FirmwareGeneration
    firmware_version: str = ""


@dataclass(frozen=True)
class CommandResult:
    """Outcome of an external command."""

    args: Sequence[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined output, preferring stderr for error reporting."""
        return (self.stderr or self.stdout).strip()


@dataclass(frozen=True)
class ConfigSnapshot:
    """Active-only configuration dump written to the run's temp directory."""

    path: Path
    size: int = 0

    def exists(self) -> bool:
        return self.path.is_file()


@dataclass
class InterfaceState:
    """Configured versus live addresses of a single WireGuard interface."""

    name: str
    configured_addresses: Set[str] = field(default_factory=set)
    live_addresses: Set[str] = field(default_factory=set)

    @property
    def missing_addresses(self) -> List[str]:
        """Configured addresses not present on the live interface, sorted."""
        return sorted(self.configured_addresses - self.live_addresses)


@dataclass
class UpgradeStep:
    """Represents an individual step in the upgrade process."""

    step: str
    status: str
    message: str
    timestamp: float = 0.0


@dataclass
class UpgradeResult:
    """Results of an upgrade run."""

    outcome: Optional[UpgradeOutcome] = None
    start_time: float = 0.0
    end_time: float = 0.0
    upgrade_duration: float = 0.0
    profile: Optional[DeviceProfile] = None
    initial_version: Optional[str] = None
    target_version: Optional[str] = None
    version_action: Optional[VersionAction] = None
    pinned: bool = False
    asset_name: Optional[str] = None
    config_snapshot_taken: bool = False
    config_restored: bool = False
    module_unloaded: bool = False
    warnings: List[str] = field(default_factory=list)
    upgrade_steps: List[UpgradeStep] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.outcome is not None

    def calculate_duration(self) -> float:
        """Calculate total upgrade duration."""
        if self.start_time and self.end_time:
            self.upgrade_duration = self.end_time - self.start_time
        return self.upgrade_duration

    def add_step(self, step: str, status: str, message: str):
        """Add a step to the upgrade process."""
        self.upgrade_steps.append(
            UpgradeStep(
                step=step,
                status=status,
                message=message,
                timestamp=datetime.now().timestamp(),
            )
        )

    def add_warning(self, warning: str):
        """Add a warning message."""
        self.warnings.append(warning)
