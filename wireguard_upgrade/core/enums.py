"""
Application enumerations for type safety and clear intent definitions.

Centralized enum definitions for firmware generations, upgrade phases,
version actions, and configuration transition states.
"""

from enum import Enum


class FirmwareGeneration(Enum):
    """Major version family of the EdgeOS base firmware."""

    V1 = "v1"
    V2 = "v2"


class UpgradePhase(Enum):
    """Phases of the upgrade process, in execution order."""

    STARTING = "starting"
    PROBING = "probing"
    RESOLVING = "resolving"
    SELECTING = "selecting"
    FETCHING = "fetching"
    TRANSITIONING = "transitioning"
    UNLOADING = "unloading"
    INSTALLING = "installing"
    RESTORING = "restoring"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    FAILED = "failed"


class VersionAction(Enum):
    """Types of version changes."""

    FRESH_INSTALL = "fresh_install"
    UPGRADE = "upgrade"
    SAME_VERSION = "same_version"
    DOWNGRADE = "downgrade"


class TransitionState(Enum):
    """States of the configuration transition around the package swap."""

    IDLE = "idle"
    SNAPSHOTTED = "snapshotted"
    DETACHED = "detached"
    DELETED = "deleted"
    RESTORED = "restored"
    FAILED = "failed"


class UpgradeOutcome(Enum):
    """Final result of a successful run."""

    UP_TO_DATE = "up_to_date"
    INSTALLED = "installed"
    INSTALLED_WITH_WARNINGS = "installed_with_warnings"
