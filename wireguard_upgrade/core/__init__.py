"""
Core package for the WireGuard upgrade orchestrator.

Contains fundamental data structures, constants, enumerations, settings and
exceptions used throughout the upgrade workflow.
"""

from .dataclasses import (
    CommandResult,
    ConfigSnapshot,
    DeviceProfile,
    InterfaceState,
    UpgradeResult,
    UpgradeStep,
)
from .enums import (
    FirmwareGeneration,
    TransitionState,
    UpgradeOutcome,
    UpgradePhase,
    VersionAction,
)
from .exceptions import (
    UpgradeError,
    EnvironmentProbeError,
    ReleaseIndexError,
    ReleaseNotFoundError,
    AssetSelectionError,
    NoMatchingAssetError,
    AmbiguousAssetError,
    DownloadError,
    IntegrityError,
    ConfigBackupError,
    ConfigDetachError,
    ConfigCommitError,
    ModuleUnloadError,
    PackageInstallError,
    ConfigRestoreError,
    PersistArtifactWarning,
)
from .config import Settings

__all__ = [
    # Data classes
    "CommandResult",
    "ConfigSnapshot",
    "DeviceProfile",
    "InterfaceState",
    "UpgradeResult",
    "UpgradeStep",
    # Enums
    "FirmwareGeneration",
    "TransitionState",
    "UpgradeOutcome",
    "UpgradePhase",
    "VersionAction",
    # Exceptions
    "UpgradeError",
    "EnvironmentProbeError",
    "ReleaseIndexError",
    "ReleaseNotFoundError",
    "AssetSelectionError",
    "NoMatchingAssetError",
    "AmbiguousAssetError",
    "DownloadError",
    "IntegrityError",
    "ConfigBackupError",
    "ConfigDetachError",
    "ConfigCommitError",
    "ModuleUnloadError",
    "PackageInstallError",
    "ConfigRestoreError",
    "PersistArtifactWarning",
    # Settings
    "Settings",
]
