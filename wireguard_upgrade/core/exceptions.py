"""
Custom exception classes for upgrade operations.

Provides hierarchical exception handling for granular error categorization.
Every fatal error maps to a stable process exit code and the upgrade phase it
belongs to, so the CLI can report "<code>@<phase>" the way operators expect.
"""

from typing import Optional

from .enums import UpgradePhase


class UpgradeError(Exception):
    """Base exception for all upgrade-related errors"""

    exit_code: int = 1
    default_phase: UpgradePhase = UpgradePhase.FAILED
    fatal: bool = True

    def __init__(
        self,
        message: str,
        remediation: str = None,
        returncode: Optional[int] = None,
        detail: Optional[str] = None,
    ):
        self.message = message
        self.remediation = remediation
        self.returncode = returncode
        self.detail = detail
        self.phase = self.default_phase
        super().__init__(self.message)


class EnvironmentProbeError(UpgradeError):
    """Raised when board or firmware information cannot be determined"""

    exit_code = 10
    default_phase = UpgradePhase.PROBING


class ReleaseIndexError(UpgradeError):
    """Raised when the release index cannot be fetched or parsed"""

    exit_code = 20
    default_phase = UpgradePhase.RESOLVING


class ReleaseNotFoundError(UpgradeError):
    """Raised when a pinned release tag does not exist in the index"""

    exit_code = 21
    default_phase = UpgradePhase.RESOLVING


class AssetSelectionError(UpgradeError):
    """Base for failures to pick a single package asset"""

    exit_code = 30
    default_phase = UpgradePhase.SELECTING


class NoMatchingAssetError(AssetSelectionError):
    """Raised when no asset matches the board and firmware generation"""

    pass


class AmbiguousAssetError(AssetSelectionError):
    """Raised when more than one asset matches the board and firmware generation"""

    exit_code = 31


class DownloadError(UpgradeError):
    """Raised when the package download fails"""

    exit_code = 40
    default_phase = UpgradePhase.FETCHING


class IntegrityError(UpgradeError):
    """Raised when the downloaded artifact is not a well-formed package"""

    exit_code = 41
    default_phase = UpgradePhase.FETCHING


class ConfigBackupError(UpgradeError):
    """Raised when the running configuration cannot be dumped"""

    exit_code = 50
    default_phase = UpgradePhase.TRANSITIONING


class ConfigDetachError(UpgradeError):
    """Raised when live interface state cannot be detached from configuration"""

    exit_code = 51
    default_phase = UpgradePhase.TRANSITIONING


class ConfigCommitError(UpgradeError):
    """Raised when deleting the subsystem configuration cannot be committed"""

    exit_code = 52
    default_phase = UpgradePhase.TRANSITIONING


class ModuleUnloadError(UpgradeError):
    """Raised when the kernel module cannot be removed"""

    exit_code = 60
    default_phase = UpgradePhase.UNLOADING


class PackageInstallError(UpgradeError):
    """Raised when the package manager fails to install the package"""

    exit_code = 61
    default_phase = UpgradePhase.INSTALLING


class ConfigRestoreError(UpgradeError):
    """Raised when the configuration snapshot cannot be loaded back.

    The package is already installed at this point, so the device runs the new
    version without its WireGuard configuration.
    """

    exit_code = 70
    default_phase = UpgradePhase.RESTORING


class PersistArtifactWarning(UpgradeError):
    """Raised when the package cannot be staged for first-boot reinstall"""

    exit_code = 0
    default_phase = UpgradePhase.PERSISTING
    fatal = False
