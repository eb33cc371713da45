"""
Persistent artifacts written outside the run's temp directory.

The installed package is staged in the first-boot directory so a firmware
update reinstalls it. A configuration snapshot is copied to the recovery
directory when a run fails after the configuration was changed.
"""

from datetime import datetime
from pathlib import Path

from loguru import logger

from wireguard_upgrade.core.constants import (
    FIRSTBOOT_DIR,
    FIRSTBOOT_FILENAME,
    RECOVERY_DIR,
)
from wireguard_upgrade.core.exceptions import PersistArtifactWarning
from wireguard_upgrade.system.commands import CommandRunner


class ArtifactStager:
    """Moves run artifacts into persistent, root-owned locations."""

    def __init__(
        self,
        runner: CommandRunner,
        firstboot_dir: str = FIRSTBOOT_DIR,
        firstboot_filename: str = FIRSTBOOT_FILENAME,
        recovery_dir: str = RECOVERY_DIR,
    ):
        self.runner = runner
        self.firstboot_dir = Path(firstboot_dir)
        self.firstboot_filename = firstboot_filename
        self.recovery_dir = Path(recovery_dir)

    @property
    def firstboot_path(self) -> Path:
        return self.firstboot_dir / self.firstboot_filename

    def persist_package(self, package_path: Path) -> Path:
        """
        Move the installed package to the first-boot install directory.

        Args:
            package_path: Verified package inside the run's temp directory

        Returns:
            Final path of the staged package

        Raises:
            PersistArtifactWarning: If the directory or the move fails
        """
        logger.info("Enabling WireGuard installation after firmware update...")

        result = self.runner.run(["mkdir", "-p", str(self.firstboot_dir)], privileged=True)
        if not result.ok:
            raise PersistArtifactWarning(
                f"Failure creating '{self.firstboot_dir}' directory.",
                remediation="WireGuard will not be reinstalled after a firmware update.",
                returncode=result.returncode,
                detail=result.output,
            )

        result = self.runner.run(
            ["mv", "-f", str(package_path), str(self.firstboot_path)], privileged=True
        )
        if not result.ok:
            raise PersistArtifactWarning(
                "Failure moving debian package to firstboot path.",
                remediation="WireGuard will not be reinstalled after a firmware update.",
                returncode=result.returncode,
                detail=result.output,
            )

        logger.debug(f"[PERSIST] Staged {self.firstboot_path}")
        return self.firstboot_path

    def preserve_snapshot(self, snapshot_path: Path) -> Path:
        """
        Copy a configuration snapshot to the recovery directory.

        Returns:
            Path of the recovery copy

        Raises:
            OSError: If the copy cannot be made
        """
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        target = self.recovery_dir / f"wireguard-{stamp}.{snapshot_path.name}"

        for args in (
            ["mkdir", "-p", str(self.recovery_dir)],
            ["cp", str(snapshot_path), str(target)],
        ):
            result = self.runner.run(args, privileged=True)
            if not result.ok:
                raise OSError(f"{' '.join(args)} failed: {result.output}")

        logger.warning(f"[RECOVERY] Configuration backup saved to {target}")
        return target
