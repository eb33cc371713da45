"""
Upgrade orchestration for the WireGuard package.

Drives the full sequence and owns the failure policy:

    1. probe device, resolve release (return early when up to date)
    2. select asset, fetch package
    3. snapshot, detach, delete the active configuration (one session)
    4. unload the kernel module
    5. install the package
    6. restore the configuration snapshot
    7. stage the package for first-boot reinstall (non-fatal)

Every fatal error aborts the remaining steps. Cleanup runs through the
RunContext on every exit path.
"""

import time
from typing import Optional

from loguru import logger

from wireguard_upgrade.configuration.transition import ConfigTransitionManager
from wireguard_upgrade.configuration.vyatta_store import VyattaConfigStore
from wireguard_upgrade.core.config import Settings
from wireguard_upgrade.core.constants import TOTAL_UPGRADE_STEPS
from wireguard_upgrade.core.dataclasses import UpgradeResult
from wireguard_upgrade.core.enums import (
    TransitionState,
    UpgradeOutcome,
    UpgradePhase,
)
from wireguard_upgrade.core.exceptions import (
    ConfigCommitError,
    ModuleUnloadError,
    PackageInstallError,
    PersistArtifactWarning,
    UpgradeError,
)
from wireguard_upgrade.environment.probe import EnvironmentProbe
from wireguard_upgrade.progress.event_sender import EventEmitter
from wireguard_upgrade.release.asset_selector import AssetSelector
from wireguard_upgrade.release.fetcher import PackageFetcher
from wireguard_upgrade.release.index_client import ReleaseIndexClient
from wireguard_upgrade.release.resolver import ReleaseResolver
from wireguard_upgrade.system.commands import CommandRunner
from wireguard_upgrade.system.kernel_modules import KernelModuleControl
from wireguard_upgrade.system.network import IpInterfaceControl
from wireguard_upgrade.system.package_manager import DpkgPackageManager
from wireguard_upgrade.upgrade.artifacts import ArtifactStager
from wireguard_upgrade.upgrade.run_context import RunContext
from wireguard_upgrade.validation.version_manager import (
    InvalidVersionError,
    classify_version_change,
)


# =============================================================================
# SECTION 1: INSTALL COORDINATOR
# =============================================================================


class InstallCoordinator:
    """
    Runs one WireGuard upgrade on the local device.

    Collaborators are injected so the whole sequence can run against fakes;
    from_settings() wires the real device adapters.
    """

    def __init__(
        self,
        settings: Settings,
        probe: EnvironmentProbe,
        index: ReleaseIndexClient,
        package_manager: DpkgPackageManager,
        fetcher: PackageFetcher,
        store: VyattaConfigStore,
        network: IpInterfaceControl,
        kernel_modules: KernelModuleControl,
        stager: ArtifactStager,
        emitter: Optional[EventEmitter] = None,
        selector: Optional[AssetSelector] = None,
        work_root: Optional[str] = None,
    ):
        self.settings = settings
        self.probe = probe
        self.index = index
        self.package_manager = package_manager
        self.fetcher = fetcher
        self.store = store
        self.network = network
        self.kernel_modules = kernel_modules
        self.stager = stager
        self.emitter = emitter or EventEmitter(enabled=False)
        self.selector = selector or AssetSelector()
        self.work_root = work_root

        self.phase = UpgradePhase.STARTING
        self.transition: Optional[ConfigTransitionManager] = None

    @classmethod
    def from_settings(
        cls, settings: Settings, emitter: Optional[EventEmitter] = None
    ) -> "InstallCoordinator":
        """Build a coordinator wired to the live device."""
        runner = CommandRunner()
        package_manager = DpkgPackageManager(runner)
        return cls(
            settings=settings,
            probe=EnvironmentProbe(settings.cpuinfo_path, settings.version_path),
            index=ReleaseIndexClient(settings.releases_url, timeout=settings.http_timeout),
            package_manager=package_manager,
            fetcher=PackageFetcher(package_manager, timeout=settings.http_timeout),
            store=VyattaConfigStore(runner, sbin=settings.vyatta_sbin),
            network=IpInterfaceControl(runner),
            kernel_modules=KernelModuleControl(runner, settings.proc_modules_path),
            stager=ArtifactStager(
                runner,
                firstboot_dir=settings.firstboot_dir,
                firstboot_filename=settings.firstboot_filename,
                recovery_dir=settings.recovery_dir,
            ),
            emitter=emitter,
        )

    def close(self):
        self.index.close()
        self.fetcher.close()

    # =========================================================================
    # SUBSECTION 1.1: RUN
    # =========================================================================

    def run(self, pinned_version: Optional[str] = None) -> UpgradeResult:
        """
        Execute the upgrade.

        Args:
            pinned_version: Exact release tag to install; None means latest

        Returns:
            UpgradeResult with the run's outcome

        Raises:
            UpgradeError: Any fatal error, tagged with the phase it happened in
        """
        result = UpgradeResult(start_time=time.time(), pinned=bool(pinned_version))
        self.phase = UpgradePhase.STARTING
        self.transition = None
        self.emitter.operation_start(TOTAL_UPGRADE_STEPS, pinned_version)

        with RunContext.create(self.work_root) as ctx:
            try:
                self._execute(ctx, pinned_version, result)
            except UpgradeError as e:
                e.phase = self.phase
                logger.debug(f"[UPGRADE] Failed during {self.phase.value}: {e.message}")
                self._preserve_snapshot(e)
                raise
            finally:
                result.end_time = time.time()
                result.calculate_duration()

        self.phase = UpgradePhase.COMPLETED
        return result

    def _step(self, result: UpgradeResult, number: int, name: str, message: str, status="completed"):
        result.add_step(name, status, message)
        self.emitter.step_complete(number, TOTAL_UPGRADE_STEPS, message)

    def _execute(self, ctx: RunContext, pinned_version: Optional[str], result: UpgradeResult):
        # Step 1: environment and release
        self.phase = UpgradePhase.PROBING
        result.profile = self.probe.probe()

        self.phase = UpgradePhase.RESOLVING
        installed = self.package_manager.query_installed_version(self.settings.package_name)
        logger.info(f"Installed WireGuard version: {installed or 'none'}")
        result.initial_version = installed

        release, needed = ReleaseResolver(self.index, installed).resolve(pinned_version)
        result.target_version = release.tag
        try:
            result.version_action = classify_version_change(installed, release.tag)
        except InvalidVersionError:
            result.version_action = None

        if not needed:
            logger.info("Your installation is up to date.")
            result.outcome = UpgradeOutcome.UP_TO_DATE
            self._step(result, 1, "resolve", f"Installed version {installed} is up to date")
            return
        self._step(result, 1, "resolve", f"Release {release.tag} selected")

        # Step 2: asset and package
        self.phase = UpgradePhase.SELECTING
        asset = self.selector.select(release, result.profile)
        result.asset_name = asset.name

        self.phase = UpgradePhase.FETCHING
        package_path = self.fetcher.fetch(asset, ctx.temp_dir)
        self._step(result, 2, "fetch", f"Downloaded and verified {asset.name}")

        # Step 3: configuration transition
        self.phase = UpgradePhase.TRANSITIONING
        self.transition = ConfigTransitionManager(
            self.store, self.network, ctx, self.settings.config_path
        )
        if self.transition.has_active_config():
            with ctx.config_session(self.store, ConfigCommitError):
                self.transition.snapshot()
                result.config_snapshot_taken = True
                self.transition.detach_live_state()
                self.transition.delete_config()
            self._step(result, 3, "transition", "WireGuard configuration backed up and removed")
        else:
            logger.debug("[UPGRADE] No active WireGuard configuration")
            self._step(result, 3, "transition", "No active configuration", status="skipped")

        # Step 4: kernel module
        self.phase = UpgradePhase.UNLOADING
        module = self.settings.module_name
        if self.kernel_modules.is_module_loaded(module):
            logger.info("Removing WireGuard module...")
            unload = self.kernel_modules.unload_module(module)
            if not unload.ok:
                raise ModuleUnloadError(
                    "A problem occurred while removing WireGuard module.",
                    returncode=unload.returncode,
                    detail=unload.output,
                )
            result.module_unloaded = True
            self._step(result, 4, "unload", f"Module {module} removed")
        else:
            self._step(result, 4, "unload", f"Module {module} not loaded", status="skipped")

        # Step 5: package install
        self.phase = UpgradePhase.INSTALLING
        logger.info("Installing WireGuard...")
        install = self.package_manager.install_package(package_path)
        if not install.ok:
            raise PackageInstallError(
                "A problem occurred while installing the package.",
                returncode=install.returncode,
                detail=install.output,
            )
        self._step(result, 5, "install", f"Installed WireGuard {release.tag}")

        # Step 6: restore
        self.phase = UpgradePhase.RESTORING
        snapshot = self.transition.snapshot_taken
        if snapshot is not None and snapshot.exists():
            self.transition.restore(snapshot)
            result.config_restored = True
            self._step(result, 6, "restore", "Previous configuration restored")
        else:
            self._step(result, 6, "restore", "Nothing to restore", status="skipped")

        # Step 7: first-boot staging
        self.phase = UpgradePhase.PERSISTING
        result.outcome = UpgradeOutcome.INSTALLED
        try:
            self.stager.persist_package(package_path)
            self._step(result, 7, "persist", "Package staged for first-boot install")
        except PersistArtifactWarning as w:
            logger.warning(w.message)
            result.add_warning(w.message)
            result.outcome = UpgradeOutcome.INSTALLED_WITH_WARNINGS
            self.emitter.warning(w.message, data={"phase": w.phase, "detail": w.detail})
            self._step(result, 7, "persist", w.message, status="warning")

        logger.success("WireGuard has been successfully installed.")

    # =========================================================================
    # SUBSECTION 1.2: FAILURE HANDLING
    # =========================================================================

    def _preserve_snapshot(self, error: UpgradeError):
        """
        Keep the configuration backup when a run fails after it was taken.

        The temp directory is removed on exit; without a copy the operator
        would lose the only record of the previous configuration.
        """
        transition = self.transition
        if transition is None or transition.snapshot_taken is None:
            return
        if transition.state is TransitionState.RESTORED:
            return
        if not transition.snapshot_taken.exists():
            return

        try:
            saved = self.stager.preserve_snapshot(transition.snapshot_taken.path)
        except OSError as e:
            logger.error(f"[RECOVERY] Could not preserve configuration backup: {e}")
            return

        if transition.config_deleted:
            note = (
                f"No automatic rollback was attempted. The previous configuration "
                f"was saved to {saved}; restore it with: configure; load {saved}; "
                f"commit; save"
            )
        else:
            note = f"The previous configuration was saved to {saved}."
        error.remediation = f"{error.remediation} {note}" if error.remediation else note
