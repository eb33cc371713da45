"""
Configuration transition around the package swap.

Snapshots the active WireGuard configuration, detaches live interface state
from it, deletes the configuration tree before the package is replaced, and
loads the snapshot back afterwards.

State machine:
    IDLE -> SNAPSHOTTED -> DETACHED -> DELETED -> (package installed) -> RESTORED
Any failure moves to FAILED.
"""

import os
from typing import TYPE_CHECKING, List, Optional

from loguru import logger

from wireguard_upgrade.core.constants import (
    ADDRESS_NODE,
    CONFIG_PATH,
    ROUTE_ALLOWED_IPS_NODE,
)
from wireguard_upgrade.core.dataclasses import ConfigSnapshot, InterfaceState
from wireguard_upgrade.core.enums import TransitionState
from wireguard_upgrade.core.exceptions import (
    ConfigBackupError,
    ConfigCommitError,
    ConfigDetachError,
    ConfigRestoreError,
    UpgradeError,
)
from wireguard_upgrade.configuration.vyatta_store import VyattaConfigStore, split_values
from wireguard_upgrade.system.network import IpInterfaceControl

if TYPE_CHECKING:
    from wireguard_upgrade.upgrade.run_context import RunContext


class ConfigTransitionManager:
    """
    Moves the managed subsystem's configuration out of the way and back.

    Mutating steps expect the caller to hold a configuration session open
    (see RunContext.config_session); restore() opens its own.
    """

    def __init__(
        self,
        store: VyattaConfigStore,
        network: IpInterfaceControl,
        context: "RunContext",
        config_path: str = CONFIG_PATH,
    ):
        self.store = store
        self.network = network
        self.context = context
        self.config_path: List[str] = config_path.split()
        self.state = TransitionState.IDLE
        self.snapshot_taken: Optional[ConfigSnapshot] = None
        self.config_deleted = False

    def _fail(self, error: UpgradeError) -> UpgradeError:
        self.state = TransitionState.FAILED
        return error

    def _require(self, *states: TransitionState):
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise RuntimeError(
                f"Configuration transition is {self.state.value}, expected one of: {allowed}"
            )

    # =========================================================================
    # EXISTENCE AND BACKUP
    # =========================================================================

    def has_active_config(self) -> bool:
        return self.store.exists_active_config(self.config_path)

    def snapshot(self) -> ConfigSnapshot:
        """
        Dump the active-only configuration to the run's snapshot file.

        The file is flushed and fsynced before returning, so deletion can
        safely follow.

        Raises:
            ConfigBackupError: If the dump fails or produces nothing
        """
        self._require(TransitionState.IDLE)
        logger.info("Backing up running configuration...")

        result = self.store.dump_active_config()
        if not result.ok or not result.stdout.strip():
            raise self._fail(
                ConfigBackupError(
                    "Failure backing up running configuration.",
                    remediation="No changes were made to the device.",
                    returncode=result.returncode,
                    detail=result.output or "empty configuration dump",
                )
            )

        path = self.context.snapshot_path
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(result.stdout)
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise self._fail(
                ConfigBackupError(
                    "Failure writing configuration backup.",
                    remediation="No changes were made to the device.",
                    detail=f"{path}: {e}",
                )
            ) from e

        self.snapshot_taken = ConfigSnapshot(path=path, size=path.stat().st_size)
        self.state = TransitionState.SNAPSHOTTED
        logger.debug(f"[CONFIG] Snapshot written to {path} ({self.snapshot_taken.size} bytes)")
        return self.snapshot_taken

    # =========================================================================
    # DETACH AND DELETE
    # =========================================================================

    def interface_names(self) -> List[str]:
        """
        Names of the configured interfaces.

        The tree is known to exist at this point, so a failed listing is an
        error rather than an empty subtree.

        Raises:
            ConfigDetachError: If the node listing fails
        """
        result = self.store.list_nodes(self.config_path)
        self._checked(result, "list interfaces")
        return split_values(result.stdout)

    def interface_states(self) -> List[InterfaceState]:
        """Configured and live addresses of every configured interface."""
        states = []
        for name in self.interface_names():
            configured = self.store.get_values([*self.config_path, name, ADDRESS_NODE])
            states.append(
                InterfaceState(
                    name=name,
                    configured_addresses=set(configured),
                    live_addresses=self.network.list_addresses(name),
                )
            )
        return states

    def detach_live_state(self):
        """
        Keep the device reachable while the configuration tree is gone.

        For each interface: turn off route-allowed-ips (committing) so the
        delete does not leave broken routes, then assign every configured
        address missing from the live interface directly with iproute2.

        Raises:
            ConfigDetachError: On a failed listing, set, commit or address assignment
        """
        self._require(TransitionState.SNAPSHOTTED)
        logger.info("Removing running WireGuard configuration...")

        for name in self.interface_names():
            route_path = [*self.config_path, name, ROUTE_ALLOWED_IPS_NODE]
            if self.store.get_value(route_path) == "true":
                logger.debug(f"[CONFIG] Disabling {ROUTE_ALLOWED_IPS_NODE} on {name}")
                self._checked(self.store.set_value(route_path, "false"), f"set {name}")
                self._checked(self.store.commit(), f"commit {name}")

        for state in self.interface_states():
            for address in state.missing_addresses:
                logger.debug(f"[CONFIG] Assigning {address} to {state.name}")
                self._checked(
                    self.network.add_address(state.name, address),
                    f"add {address} to {state.name}",
                )

        self.state = TransitionState.DETACHED

    def _checked(self, result, action: str):
        if not result.ok:
            raise self._fail(
                ConfigDetachError(
                    f"Failure detaching live WireGuard state ({action}).",
                    remediation=(
                        "The configuration was not deleted; check interface state "
                        "before retrying."
                    ),
                    returncode=result.returncode,
                    detail=result.output,
                )
            )

    def delete_config(self):
        """
        Delete the subsystem's configuration tree and commit.

        Raises:
            ConfigCommitError: If the delete or commit fails
        """
        self._require(TransitionState.DETACHED)

        result = self.store.delete_node(self.config_path)
        if result.ok:
            result = self.store.commit()
        if not result.ok:
            raise self._fail(
                ConfigCommitError(
                    "Failure removing WireGuard configuration.",
                    returncode=result.returncode,
                    detail=result.output,
                )
            )

        self.config_deleted = True
        self.state = TransitionState.DELETED

    # =========================================================================
    # RESTORE
    # =========================================================================

    def restore(self, snapshot: ConfigSnapshot):
        """
        Load the snapshot back in a fresh session and commit.

        Raises:
            ConfigRestoreError: If the session, load, or commit fails
        """
        logger.info("Restoring previous running configuration...")

        with self.context.config_session(self.store, ConfigRestoreError):
            result = self.store.load_config(snapshot.path)
            if result.ok:
                result = self.store.commit()
            if not result.ok:
                raise self._fail(
                    ConfigRestoreError(
                        "Failure restoring previous WireGuard configuration.",
                        returncode=result.returncode,
                        detail=result.output,
                    )
                )

        self.state = TransitionState.RESTORED
