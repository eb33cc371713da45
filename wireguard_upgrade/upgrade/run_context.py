"""
Run context shared by every component of an upgrade run.

Owns the scoped temporary working directory and the handle of an open
configuration session. Closing the context is the single cleanup path:
it tears down a session left open and removes the temp directory, exactly
once, whether the run succeeded, returned early, or failed.
"""

import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Iterator, Optional, Type

from loguru import logger

from wireguard_upgrade.core.constants import SNAPSHOT_FILENAME, TEMP_DIR_PREFIX
from wireguard_upgrade.core.exceptions import UpgradeError

if TYPE_CHECKING:
    from wireguard_upgrade.configuration.vyatta_store import VyattaConfigStore


class RunContext:
    """Scoped resources of a single run; use as a context manager."""

    def __init__(self, temp_dir: Path):
        self.temp_dir = Path(temp_dir)
        self.session: Optional["VyattaConfigStore"] = None
        self.closed = False

    @classmethod
    def create(cls, root: Optional[str] = None) -> "RunContext":
        """Create a context with a fresh private temp directory under root."""
        temp_dir = tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX, dir=root)
        logger.debug(f"[CONTEXT] Working directory {temp_dir}")
        return cls(Path(temp_dir))

    @property
    def snapshot_path(self) -> Path:
        return self.temp_dir / SNAPSHOT_FILENAME

    @contextmanager
    def config_session(
        self, store: "VyattaConfigStore", error_cls: Type[UpgradeError]
    ) -> Iterator["VyattaConfigStore"]:
        """
        Hold a configuration session open for the duration of the block.

        Args:
            store: Configuration store to open the session on
            error_cls: Error raised if the session cannot be set up or torn down

        Yields:
            The store, with an open session

        Raises:
            error_cls: When setup fails, or teardown fails after a clean block
        """
        store.setup_session()
        if not store.in_session():
            raise error_cls(
                "Failure occurred while setting up vyatta configuration session."
            )
        self.session = store

        try:
            yield store
        except BaseException:
            self._teardown_session(raise_on_failure=None)
            raise
        else:
            self._teardown_session(raise_on_failure=error_cls)

    def _teardown_session(self, raise_on_failure: Optional[Type[UpgradeError]]):
        store, self.session = self.session, None
        if store is None:
            return

        result = store.teardown_session()
        if result.ok:
            return

        message = "Failure occurred while tearing down vyatta configuration session."
        if raise_on_failure is None:
            logger.error(f"{message} {result.output}")
            return
        raise raise_on_failure(message, returncode=result.returncode, detail=result.output)

    def close(self):
        """Release everything the run holds. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True

        if self.session is not None and self.session.in_session():
            self._teardown_session(raise_on_failure=None)
        self.session = None

        shutil.rmtree(self.temp_dir, ignore_errors=True)
        logger.debug(f"[CONTEXT] Removed {self.temp_dir}")

    def __enter__(self) -> "RunContext":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
