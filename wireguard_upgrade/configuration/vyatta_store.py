"""
Vyatta configuration store adapter.

Wraps the EdgeOS configuration shell API (my_cli_shell_api, my_set,
my_delete, my_commit). All calls run inside the session environment that
`cli-shell-api getSessionEnv <pid>` hands out for this process.
"""

import os
import shlex
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from loguru import logger

from wireguard_upgrade.core.constants import CLI_SHELL_API, VYATTA_SBIN
from wireguard_upgrade.core.dataclasses import CommandResult
from wireguard_upgrade.system.commands import CommandRunner


def parse_session_env(output: str) -> Dict[str, str]:
    """
    Parse `getSessionEnv` output into environment variables.

    The API prints shell statements such as:
        declare -x -r CMD_WRAPPER_SESSION_ID="4242"; declare -x -r UNIONFS=unionfs
    """
    env = {}
    for token in shlex.split(output.replace(";", " ")):
        if token.startswith("-") or "=" not in token:
            continue
        key, value = token.split("=", 1)
        env[key] = value
    return env


def split_values(output: str) -> List[str]:
    """Split quoted multi-value output ("'wg0' 'wg1'") into plain strings."""
    return shlex.split(output)


class VyattaConfigStore:
    """Configuration store operations consumed by the transition manager."""

    def __init__(
        self,
        runner: CommandRunner,
        sbin: str = VYATTA_SBIN,
        session_env: Optional[Dict[str, str]] = None,
        pid: Optional[int] = None,
    ):
        self.runner = runner
        self.sbin = Path(sbin)
        self._session_env = session_env
        self.pid = pid or os.getpid()

    # =========================================================================
    # SESSION ENVIRONMENT
    # =========================================================================

    @property
    def session_env(self) -> Dict[str, str]:
        if self._session_env is None:
            result = self.runner.run([CLI_SHELL_API, "getSessionEnv", str(self.pid)])
            if not result.ok:
                logger.warning(f"[CONFIG] getSessionEnv failed: {result.output}")
                self._session_env = {}
            else:
                self._session_env = parse_session_env(result.stdout)
        return self._session_env

    def _api(self, *args: str) -> CommandResult:
        return self.runner.run(
            [str(self.sbin / "my_cli_shell_api"), *args], env=self.session_env
        )

    def _tool(self, tool: str, *args: str) -> CommandResult:
        return self.runner.run([str(self.sbin / tool), *args], env=self.session_env)

    # =========================================================================
    # SESSION LIFECYCLE
    # =========================================================================

    def setup_session(self) -> CommandResult:
        return self._api("setupSession")

    def in_session(self) -> bool:
        return self._api("inSession").ok

    def teardown_session(self) -> CommandResult:
        return self._api("teardownSession")

    # =========================================================================
    # READS
    # =========================================================================

    def exists_active_config(self, path: Sequence[str]) -> bool:
        return self._api("existsActive", *path).ok

    def dump_active_config(self) -> CommandResult:
        return self._api("showConfig", "--show-active-only")

    def list_nodes(self, path: Sequence[str]) -> CommandResult:
        """Child node names of path, quoted as by split_values()."""
        return self._api("listNodes", *path)

    def get_value(self, path: Sequence[str]) -> Optional[str]:
        result = self._api("returnValue", *path)
        return result.stdout.strip() if result.ok else None

    def get_values(self, path: Sequence[str]) -> List[str]:
        result = self._api("returnValues", *path)
        return split_values(result.stdout) if result.ok else []

    # =========================================================================
    # MUTATIONS (require an open session)
    # =========================================================================

    def set_value(self, path: Sequence[str], value: str) -> CommandResult:
        return self._tool("my_set", *path, value)

    def delete_node(self, path: Sequence[str]) -> CommandResult:
        return self._tool("my_delete", *path)

    def load_config(self, path: Path) -> CommandResult:
        return self._api("loadFile", str(path))

    def commit(self) -> CommandResult:
        return self._tool("my_commit")
