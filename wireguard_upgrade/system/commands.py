"""
External command execution.

Runs device tools and returns an explicit CommandResult instead of raising
on non-zero exit, so each caller decides which failures are fatal.
"""

import os
import subprocess
from typing import Mapping, Optional, Sequence

from loguru import logger

from wireguard_upgrade.core.dataclasses import CommandResult

COMMAND_NOT_EXECUTABLE = 126
COMMAND_NOT_FOUND = 127


class CommandRunner:
    """
    Thin wrapper over subprocess.run.

    Commands flagged as privileged are prefixed with sudo when the process
    is not already running as root.
    """

    def __init__(self, use_sudo: Optional[bool] = None, timeout: Optional[float] = None):
        self.use_sudo = (os.geteuid() != 0) if use_sudo is None else use_sudo
        self.timeout = timeout

    def run(
        self,
        args: Sequence[str],
        privileged: bool = False,
        env: Optional[Mapping[str, str]] = None,
    ) -> CommandResult:
        """
        Run a command to completion.

        Args:
            args: Program and arguments
            privileged: Needs root (prefixed with sudo when not root)
            env: Extra environment variables merged over os.environ

        Returns:
            CommandResult with return code and captured output
        """
        argv = list(args)
        if privileged and self.use_sudo:
            argv = ["sudo", *argv]

        full_env = None
        if env:
            full_env = dict(os.environ)
            full_env.update(env)

        logger.debug(f"[CMD] {' '.join(argv)}")
        try:
            completed = subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                env=full_env,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            logger.debug(f"[CMD] Not found: {argv[0]}")
            return CommandResult(argv, COMMAND_NOT_FOUND, "", str(e))
        except OSError as e:
            logger.debug(f"[CMD] Cannot execute {argv[0]}: {e}")
            return CommandResult(argv, COMMAND_NOT_EXECUTABLE, "", str(e))
        except subprocess.TimeoutExpired as e:
            logger.debug(f"[CMD] Timed out after {e.timeout}s: {argv[0]}")
            return CommandResult(argv, -1, "", f"Timed out after {e.timeout}s")

        result = CommandResult(argv, completed.returncode, completed.stdout, completed.stderr)
        if not result.ok:
            logger.debug(f"[CMD] exit {result.returncode}: {result.output}")
        return result
