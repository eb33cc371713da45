"""
Kernel module control.

Loaded state is read from /proc/modules (the same source lsmod formats);
removal goes through modprobe.
"""

from pathlib import Path

from loguru import logger

from wireguard_upgrade.core.constants import PROC_MODULES_PATH
from wireguard_upgrade.core.dataclasses import CommandResult
from wireguard_upgrade.system.commands import CommandRunner


class KernelModuleControl:
    """Checks and unloads kernel modules."""

    def __init__(self, runner: CommandRunner, proc_modules_path: str = PROC_MODULES_PATH):
        self.runner = runner
        self.proc_modules_path = Path(proc_modules_path)

    def is_module_loaded(self, name: str) -> bool:
        """
        Check whether a module is currently loaded.

        Matches the module name exactly; an unreadable /proc/modules is
        reported as not loaded.
        """
        try:
            lines = self.proc_modules_path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            logger.warning(f"Unable to read {self.proc_modules_path}: {e}")
            return False

        wanted = name.replace("-", "_")
        return any(line.split(" ", 1)[0] == wanted for line in lines if line)

    def unload_module(self, name: str) -> CommandResult:
        return self.runner.run(["modprobe", "--remove", name], privileged=True)
