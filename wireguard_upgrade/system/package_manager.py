"""
Debian package manager adapter.
"""

from pathlib import Path
from typing import Optional

from wireguard_upgrade.core.dataclasses import CommandResult
from wireguard_upgrade.system.commands import CommandRunner


class DpkgPackageManager:
    """Queries, verifies and installs packages with dpkg."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def query_installed_version(self, name: str) -> Optional[str]:
        """Installed version of a package, or None when it is not installed."""
        result = self.runner.run(
            ["dpkg-query", "--show", "--showformat=${Version}", name]
        )
        if not result.ok:
            return None
        return result.stdout.strip() or None

    def verify_package(self, path: Path) -> CommandResult:
        """Check the package metadata is readable."""
        return self.runner.run(["dpkg-deb", "--info", str(path)])

    def install_package(self, path: Path) -> CommandResult:
        return self.runner.run(["dpkg", "-i", str(path)], privileged=True)
