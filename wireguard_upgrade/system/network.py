"""
Network interface control via iproute2.
"""

from typing import Set

from wireguard_upgrade.core.dataclasses import CommandResult
from wireguard_upgrade.system.commands import CommandRunner


def parse_oneline_addresses(output: str) -> Set[str]:
    """
    Extract CIDR addresses from `ip -oneline address show` output.

    Each line looks like:
        5: wg0    inet 10.0.0.1/24 scope global wg0\\       valid_lft forever ...
    The address is the fourth whitespace-separated field.
    """
    addresses = set()
    for line in output.splitlines():
        fields = line.split()
        if len(fields) >= 4 and fields[2] in ("inet", "inet6"):
            addresses.add(fields[3])
    return addresses


class IpInterfaceControl:
    """Reads and assigns kernel-level interface addresses."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def list_addresses(self, iface_name: str) -> Set[str]:
        """
        Addresses currently assigned to the interface.

        An interface that does not exist has no live addresses.
        """
        result = self.runner.run(["ip", "-oneline", "address", "show", "dev", iface_name])
        if not result.ok:
            return set()
        return parse_oneline_addresses(result.stdout)

    def add_address(self, iface_name: str, address: str) -> CommandResult:
        return self.runner.run(
            ["ip", "address", "add", address, "dev", iface_name], privileged=True
        )
