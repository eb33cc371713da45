"""
System collaborators package.

Adapters over the device's own tools: command execution, dpkg, kernel
modules, and iproute2.
"""

from .commands import CommandRunner
from .package_manager import DpkgPackageManager
from .kernel_modules import KernelModuleControl
from .network import IpInterfaceControl, parse_oneline_addresses

__all__ = [
    "CommandRunner",
    "DpkgPackageManager",
    "KernelModuleControl",
    "IpInterfaceControl",
    "parse_oneline_addresses",
]
