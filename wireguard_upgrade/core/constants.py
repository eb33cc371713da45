"""
Application-wide constants and fixed parameters.

Centralized values for the release index, device paths, and the managed
WireGuard subsystem so every component agrees on them.
"""

from typing import Final

# ==============================================================================
# RELEASE INDEX CONSTANTS
# ==============================================================================

GITHUB_API_URL: Final[str] = "https://api.github.com"
GITHUB_REPO: Final[str] = "Lochnair/vyatta-wireguard"
RELEASES_PER_PAGE: Final[int] = 100
HTTP_TIMEOUT: Final[float] = 30.0  # seconds
DOWNLOAD_CHUNK_SIZE: Final[int] = 81920  # bytes
USER_AGENT: Final[str] = "vyatta-wireguard-upgrade"

# ==============================================================================
# DEVICE AND FIRMWARE CONSTANTS
# ==============================================================================

CPUINFO_PATH: Final[str] = "/proc/cpuinfo"
FIRMWARE_VERSION_PATH: Final[str] = "/opt/vyatta/etc/version"
PROC_MODULES_PATH: Final[str] = "/proc/modules"
CPUINFO_BOARD_FIELD: Final[str] = "system type"
BOARD_ID_PREFIX: Final[str] = "ubnt_"

# Raw hardware id -> board tag used in release asset names
BOARD_REWRITES: Final[dict] = {
    "e120": "ugw3",
    "e221": "ugw4",
    "e1020": "ugwxg",
}

# ==============================================================================
# MANAGED SUBSYSTEM CONSTANTS
# ==============================================================================

PACKAGE_NAME: Final[str] = "wireguard"
MODULE_NAME: Final[str] = "wireguard"
CONFIG_PATH: Final[str] = "interfaces wireguard"
ROUTE_ALLOWED_IPS_NODE: Final[str] = "route-allowed-ips"
ADDRESS_NODE: Final[str] = "address"
SNAPSHOT_FILENAME: Final[str] = "config.run"

VYATTA_SBIN: Final[str] = "/opt/vyatta/sbin"
CLI_SHELL_API: Final[str] = "cli-shell-api"

# ==============================================================================
# FILE AND PATH CONSTANTS
# ==============================================================================

FIRSTBOOT_DIR: Final[str] = "/config/data/firstboot/install-packages"
FIRSTBOOT_FILENAME: Final[str] = "wireguard.deb"
RECOVERY_DIR: Final[str] = "/config/user-data"
TEMP_DIR_PREFIX: Final[str] = "get-wireguard."

# Logging configuration
LOG_PATH: Final[str] = "/tmp/get-wireguard.log"
LOG_ROTATION: Final[str] = "1 MB"
LOG_CONSOLE_FORMAT: Final[str] = "<level>[{level}]</level> {message}"
LOG_FILE_FORMAT: Final[str] = "{time:YYYY-MM-DDTHH:mm:ssZZ}: [{level}] {message}"

# ==============================================================================
# PROGRESS CONSTANTS
# ==============================================================================

TOTAL_UPGRADE_STEPS: Final[int] = 7
ENV_PREFIX: Final[str] = "WG_UPGRADE_"
