"""
Configuration Module
Defines runtime settings with defaults, an optional YAML file, and
environment variable overrides (highest precedence).
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger

from . import constants

# --- Environment Configuration Guide ---
# WG_UPGRADE_CONFIG: path of a YAML file with any of the Settings field names.
# WG_UPGRADE_<FIELD>: overrides a single field, e.g. WG_UPGRADE_GITHUB_REPO.

CONFIG_ENV_VAR = f"{constants.ENV_PREFIX}CONFIG"


@dataclass
class Settings:
    """Runtime settings for a single upgrade run."""

    github_api: str = constants.GITHUB_API_URL
    github_repo: str = constants.GITHUB_REPO
    package_name: str = constants.PACKAGE_NAME
    module_name: str = constants.MODULE_NAME
    config_path: str = constants.CONFIG_PATH
    firstboot_dir: str = constants.FIRSTBOOT_DIR
    firstboot_filename: str = constants.FIRSTBOOT_FILENAME
    recovery_dir: str = constants.RECOVERY_DIR
    log_path: str = constants.LOG_PATH
    http_timeout: float = constants.HTTP_TIMEOUT
    vyatta_sbin: str = constants.VYATTA_SBIN
    cpuinfo_path: str = constants.CPUINFO_PATH
    version_path: str = constants.FIRMWARE_VERSION_PATH
    proc_modules_path: str = constants.PROC_MODULES_PATH

    @property
    def releases_url(self) -> str:
        return f"{self.github_api.rstrip('/')}/repos/{self.github_repo}/releases"

    @property
    def config_path_nodes(self):
        return self.config_path.split()

    @classmethod
    def load(
        cls, path: Optional[str] = None, environ: Optional[Dict[str, str]] = None
    ) -> "Settings":
        """
        Build settings from defaults, an optional YAML file, then environment.

        Args:
            path: YAML file path; falls back to $WG_UPGRADE_CONFIG when None
            environ: Environment mapping (defaults to os.environ)

        Returns:
            Populated Settings instance

        Raises:
            ValueError: If the YAML file is not a mapping or a value has the wrong type
        """
        environ = os.environ if environ is None else environ
        values: Dict[str, Any] = {}

        path = path or environ.get(CONFIG_ENV_VAR)
        if path:
            values.update(_read_yaml(Path(path)))

        for f in fields(cls):
            env_value = environ.get(f"{constants.ENV_PREFIX}{f.name.upper()}")
            if env_value is not None:
                values[f.name] = env_value

        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(values) - set(known))
        if unknown:
            logger.warning(f"[CONFIG] Ignoring unknown settings: {', '.join(unknown)}")

        kwargs = {}
        for name, value in values.items():
            if name not in known:
                continue
            if name == "http_timeout":
                try:
                    value = float(value)
                except (TypeError, ValueError) as e:
                    raise ValueError(f"Invalid http_timeout value: {value!r}") from e
            else:
                value = str(value)
            kwargs[name] = value

        return cls(**kwargs)


def _read_yaml(path: Path) -> Dict[str, Any]:
    """Read a settings mapping from YAML; an empty file yields no overrides."""
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    # yaml.safe_load returns None for an empty file
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")

    logger.debug(f"[CONFIG] Loaded settings from {path}")
    return data
