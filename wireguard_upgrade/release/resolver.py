"""
Release resolution and upgrade decision.

Selects the target release (latest in index order, or an exact pinned tag)
and decides whether installing it is warranted.
"""

from typing import Optional, Tuple

from loguru import logger

from wireguard_upgrade.core.exceptions import ReleaseNotFoundError
from wireguard_upgrade.release.index_client import ReleaseIndexClient
from wireguard_upgrade.release.models import Release
from wireguard_upgrade.validation.version_manager import is_upgrade_needed


class ReleaseResolver:
    """
    Resolves the release to install against the currently installed version.

    An explicit pin always proceeds, even when it is a downgrade or the same
    version: the operator's intent overrides version comparison.
    """

    def __init__(self, index: ReleaseIndexClient, installed_version: Optional[str]):
        self.index = index
        self.installed_version = installed_version or None

    def resolve(self, pinned_version: Optional[str] = None) -> Tuple[Release, bool]:
        """
        Select the target release.

        Args:
            pinned_version: Exact release tag to install, or None for latest

        Returns:
            Tuple of (release, is_upgrade_needed)

        Raises:
            ReleaseIndexError: When the index cannot be read
            ReleaseNotFoundError: When the pinned tag is not in the index
        """
        if pinned_version:
            release = self._find_pinned(pinned_version)
            logger.info(f"Release version: {release.tag} (pinned)")
            return release, True

        releases = self.index.fetch_releases(all_pages=False)
        release = releases[0]
        logger.info(f"Release version: {release.tag}")

        needed = is_upgrade_needed(self.installed_version, release.tag)
        if not needed:
            logger.debug(
                f"[RELEASE] {release.tag} is not newer than installed "
                f"{self.installed_version}"
            )
        return release, needed

    def _find_pinned(self, pinned_version: str) -> Release:
        for release in self.index.fetch_releases(all_pages=True):
            if release.tag == pinned_version:
                return release

        raise ReleaseNotFoundError(
            f"Release {pinned_version} was not found in the release index.",
            remediation="Check the version against the published release tags.",
        )
