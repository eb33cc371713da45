"""
Board and firmware conditioned asset selection.

An asset matches when its name contains "<board>-" and its "v2" marker
agrees with the firmware generation. Exactly one asset must match: more
than one is treated as an error instead of silently taking the first.
"""

from typing import List

from loguru import logger

from wireguard_upgrade.core.dataclasses import DeviceProfile
from wireguard_upgrade.core.enums import FirmwareGeneration
from wireguard_upgrade.core.exceptions import AmbiguousAssetError, NoMatchingAssetError
from wireguard_upgrade.release.models import Asset, Release

V2_MARKER = "v2"


def asset_matches(asset: Asset, profile: DeviceProfile) -> bool:
    """Return True if the asset is built for this board and firmware generation."""
    if f"{profile.board_id}-" not in asset.name:
        return False
    wants_v2 = profile.firmware_generation is FirmwareGeneration.V2
    return (V2_MARKER in asset.name) == wants_v2


class AssetSelector:
    """Picks the single package asset for a device profile."""

    def matching_assets(self, release: Release, profile: DeviceProfile) -> List[Asset]:
        """All matching assets, in the release's asset order."""
        return [asset for asset in release.assets if asset_matches(asset, profile)]

    def select(self, release: Release, profile: DeviceProfile) -> Asset:
        """
        Select the package asset for the device.

        Args:
            release: Release whose assets are considered
            profile: Device board and firmware generation

        Returns:
            The single matching asset

        Raises:
            NoMatchingAssetError: If no asset matches
            AmbiguousAssetError: If more than one asset matches
        """
        matches = self.matching_assets(release, profile)

        if not matches:
            raise NoMatchingAssetError(
                "Failed to locate debian package for your board and firmware.",
                remediation=(
                    f"Release {release.tag} has no package for board "
                    f"'{profile.board_id}' on firmware {profile.firmware_generation.value}."
                ),
            )

        if len(matches) > 1:
            names = ", ".join(asset.name for asset in matches)
            raise AmbiguousAssetError(
                f"Multiple packages match your board and firmware: {names}",
                remediation="Pin a release whose assets are unambiguous for this board.",
            )

        asset = matches[0]
        logger.info(f"Debian package URL: {asset.download_url}")
        return asset
