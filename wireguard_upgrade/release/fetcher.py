"""
Package download and integrity verification.

Streams the selected asset into the run's temp directory and verifies that
the result is a readable Debian package before anything destructive runs.
"""

import os
from pathlib import Path
from typing import Optional

import httpx
from loguru import logger

from wireguard_upgrade.core.constants import (
    DOWNLOAD_CHUNK_SIZE,
    HTTP_TIMEOUT,
    USER_AGENT,
)
from wireguard_upgrade.core.exceptions import DownloadError, IntegrityError
from wireguard_upgrade.release.models import Asset
from wireguard_upgrade.system.package_manager import DpkgPackageManager


class PackageFetcher:
    """Downloads a release asset and checks it is a well-formed package."""

    def __init__(
        self,
        package_manager: DpkgPackageManager,
        client: Optional[httpx.Client] = None,
        timeout: float = HTTP_TIMEOUT,
    ):
        self.package_manager = package_manager
        self.client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    def fetch(self, asset: Asset, dest_dir: Path) -> Path:
        """
        Download and verify a package asset.

        Args:
            asset: Asset to download
            dest_dir: Scoped temporary directory owned by the run

        Returns:
            Path of the verified package

        Raises:
            DownloadError: On transport failure or non-success status
            IntegrityError: If the file is truncated or not a valid package
        """
        logger.info("Downloading WireGuard package...")
        package_path = self._download(asset, Path(dest_dir))

        logger.info("Checking WireGuard package integrity...")
        self._verify(asset, package_path)
        return package_path

    def _download(self, asset: Asset, dest_dir: Path) -> Path:
        # Asset names come from the index; never let them escape dest_dir
        target = dest_dir / os.path.basename(asset.name)
        partial = target.with_name(target.name + ".part")

        try:
            with self.client.stream("GET", asset.download_url) as response:
                response.raise_for_status()
                with open(partial, "wb") as f:
                    for chunk in response.iter_bytes(DOWNLOAD_CHUNK_SIZE):
                        f.write(chunk)
            partial.replace(target)
            size = target.stat().st_size
        except httpx.HTTPStatusError as e:
            partial.unlink(missing_ok=True)
            raise DownloadError(
                "Failure downloading debian package.",
                detail=f"HTTP {e.response.status_code} for {asset.download_url}",
            ) from e
        except (httpx.HTTPError, OSError) as e:
            partial.unlink(missing_ok=True)
            raise DownloadError(
                "Failure downloading debian package.",
                detail=f"{asset.download_url}: {e}",
            ) from e

        logger.debug(f"[FETCH] Saved {target} ({size} bytes)")
        return target

    def _verify(self, asset: Asset, package_path: Path):
        actual_size = package_path.stat().st_size
        if asset.size is not None and actual_size != asset.size:
            raise IntegrityError(
                "Debian package integrity check failed for package.",
                detail=f"Expected {asset.size} bytes, downloaded {actual_size}",
            )

        result = self.package_manager.verify_package(package_path)
        if not result.ok:
            raise IntegrityError(
                "Debian package integrity check failed for package.",
                returncode=result.returncode,
                detail=result.output,
            )

    def close(self):
        self.client.close()
