"""
Release index client.

Queries the GitHub Releases API unauthenticated and validates the payload
into Release models. Transport errors, error statuses, and malformed or
empty payloads all surface as ReleaseIndexError; retries are left to the
caller's transport.
"""

from typing import List, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from wireguard_upgrade.core.constants import (
    HTTP_TIMEOUT,
    RELEASES_PER_PAGE,
    USER_AGENT,
)
from wireguard_upgrade.core.exceptions import ReleaseIndexError
from wireguard_upgrade.release.models import Release, ReleaseList


class ReleaseIndexClient:
    """Reads the ordered release list (newest first) from the index."""

    def __init__(
        self,
        releases_url: str,
        client: Optional[httpx.Client] = None,
        timeout: float = HTTP_TIMEOUT,
    ):
        self.releases_url = releases_url
        self.client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={
                "User-Agent": USER_AGENT,
                "Accept": "application/vnd.github+json",
            },
        )

    def fetch_releases(self, all_pages: bool = False) -> List[Release]:
        """
        Fetch releases in index order.

        Args:
            all_pages: Follow the Link header to read the complete index

        Returns:
            Non-empty list of releases, newest first

        Raises:
            ReleaseIndexError: On transport failure, error status, or bad payload
        """
        releases: List[Release] = []
        url: Optional[str] = self.releases_url
        params = {"per_page": RELEASES_PER_PAGE}

        while url:
            response = self._get(url, params)
            releases.extend(self._parse(response))

            url = response.links.get("next", {}).get("url") if all_pages else None
            # The next link already carries its query string
            params = None

        if not releases:
            raise ReleaseIndexError(
                "Release index returned no releases.",
                detail=self.releases_url,
            )

        logger.debug(f"[RELEASE] {len(releases)} releases read from index")
        return releases

    def _get(self, url: str, params) -> httpx.Response:
        logger.debug(f"[RELEASE] GET {url}")
        try:
            response = self.client.get(url, params=params)
            response.raise_for_status()
            return response
        except httpx.HTTPStatusError as e:
            raise ReleaseIndexError(
                f"Release index returned HTTP {e.response.status_code}.",
                remediation="Check the device's internet access and GitHub API rate limits.",
                detail=url,
            ) from e
        except httpx.HTTPError as e:
            raise ReleaseIndexError(
                f"Failed to query release index: {e}",
                remediation="Check the device's internet access and DNS settings.",
                detail=url,
            ) from e

    @staticmethod
    def _parse(response: httpx.Response) -> List[Release]:
        try:
            payload = response.json()
        except ValueError as e:
            raise ReleaseIndexError(
                "Release index response is not valid JSON.", detail=str(e)
            ) from e

        if not isinstance(payload, list):
            raise ReleaseIndexError(
                "Release index response is not a list of releases.",
                detail=str(payload)[:200],
            )

        try:
            return ReleaseList.validate_python(payload)
        except ValidationError as e:
            raise ReleaseIndexError(
                "Release index response is malformed.", detail=str(e)
            ) from e

    def close(self):
        self.client.close()
