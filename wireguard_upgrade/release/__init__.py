"""
Release resolution package.

Provides the release index client, release resolution, asset selection,
and package download.
"""

from .models import Asset, Release
from .index_client import ReleaseIndexClient
from .resolver import ReleaseResolver
from .asset_selector import AssetSelector, asset_matches
from .fetcher import PackageFetcher

__all__ = [
    "Asset",
    "Release",
    "ReleaseIndexClient",
    "ReleaseResolver",
    "AssetSelector",
    "asset_matches",
    "PackageFetcher",
]
