"""
Validation package for the upgrade orchestrator.

Contains package version parsing, ordering, and the upgrade decision.
"""

from .version_manager import (
    InvalidVersionError,
    PackageVersion,
    classify_version_change,
    compare_versions,
    is_upgrade_needed,
    normalize_tag,
    parse_version,
)

__all__ = [
    "InvalidVersionError",
    "PackageVersion",
    "classify_version_change",
    "compare_versions",
    "is_upgrade_needed",
    "normalize_tag",
    "parse_version",
]
