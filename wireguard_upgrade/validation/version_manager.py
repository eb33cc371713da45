"""
Version comparison and upgrade decision logic.

Handles Debian package version parsing and ordering ([epoch:]upstream[-revision],
'~' sorting before everything, letters before other symbols) so release tags
are compared the way `dpkg --compare-versions` compares them, not lexically.
"""

import string
from typing import NamedTuple, Optional

from loguru import logger

from wireguard_upgrade.core.enums import VersionAction


class InvalidVersionError(ValueError):
    """Raised when a string is not a usable package version."""


class PackageVersion(NamedTuple):
    """Parsed Debian package version."""

    epoch: int
    upstream: str
    revision: str


def normalize_tag(tag: str) -> str:
    """
    Strip a leading 'v' from release tags such as 'v1.0.20210606-1'.

    Args:
        tag: Release tag as published in the index

    Returns:
        Tag usable as a package version
    """
    tag = tag.strip()
    if len(tag) > 1 and tag[0] in "vV" and tag[1].isdigit():
        return tag[1:]
    return tag


def parse_version(version_str: str) -> PackageVersion:
    """
    Parse a Debian package version string into comparable components.

    Supports formats like:
    - 1.0.20210606-1
    - 0.0.20191219-2
    - 1:2.3~rc1-0ubuntu1

    Args:
        version_str: Package version string

    Returns:
        PackageVersion(epoch, upstream, revision)

    Raises:
        InvalidVersionError: If the string is empty or the epoch is not numeric
    """
    version_str = (version_str or "").strip()
    if not version_str:
        raise InvalidVersionError("Empty version string")

    epoch = 0
    if ":" in version_str:
        epoch_str, version_str = version_str.split(":", 1)
        if not epoch_str.isdigit():
            raise InvalidVersionError(f"Invalid epoch in version: {epoch_str!r}")
        epoch = int(epoch_str)

    revision = ""
    if "-" in version_str:
        version_str, revision = version_str.rsplit("-", 1)

    if not version_str:
        raise InvalidVersionError("Version has no upstream part")

    return PackageVersion(epoch, version_str, revision)


def _order(char: str) -> int:
    """Sort weight of a single non-digit character, as dpkg defines it."""
    if char in string.digits:
        return 0
    if char in string.ascii_letters:
        return ord(char)
    if char == "~":
        return -1
    return ord(char) + 256


def _compare_fragment(a: str, b: str) -> int:
    """Compare upstream or revision strings with alternating text/digit runs."""
    i = j = 0
    while i < len(a) or j < len(b):
        # Non-digit prefix, character by character
        while (i < len(a) and a[i] not in string.digits) or (
            j < len(b) and b[j] not in string.digits
        ):
            ac = _order(a[i]) if i < len(a) else 0
            bc = _order(b[j]) if j < len(b) else 0
            if ac != bc:
                return ac - bc
            i += 1
            j += 1

        # Numeric run, compared as integers
        start_i = i
        while i < len(a) and a[i] in string.digits:
            i += 1
        start_j = j
        while j < len(b) and b[j] in string.digits:
            j += 1
        num_a = int(a[start_i:i] or 0)
        num_b = int(b[start_j:j] or 0)
        if num_a != num_b:
            return -1 if num_a < num_b else 1
    return 0


def compare_versions(version_a: str, version_b: str) -> int:
    """
    Compare two package versions.

    Args:
        version_a: First version
        version_b: Second version

    Returns:
        Negative if a < b, zero if equal, positive if a > b

    Raises:
        InvalidVersionError: If either version cannot be parsed
    """
    a = parse_version(version_a)
    b = parse_version(version_b)

    if a.epoch != b.epoch:
        return -1 if a.epoch < b.epoch else 1

    result = _compare_fragment(a.upstream, b.upstream)
    if result:
        return -1 if result < 0 else 1

    result = _compare_fragment(a.revision, b.revision)
    if result:
        return -1 if result < 0 else 1
    return 0


def classify_version_change(
    installed_version: Optional[str], target_version: str
) -> VersionAction:
    """
    Compare installed and target versions to determine the kind of change.

    Args:
        installed_version: Currently installed version, or None when not installed
        target_version: Release tag being considered

    Returns:
        VersionAction describing the change

    Raises:
        InvalidVersionError: If either version cannot be parsed
    """
    if not installed_version:
        return VersionAction.FRESH_INSTALL

    result = compare_versions(normalize_tag(target_version), installed_version)
    if result > 0:
        return VersionAction.UPGRADE
    if result < 0:
        return VersionAction.DOWNGRADE
    return VersionAction.SAME_VERSION


def is_upgrade_needed(installed_version: Optional[str], target_version: str) -> bool:
    """
    Decide whether the target release should be installed.

    True iff nothing is installed or the target is strictly newer. A version
    that cannot be compared is treated as needing the upgrade, matching how a
    failed `dpkg --compare-versions` check falls through to the install.

    Args:
        installed_version: Currently installed version, or None
        target_version: Release tag being considered

    Returns:
        True if the release should be installed
    """
    try:
        action = classify_version_change(installed_version, target_version)
    except InvalidVersionError as e:
        logger.warning(
            f"[VERSION] Cannot compare {target_version!r} with "
            f"{installed_version!r}: {e}; proceeding with install"
        )
        return True

    return action in (VersionAction.FRESH_INSTALL, VersionAction.UPGRADE)
