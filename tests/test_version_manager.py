import pytest

from wireguard_upgrade.core.enums import VersionAction
from wireguard_upgrade.validation.version_manager import (
    InvalidVersionError,
    classify_version_change,
    compare_versions,
    is_upgrade_needed,
    normalize_tag,
    parse_version,
)


@pytest.mark.parametrize(
    "older, newer",
    [
        ("1.0.0", "1.2.0"),
        ("1.9", "1.10"),
        ("0.0.20191219-2", "1.0.20210606-1"),
        ("1.0.20210606-1", "1.0.20210606-2"),
        ("1.0~rc1", "1.0"),
        ("1.0", "1.0a"),
        ("1.0", "1.0.1"),
        ("2.0", "1:0.1"),
        ("1.0a", "1.0+"),
    ],
)
def test_compare_versions_orders_like_dpkg(older, newer):
    assert compare_versions(older, newer) == -1
    assert compare_versions(newer, older) == 1


def test_compare_versions_equal():
    assert compare_versions("1.0.20210606-1", "1.0.20210606-1") == 0
    assert compare_versions("0:1.0", "1.0") == 0


def test_parse_version_components():
    assert parse_version("1:2.3~rc1-0ubuntu1") == (1, "2.3~rc1", "0ubuntu1")
    assert parse_version("1.0.20210606-1") == (0, "1.0.20210606", "1")
    assert parse_version("1.2.0") == (0, "1.2.0", "")


@pytest.mark.parametrize("bad", ["", "   ", "x:1.0", "-1"])
def test_parse_version_rejects_garbage(bad):
    with pytest.raises(InvalidVersionError):
        parse_version(bad)


def test_normalize_tag_strips_leading_v_only_before_digit():
    assert normalize_tag("v1.2.0") == "1.2.0"
    assert normalize_tag("1.2.0") == "1.2.0"
    assert normalize_tag("vanilla") == "vanilla"


def test_classify_version_change():
    assert classify_version_change(None, "1.0.0") is VersionAction.FRESH_INSTALL
    assert classify_version_change("1.0.0", "1.2.0") is VersionAction.UPGRADE
    assert classify_version_change("1.0.0", "v1.0.0") is VersionAction.SAME_VERSION
    assert classify_version_change("1.0.0", "0.9.0") is VersionAction.DOWNGRADE


@pytest.mark.parametrize(
    "installed, target, expected",
    [
        (None, "1.0.0", True),
        ("", "1.0.0", True),
        ("1.0.0", "1.2.0", True),
        ("1.0.0", "1.0.0", False),
        ("1.2.0", "1.0.0", False),
        ("1.0.0", "v1.0.0", False),
    ],
)
def test_is_upgrade_needed_only_for_strictly_newer(installed, target, expected):
    assert is_upgrade_needed(installed, target) is expected


def test_is_upgrade_needed_proceeds_when_versions_cannot_be_compared():
    assert is_upgrade_needed("1.0.0", "x:broken") is True
