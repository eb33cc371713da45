from pathlib import Path

import pytest

from conftest import ScriptedRunner
from wireguard_upgrade.core.exceptions import PersistArtifactWarning
from wireguard_upgrade.upgrade.artifacts import ArtifactStager

FIRSTBOOT = "/config/data/firstboot/install-packages"


def make_stager(script=None):
    runner = ScriptedRunner(script)
    stager = ArtifactStager(
        runner,
        firstboot_dir=FIRSTBOOT,
        firstboot_filename="wireguard.deb",
        recovery_dir="/config/user-data",
    )
    return stager, runner


def test_persist_package_moves_into_firstboot_dir():
    stager, runner = make_stager()

    staged = stager.persist_package(Path("/tmp/get-wireguard.x/wireguard-ugw3-1.2.0.deb"))

    assert staged == Path(FIRSTBOOT) / "wireguard.deb"
    assert runner.commands() == [
        ["mkdir", "-p", FIRSTBOOT],
        ["mv", "-f", "/tmp/get-wireguard.x/wireguard-ugw3-1.2.0.deb", f"{FIRSTBOOT}/wireguard.deb"],
    ]
    assert all(call.privileged for call in runner.calls)


def test_persist_mkdir_failure_is_a_warning():
    stager, runner = make_stager({("mkdir",): (1, "", "Permission denied")})

    with pytest.raises(PersistArtifactWarning) as exc:
        stager.persist_package(Path("/tmp/x.deb"))

    assert exc.value.message == f"Failure creating '{FIRSTBOOT}' directory."
    assert exc.value.fatal is False
    assert exc.value.detail == "Permission denied"
    assert len(runner.calls) == 1


def test_persist_move_failure_is_a_warning():
    stager, _ = make_stager({("mv",): (1, "", "No space left on device")})

    with pytest.raises(PersistArtifactWarning, match="firstboot path"):
        stager.persist_package(Path("/tmp/x.deb"))


def test_preserve_snapshot_copies_to_recovery_dir():
    stager, runner = make_stager()

    saved = stager.preserve_snapshot(Path("/tmp/get-wireguard.x/config.run"))

    assert saved.parent == Path("/config/user-data")
    assert saved.name.startswith("wireguard-")
    assert saved.name.endswith(".config.run")
    assert runner.commands()[1] == ["cp", "/tmp/get-wireguard.x/config.run", str(saved)]


def test_preserve_snapshot_failure_raises_oserror():
    stager, _ = make_stager({("cp",): (1, "", "Read-only file system")})

    with pytest.raises(OSError, match="Read-only file system"):
        stager.preserve_snapshot(Path("/tmp/config.run"))
