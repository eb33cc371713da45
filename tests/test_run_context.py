import pytest

from conftest import FakeConfigStore
from wireguard_upgrade.core.exceptions import ConfigCommitError
from wireguard_upgrade.upgrade.run_context import RunContext


def test_create_makes_private_temp_dir(tmp_path):
    ctx = RunContext.create(str(tmp_path))

    assert ctx.temp_dir.is_dir()
    assert ctx.temp_dir.parent == tmp_path
    assert ctx.temp_dir.name.startswith("get-wireguard.")
    assert ctx.snapshot_path == ctx.temp_dir / "config.run"
    ctx.close()


def test_close_removes_temp_dir_and_is_idempotent(tmp_path):
    with RunContext.create(str(tmp_path)) as ctx:
        (ctx.temp_dir / "package.deb").write_bytes(b"x")

    assert ctx.closed is True
    assert not ctx.temp_dir.exists()
    ctx.close()
    assert list(tmp_path.iterdir()) == []


def test_config_session_opens_and_closes(tmp_path):
    store = FakeConfigStore([])

    with RunContext.create(str(tmp_path)) as ctx:
        with ctx.config_session(store, ConfigCommitError) as session:
            assert session is store
            assert store.session_open
            assert ctx.session is store
        assert not store.session_open
        assert ctx.session is None


def test_failed_session_setup_raises_given_error(tmp_path):
    store = FakeConfigStore([])
    store.fail.add("setup_session")

    with RunContext.create(str(tmp_path)) as ctx:
        with pytest.raises(ConfigCommitError, match="setting up vyatta configuration session"):
            with ctx.config_session(store, ConfigCommitError):
                pytest.fail("block must not run without a session")


def test_session_torn_down_when_block_fails(tmp_path):
    store = FakeConfigStore([])

    with RunContext.create(str(tmp_path)) as ctx:
        with pytest.raises(KeyError):
            with ctx.config_session(store, ConfigCommitError):
                raise KeyError("boom")
        assert not store.session_open
        assert ctx.session is None


def test_original_error_wins_over_teardown_failure(tmp_path):
    store = FakeConfigStore([])

    with RunContext.create(str(tmp_path)) as ctx:
        with pytest.raises(KeyError):
            with ctx.config_session(store, ConfigCommitError):
                store.fail.add("teardown_session")
                raise KeyError("boom")


def test_teardown_failure_after_clean_block_raises(tmp_path):
    store = FakeConfigStore([])

    with RunContext.create(str(tmp_path)) as ctx:
        with pytest.raises(ConfigCommitError, match="tearing down"):
            with ctx.config_session(store, ConfigCommitError):
                store.fail.add("teardown_session")


def test_close_tears_down_a_session_left_open(tmp_path):
    store = FakeConfigStore([])
    ctx = RunContext.create(str(tmp_path))
    store.setup_session()
    ctx.session = store

    ctx.close()

    assert not store.session_open
    assert ("teardown_session",) in store.events
    assert not ctx.temp_dir.exists()
