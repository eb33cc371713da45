"""
Shared fixtures and in-memory fakes for the device collaborators.
"""

import json
import shutil
from pathlib import Path
from types import SimpleNamespace
from typing import Dict, List, Optional, Set

import httpx
import pytest
from loguru import logger

from wireguard_upgrade.core.config import Settings
from wireguard_upgrade.core.dataclasses import CommandResult
from wireguard_upgrade.core.exceptions import PersistArtifactWarning
from wireguard_upgrade.environment.probe import EnvironmentProbe
from wireguard_upgrade.progress.event_sender import EventEmitter
from wireguard_upgrade.release.fetcher import PackageFetcher
from wireguard_upgrade.release.index_client import ReleaseIndexClient
from wireguard_upgrade.upgrade.install_coordinator import InstallCoordinator

API = "https://api.test"
REPO = "Lochnair/vyatta-wireguard"
RELEASES_URL = f"{API}/repos/{REPO}/releases"
DOWNLOAD_BASE = "https://dl.test"
PACKAGE_BYTES = b"!<arch>\ndebian-binary fake package"


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger.remove()


def ok(stdout: str = "") -> CommandResult:
    return CommandResult(["fake"], 0, stdout, "")


def failed(stderr: str = "injected failure", code: int = 1) -> CommandResult:
    return CommandResult(["fake"], code, "", stderr)


# =============================================================================
# COMMAND RUNNER
# =============================================================================


class ScriptedRunner:
    """Records commands; answers from a prefix -> (code, stdout, stderr) script."""

    def __init__(self, script: Optional[Dict[tuple, tuple]] = None):
        self.script = script or {}
        self.calls: List[SimpleNamespace] = []

    def run(self, args, privileged=False, env=None) -> CommandResult:
        args = list(args)
        self.calls.append(SimpleNamespace(args=args, privileged=privileged, env=env))

        best = None
        for prefix, answer in self.script.items():
            if tuple(args[: len(prefix)]) == prefix:
                if best is None or len(prefix) > len(best[0]):
                    best = (prefix, answer)
        if best is None:
            return CommandResult(args, 0, "", "")
        code, stdout, stderr = best[1]
        return CommandResult(args, code, stdout, stderr)

    def commands(self) -> List[List[str]]:
        return [call.args for call in self.calls]


# =============================================================================
# DEVICE FAKES
# =============================================================================


class FakeConfigStore:
    """
    In-memory configuration store for the 'interfaces wireguard' subtree.

    The active configuration dumps as JSON so a snapshot can be loaded back
    and compared exactly.
    """

    def __init__(self, events: List[tuple], interfaces: Optional[Dict[str, dict]] = None):
        self.events = events
        self.active: Optional[Dict[str, dict]] = interfaces
        self.pending: Optional[Dict[str, dict]] = None
        self.session_open = False
        self.fail: Set[str] = set()

    def _copy(self, config):
        return json.loads(json.dumps(config)) if config is not None else None

    def _record(self, op: str, *args) -> bool:
        self.events.append((op, *args))
        return op not in self.fail

    def _working(self) -> Dict[str, dict]:
        if self.pending is None:
            self.pending = self._copy(self.active) or {}
        return self.pending

    def setup_session(self):
        if self._record("setup_session"):
            self.session_open = True
            return ok()
        return failed()

    def in_session(self) -> bool:
        return self.session_open

    def teardown_session(self):
        if not self._record("teardown_session"):
            return failed()
        self.session_open = False
        self.pending = None
        return ok()

    def exists_active_config(self, path) -> bool:
        self._record("exists_active_config", tuple(path))
        return bool(self.active)

    def dump_active_config(self):
        if not self._record("dump_active_config"):
            return failed()
        return ok(json.dumps(self.active, sort_keys=True))

    def list_nodes(self, path):
        if not self._record("list_nodes", tuple(path)):
            return failed("listNodes failed")
        return ok(" ".join(f"'{name}'" for name in sorted((self.active or {}).keys())))

    def get_value(self, path) -> Optional[str]:
        name, node = path[-2], path[-1]
        value = (self.active or {}).get(name, {}).get(node)
        return value if isinstance(value, str) else None

    def get_values(self, path) -> List[str]:
        name, node = path[-2], path[-1]
        return list((self.active or {}).get(name, {}).get(node, []))

    def set_value(self, path, value):
        if not self._record("set_value", tuple(path), value):
            return failed()
        name, node = path[-2], path[-1]
        self._working().setdefault(name, {})[node] = value
        return ok()

    def delete_node(self, path):
        if not self._record("delete_node", tuple(path)):
            return failed()
        self.pending = {}
        return ok()

    def load_config(self, path: Path):
        if not self._record("load_config", str(path)):
            return failed()
        self.pending = json.loads(Path(path).read_text())
        return ok()

    def commit(self):
        if not self._record("commit"):
            return failed()
        if self.pending is not None:
            self.active = self._copy(self.pending) or None
        return ok()


class FakeNetwork:
    def __init__(self, events: List[tuple], live: Optional[Dict[str, Set[str]]] = None):
        self.events = events
        self.live = live or {}
        self.fail_add = False

    def list_addresses(self, iface_name: str) -> Set[str]:
        return set(self.live.get(iface_name, set()))

    def add_address(self, iface_name: str, address: str):
        self.events.append(("add_address", iface_name, address))
        if self.fail_add:
            return failed("RTNETLINK answers: Operation not permitted")
        self.live.setdefault(iface_name, set()).add(address)
        return ok()


class FakePackageManager:
    def __init__(self, events: List[tuple], installed: Optional[str] = None):
        self.events = events
        self.installed = installed
        self.verify_ok = True
        self.install_ok = True

    def query_installed_version(self, name: str) -> Optional[str]:
        return self.installed

    def verify_package(self, path: Path):
        self.events.append(("verify_package", Path(path).name))
        return ok() if self.verify_ok else failed("dpkg-deb: not a debian format archive")

    def install_package(self, path: Path):
        self.events.append(("install_package", Path(path).name))
        return ok() if self.install_ok else failed("dpkg: error processing archive")


class FakeKernelModules:
    def __init__(self, events: List[tuple], loaded: bool = True):
        self.events = events
        self.loaded = loaded
        self.unload_ok = True

    def is_module_loaded(self, name: str) -> bool:
        return self.loaded

    def unload_module(self, name: str):
        self.events.append(("unload_module", name))
        if not self.unload_ok:
            return failed("modprobe: FATAL: Module wireguard is in use.")
        self.loaded = False
        return ok()


class FakeStager:
    def __init__(self, events: List[tuple], recovery_dir: Path):
        self.events = events
        self.recovery_dir = recovery_dir
        self.persist_ok = True
        self.persisted: List[Path] = []
        self.preserved: List[Path] = []

    def persist_package(self, package_path: Path) -> Path:
        self.events.append(("persist_package", Path(package_path).name))
        if not self.persist_ok:
            raise PersistArtifactWarning("Failure moving debian package to firstboot path.")
        self.persisted.append(Path(package_path))
        return Path(package_path)

    def preserve_snapshot(self, snapshot_path: Path) -> Path:
        self.recovery_dir.mkdir(parents=True, exist_ok=True)
        target = self.recovery_dir / snapshot_path.name
        shutil.copy(snapshot_path, target)
        self.preserved.append(target)
        return target


# =============================================================================
# RELEASE INDEX
# =============================================================================


def release_json(tag: str, asset_names: List[str], sized: bool = True) -> dict:
    return {
        "tag_name": tag,
        "prerelease": False,
        "assets": [
            {
                "name": name,
                "browser_download_url": f"{DOWNLOAD_BASE}/{tag}/{name}",
                "size": len(PACKAGE_BYTES) if sized else None,
            }
            for name in asset_names
        ],
    }


class ReleaseServer:
    """httpx.MockTransport handler serving a paginated index and package files."""

    def __init__(self, pages: List[List[dict]]):
        self.pages = pages
        self.requests: List[httpx.Request] = []
        self.index_status = 200
        self.download_status = 200

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        url = str(request.url)

        if url.startswith(RELEASES_URL):
            if self.index_status != 200:
                return httpx.Response(self.index_status, json={"message": "error"})
            page = int(request.url.params.get("page", "1"))
            headers = {}
            if page < len(self.pages):
                headers["Link"] = f'<{RELEASES_URL}?per_page=100&page={page + 1}>; rel="next"'
            return httpx.Response(200, json=self.pages[page - 1], headers=headers)

        if url.startswith(DOWNLOAD_BASE):
            if self.download_status != 200:
                return httpx.Response(self.download_status)
            return httpx.Response(200, content=PACKAGE_BYTES)

        return httpx.Response(404)

    @property
    def downloads(self) -> List[httpx.Request]:
        return [r for r in self.requests if str(r.url).startswith(DOWNLOAD_BASE)]

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self), follow_redirects=True)


# =============================================================================
# DEVICE FILES
# =============================================================================


def write_device_files(root: Path, board: str = "UBNT_E120", firmware: str = "v1.10.11.5274269"):
    cpuinfo = root / "cpuinfo"
    cpuinfo.write_text(
        "system type\t\t: " + board + "\n"
        "machine\t\t\t: Unknown\n"
        "processor\t\t: 0\n"
        "cpu model\t\t: Cavium Octeon+ V0.1\n"
    )
    version = root / "version"
    version.write_text(f"Version:      {firmware}\n")
    return cpuinfo, version


@pytest.fixture
def settings() -> Settings:
    return Settings(github_api=API, github_repo=REPO)


@pytest.fixture
def rig(tmp_path, settings):
    """
    A coordinator wired to fakes, with a device that has e120 hardware on v1
    firmware, WireGuard 1.0.0 installed, an active wg0 configuration and the
    module loaded; the index offers 1.2.0 with v1 and v2 builds.
    """
    events: List[tuple] = []
    cpuinfo, version = write_device_files(tmp_path)
    work_root = tmp_path / "work"
    work_root.mkdir()

    server = ReleaseServer(
        [[release_json("1.2.0", ["wireguard-ugw3-1.2.0.deb", "wireguard-v2-ugw3-1.2.0.deb"])]]
    )
    store = FakeConfigStore(
        events,
        {"wg0": {"address": ["10.0.0.1/24"], "route-allowed-ips": "true"}},
    )
    network = FakeNetwork(events, {"wg0": set()})
    package_manager = FakePackageManager(events, installed="1.0.0")
    kernel_modules = FakeKernelModules(events)
    stager = FakeStager(events, tmp_path / "recovery")
    ns = SimpleNamespace(
        events=events,
        cpuinfo=cpuinfo,
        version=version,
        work_root=work_root,
        server=server,
        store=store,
        network=network,
        package_manager=package_manager,
        kernel_modules=kernel_modules,
        stager=stager,
        emitter=EventEmitter(enabled=False),
    )

    def build() -> InstallCoordinator:
        return InstallCoordinator(
            settings=settings,
            probe=EnvironmentProbe(str(ns.cpuinfo), str(ns.version)),
            index=ReleaseIndexClient(RELEASES_URL, client=ns.server.client()),
            package_manager=ns.package_manager,
            fetcher=PackageFetcher(ns.package_manager, client=ns.server.client()),
            store=ns.store,
            network=ns.network,
            kernel_modules=ns.kernel_modules,
            stager=ns.stager,
            emitter=ns.emitter,
            work_root=str(ns.work_root),
        )

    ns.build = build
    return ns
