# OWSYNC Test Fixtures
# Pytest fixtures and in-memory collaborators for owsync tests

import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Any, Optional

import pytest

from owsync.build.builder import Builder
from owsync.config.schema import DeployConfig
from owsync.exceptions import BuildError, RemoteCallError, RemoteNotFoundError
from owsync.sync.engine import SyncEngine
from owsync.utils.hashing import fingerprint


class FakeGateway:
    """In-memory remote platform that records every call."""

    def __init__(self, namespace: str = "guest"):
        self.namespace = namespace
        self.packages: dict[str, dict[str, Any]] = {}
        self.actions: dict[tuple[str, str], dict[str, Any]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_package = False
        self.fail_get: set[str] = set()
        self.fail_upload: set[str] = set()
        self.fail_delete: set[str] = set()
        self.fail_list = False

    def seed(self, package: str, name: str, md5sum: Optional[str] = None) -> None:
        """Put an action on the remote without recording a call."""
        annotations = [] if md5sum is None else [{"key": "md5sum", "value": md5sum}]
        self.actions[(package, name)] = {
            "name": name,
            "namespace": f"{self.namespace}/{package}",
            "annotations": annotations,
        }

    def count(self, kind: str) -> int:
        return sum(1 for call, _ in self.calls if call == kind)

    def names(self, kind: str) -> list[str]:
        return [name for call, name in self.calls if call == kind]

    def recorded_fingerprint(self, package: str, name: str) -> Optional[str]:
        for annotation in self.actions[(package, name)]["annotations"]:
            if annotation["key"] == "md5sum":
                return annotation["value"]
        return None

    def create_or_update_package(self, name: str, configuration: dict[str, Any]) -> dict[str, Any]:
        self.calls.append(("package", name))
        if self.fail_package:
            raise RemoteCallError("create package failed", status_code=500)
        self.packages[name] = dict(configuration)
        return {"name": name, **configuration}

    def get_action(self, package: str, name: str) -> dict[str, Any]:
        self.calls.append(("get", name))
        if name in self.fail_get:
            raise RemoteCallError("get failed", status_code=500)
        if (package, name) not in self.actions:
            raise RemoteNotFoundError("not found", status_code=404)
        return self.actions[(package, name)]

    def create_or_update_action(
        self,
        package: str,
        name: str,
        archive: bytes,
        configuration: dict[str, Any],
        annotations: list[dict[str, Any]],
    ) -> dict[str, Any]:
        self.calls.append(("upload", name))
        if name in self.fail_upload:
            raise RemoteCallError("upload failed", status_code=500)
        record = {
            "name": name,
            "namespace": f"{self.namespace}/{package}",
            "annotations": list(annotations),
            "configuration": dict(configuration),
            "code": archive,
        }
        self.actions[(package, name)] = record
        return record

    def list_actions(self, package: str) -> list[dict[str, Any]]:
        self.calls.append(("list", package))
        if self.fail_list:
            raise RemoteCallError("list failed", status_code=503)
        return [
            {"name": name, "namespace": f"{self.namespace}/{pkg}"}
            for (pkg, name) in sorted(self.actions)
            if pkg == package
        ]

    def delete_action(self, package: str, name: str) -> None:
        self.calls.append(("delete", name))
        if name in self.fail_delete:
            raise RemoteCallError(f"delete of {name} failed", status_code=500)
        if (package, name) not in self.actions:
            raise RemoteNotFoundError("not found", status_code=404)
        del self.actions[(package, name)]


class RecordingBuilder(Builder):
    """Builder without dependency installation that records builds and can fail on demand."""

    def __init__(self, work_dir: Path, fail_on: Optional[set[str]] = None):
        super().__init__(work_dir, install_command=None)
        self.built: list[str] = []
        self.fail_on = fail_on or set()

    def build(self, directory: Path, name: str, exclude: Optional[list[str]] = None) -> Path:
        self.built.append(name)
        if name in self.fail_on:
            raise BuildError(f"build of {name} failed", directory=directory, returncode=1)
        return super().build(directory, name, exclude)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def deploy_root(temp_dir: Path) -> Path:
    """Create an empty deployment root named 'pkg'."""
    root = temp_dir / "pkg"
    root.mkdir()
    return root


@pytest.fixture
def work_dir(temp_dir: Path) -> Path:
    """Directory receiving built archives, outside the deployment root."""
    path = temp_dir / "build"
    path.mkdir()
    return path


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def builder(work_dir: Path) -> RecordingBuilder:
    return RecordingBuilder(work_dir)


@pytest.fixture
def make_engine(deploy_root: Path, gateway: FakeGateway, builder: RecordingBuilder):
    """Factory for engines wired to the fake collaborators."""

    def _make(config: Optional[DeployConfig] = None, **kwargs: Any) -> SyncEngine:
        return SyncEngine(deploy_root, gateway, kwargs.pop("builder", builder), config, **kwargs)

    return _make


def write_action(root: Path, name: str, files: Optional[dict[str, str]] = None) -> Path:
    """Create an action directory with the given files."""
    directory = root / name
    directory.mkdir(parents=True, exist_ok=True)
    for rel_path, content in (files or {"index.js": f"exports.main = () => ({{ name: '{name}' }});\n"}).items():
        path = directory / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return directory


def local_fingerprint(directory: Path, config: Optional[DeployConfig] = None) -> str:
    """Fingerprint a directory the same way the engine does."""
    config = config or DeployConfig()
    return fingerprint(directory, [*config.fingerprint_exclude, config.action_config_file])
