# OWSYNC Descriptors
# Package and action descriptors built from local directories

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from owsync.utils.paths import read_json


class ActionState(str, Enum):
    """Progress of an action through one synchronization pass."""

    DISCOVERED = "discovered"
    BUILT = "built"
    CHECKED = "checked"
    RESOLVED = "resolved"


def needs_upload(remote_exists: bool, local_fingerprint: Optional[str], remote_fingerprint: Optional[str]) -> bool:
    """
    Decide whether an action's content must be uploaded.

    Depends only on remote existence and the two fingerprints.
    """
    if not remote_exists:
        return True
    return remote_fingerprint != local_fingerprint


@dataclass
class PackageDescriptor:
    """The remote grouping container for all actions of a run."""

    name: str
    configuration: dict[str, Any] = field(default_factory=dict)


@dataclass
class ActionDescriptor:
    """
    One deployable unit, built from one local directory.

    Lives for a single synchronization pass only.
    """

    name: str
    source_directory: Path
    configuration: dict[str, Any] = field(default_factory=dict)
    state: ActionState = ActionState.DISCOVERED
    archive_path: Optional[Path] = None
    fingerprint: Optional[str] = None
    remote_exists: bool = False
    remote_fingerprint: Optional[str] = None

    @property
    def needs_upload(self) -> bool:
        """Check if the remote content is missing or stale."""
        return needs_upload(self.remote_exists, self.fingerprint, self.remote_fingerprint)


def load_package_descriptor(root: Path, config_file: str) -> PackageDescriptor:
    """
    Build the package descriptor for a deployment root.

    The name defaults to the root's base name; ``config_file`` inside the
    root may override it and supply further package settings.
    """
    info = read_json(root / config_file)
    name = info.pop("name", None) or root.name
    return PackageDescriptor(name=name, configuration=info)


def load_action_descriptor(directory: Path, config_file: str) -> ActionDescriptor:
    """
    Build an action descriptor for an action directory.

    The name defaults to the directory's base name; ``config_file`` inside
    the directory may override it and supply further action settings.
    """
    info = read_json(directory / config_file)
    name = info.pop("name", None) or directory.name
    return ActionDescriptor(name=name, source_directory=directory, configuration=info)
