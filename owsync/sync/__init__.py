# OWSYNC Sync Module
# Core synchronization engine and components

from owsync.sync.descriptor import (
    ActionDescriptor,
    ActionState,
    PackageDescriptor,
    load_action_descriptor,
    load_package_descriptor,
    needs_upload,
)
from owsync.sync.engine import SyncEngine
from owsync.sync.results import ActionResult, DeleteFailure, DeployResult, Outcome, ReconcileResult

__all__ = [
    # Descriptors
    "ActionDescriptor",
    "ActionState",
    "PackageDescriptor",
    "load_action_descriptor",
    "load_package_descriptor",
    "needs_upload",
    # Results
    "Outcome",
    "ActionResult",
    "DeleteFailure",
    "ReconcileResult",
    "DeployResult",
    # Engine
    "SyncEngine",
]
