# OWSYNC Sync Engine
# Sequential build, change detection, upload and orphan reconciliation

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from owsync.config.defaults import FINGERPRINT_ANNOTATION
from owsync.config.schema import DeployConfig
from owsync.exceptions import (
    ConfigurationError,
    OwsyncError,
    RemoteCallError,
    RemoteNotFoundError,
    SyncAbortedError,
)
from owsync.logger import DeployLogger, NullLogger
from owsync.remote.gateway import get_annotation, merge_annotations
from owsync.sync.descriptor import (
    ActionDescriptor,
    ActionState,
    PackageDescriptor,
    load_action_descriptor,
    load_package_descriptor,
)
from owsync.sync.results import ActionResult, DeleteFailure, DeployResult, Outcome, ReconcileResult
from owsync.utils.hashing import fingerprint
from owsync.utils.paths import EntryKind, list_entries, read_list

if TYPE_CHECKING:
    from owsync.build.builder import Builder
    from owsync.remote.gateway import OpenWhiskGateway


class SyncEngine:
    """
    Synchronizes a directory of actions with one remote package.

    Every step runs to completion before the next one starts: the package
    is created first, then each action is built, fingerprinted, checked and
    uploaded if needed, one action at a time, and only after all actions
    are resolved are orphaned remote actions deleted.
    """

    def __init__(
        self,
        root: Path,
        gateway: OpenWhiskGateway,
        builder: Builder,
        config: Optional[DeployConfig] = None,
        *,
        logger: Optional[DeployLogger] = None,
        dry_run: bool = False,
        force: bool = False,
        prune: bool = True,
    ):
        """
        Initialize sync engine.

        Args:
            root: Deployment root; each matching subdirectory is an action.
            gateway: Remote state gateway.
            builder: Build step producing archives.
            config: Tool configuration (defaults if not provided).
            logger: Progress logger.
            dry_run: If True, don't perform remote mutations.
            force: Upload every action regardless of fingerprints.
            prune: Delete remote actions without a local directory.
        """
        self.root = root
        self.gateway = gateway
        self.builder = builder
        self.config = config or DeployConfig()
        self.logger = logger or NullLogger()
        self.dry_run = dry_run
        self.force = force
        self.prune = prune

    def load_package(self) -> PackageDescriptor:
        """
        Read the package descriptor from the deployment root.

        Raises:
            ConfigurationError: If root is not a directory.
        """
        if not self.root.is_dir():
            raise ConfigurationError(f"The directory {self.root} does not exist or is not a directory.")
        return load_package_descriptor(self.root, self.config.package_config_file)

    def sync_package(self, package: PackageDescriptor) -> None:
        """Create or update the remote package."""
        if self.dry_run:
            self.logger.info(f"Would create/update package '{package.name}'")
            return

        self.gateway.create_or_update_package(package.name, package.configuration)
        self.logger.success(f"Created/updated package '{package.name}'")

    def discover(self) -> list[ActionDescriptor]:
        """
        Discover action directories below the root.

        Raises:
            ConfigurationError: If two directories resolve to the same action name.
        """
        entries = list_entries(
            self.root,
            exclude=self.config.action_exclude,
            include=self.config.action_include,
            kind=EntryKind.DIRECTORY,
            recursive=False,
        )

        actions: list[ActionDescriptor] = []
        seen: dict[str, Path] = {}

        for entry in entries:
            directory = self.root / entry
            action = load_action_descriptor(directory, self.config.action_config_file)
            if action.name in seen:
                raise ConfigurationError(
                    f"Action name '{action.name}' is used by both {seen[action.name]} and {directory}"
                )
            seen[action.name] = directory
            actions.append(action)

        return actions

    def archive_exclude(self, action: ActionDescriptor) -> list[str]:
        """Archive exclude patterns for an action, including its ignore file."""
        excludes = list(self.config.archive_exclude)
        if self.config.ignore_file:
            excludes.extend(read_list(action.source_directory / self.config.ignore_file))
        return excludes

    def fingerprint_exclude(self) -> list[str]:
        """Fingerprint exclude patterns; the action descriptor file never counts as content."""
        excludes = list(self.config.fingerprint_exclude)
        if self.config.action_config_file not in excludes:
            excludes.append(self.config.action_config_file)
        return excludes

    def build(self, action: ActionDescriptor) -> None:
        """Run the build step for an action."""
        self.logger.info(f"Building action '{action.name}' ...")
        action.archive_path = self.builder.build(
            action.source_directory,
            action.name,
            self.archive_exclude(action),
        )
        action.state = ActionState.BUILT

    def check(self, action: ActionDescriptor, package_name: str) -> None:
        """Fingerprint local content and fetch the recorded remote fingerprint."""
        action.fingerprint = fingerprint(action.source_directory, self.fingerprint_exclude())
        self.logger.debug(f"{action.source_directory} fingerprint: {action.fingerprint}")

        try:
            remote = self.gateway.get_action(package_name, action.name)
        except RemoteNotFoundError:
            action.remote_exists = False
            action.remote_fingerprint = None
            self.logger.debug(f"'{package_name}/{action.name}' does not exist yet")
        else:
            action.remote_exists = True
            action.remote_fingerprint = get_annotation(remote.get("annotations"), FINGERPRINT_ANNOTATION)
            self.logger.debug(f"Recorded fingerprint of '{package_name}/{action.name}': {action.remote_fingerprint}")

        action.state = ActionState.CHECKED

    def resolve(self, action: ActionDescriptor, package_name: str) -> ActionResult:
        """Upload the action if it changed, recording its fingerprint in the same call."""
        if not (self.force or action.needs_upload):
            action.state = ActionState.RESOLVED
            self.logger.success(f"'{package_name}/{action.name}' is unchanged")
            return ActionResult(
                name=action.name,
                outcome=Outcome.UNCHANGED,
                fingerprint=action.fingerprint,
                remote_fingerprint=action.remote_fingerprint,
                dry_run=self.dry_run,
            )

        outcome = Outcome.UPDATED if action.remote_exists else Outcome.CREATED

        if self.dry_run:
            self.logger.info(f"Would upload '{package_name}/{action.name}' ({outcome.value})")
            action.state = ActionState.RESOLVED
            return ActionResult(
                name=action.name,
                outcome=outcome,
                fingerprint=action.fingerprint,
                remote_fingerprint=action.remote_fingerprint,
                dry_run=True,
            )

        self.logger.info(f"Uploading '{action.archive_path}' to '{package_name}/{action.name}' ...")
        configuration, annotations = self._upload_payload(action)
        response = self.gateway.create_or_update_action(
            package_name,
            action.name,
            action.archive_path.read_bytes(),
            configuration,
            annotations,
        )

        recorded = get_annotation((response or {}).get("annotations"), FINGERPRINT_ANNOTATION, action.fingerprint)
        action.remote_exists = True
        action.remote_fingerprint = recorded
        action.state = ActionState.RESOLVED
        self.logger.success(f"Uploaded '{package_name}/{action.name}' ({outcome.value})")

        return ActionResult(
            name=action.name,
            outcome=outcome,
            fingerprint=action.fingerprint,
            remote_fingerprint=recorded,
        )

    def _upload_payload(self, action: ActionDescriptor) -> tuple[dict[str, Any], list[dict[str, Any]]]:
        """Split action configuration into passthrough settings and annotations."""
        configuration = {k: v for k, v in action.configuration.items() if k != "annotations"}
        annotations = merge_annotations(
            action.configuration.get("annotations"),
            [{"key": FINGERPRINT_ANNOTATION, "value": action.fingerprint}],
        )
        return configuration, annotations

    def sync_action(self, action: ActionDescriptor, package_name: str) -> ActionResult:
        """
        Take one action from DISCOVERED to RESOLVED.

        Raises:
            SyncAbortedError: If any step fails; names the action and step.
        """
        step = "build"
        try:
            self.build(action)
            step = "check"
            self.check(action, package_name)
            step = "upload"
            return self.resolve(action, package_name)
        except (OwsyncError, OSError) as e:
            raise SyncAbortedError(action.name, step, e) from e

    def sync_actions(self, actions: list[ActionDescriptor], package_name: str) -> list[ActionResult]:
        """
        Synchronize actions strictly one after another.

        A failure stops the pass; actions before it stay converged and
        actions after it are never touched.
        """
        results: list[ActionResult] = []
        for action in actions:
            try:
                results.append(self.sync_action(action, package_name))
            except SyncAbortedError as e:
                e.completed = list(results)
                raise
        return results

    def reconcile(self, package_name: str, processed_names: list[str]) -> ReconcileResult:
        """
        Delete remote actions of the package that weren't processed locally.

        Every orphan deletion is attempted; failures are collected per orphan
        instead of stopping at the first one.

        Raises:
            RemoteCallError: If the remote action list cannot be fetched.
        """
        remote_actions = self.gateway.list_actions(package_name)
        remote_names = {entry["name"] for entry in remote_actions if entry.get("name")}
        orphans = sorted(remote_names - set(processed_names))

        result = ReconcileResult(orphans=orphans, dry_run=self.dry_run)

        if not orphans:
            self.logger.debug(f"No orphaned actions in package '{package_name}'")
            return result

        for name in orphans:
            if self.dry_run:
                self.logger.info(f"Would delete '{package_name}/{name}'")
                continue

            try:
                self.gateway.delete_action(package_name, name)
            except RemoteNotFoundError:
                result.already_gone.append(name)
                self.logger.warning(f"'{package_name}/{name}' was already deleted")
            except RemoteCallError as e:
                result.failures.append(DeleteFailure(name=name, error=str(e)))
                self.logger.error(f"Failed to delete '{package_name}/{name}': {e}")
            else:
                result.deleted.append(name)
                self.logger.success(f"Deleted '{package_name}/{name}'")

        return result

    def deploy(self) -> DeployResult:
        """
        Run a complete deployment.

        Package creation happens before any action; reconciliation runs only
        after every action has been resolved.

        Raises:
            ConfigurationError: If the root or a descriptor file is invalid.
            SyncAbortedError: If the package, an action or the remote listing fails.
        """
        package = self.load_package()
        actions = self.discover()

        try:
            self.sync_package(package)
        except RemoteCallError as e:
            raise SyncAbortedError(None, "package", e) from e

        self.logger.info(f"Synchronizing {len(actions)} action(s) of package '{package.name}' ...")
        result = DeployResult(package=package.name, dry_run=self.dry_run)
        result.actions = self.sync_actions(actions, package.name)

        if self.prune:
            try:
                result.reconcile = self.reconcile(package.name, result.processed_names)
            except RemoteCallError as e:
                raise SyncAbortedError(None, "list", e, completed=result.actions) from e

        return result
