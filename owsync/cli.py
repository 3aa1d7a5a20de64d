"""Click-based CLI for owsync - OpenWhisk package deployment."""

from __future__ import annotations

import sys
import tempfile
from pathlib import Path
from typing import Optional

import click
import yaml

from owsync import __version__
from owsync.build import Builder
from owsync.config import (
    ensure_config_exists,
    get_config_path,
    load_config,
    resolve_platform_config,
)
from owsync.exceptions import ConfigurationError, SyncAbortedError
from owsync.logger import DeployLogger
from owsync.output import create_console
from owsync.remote import OpenWhiskGateway
from owsync.sync import SyncEngine
from owsync.utils import expand_path, fingerprint


@click.group()
@click.version_option(version=__version__, prog_name="owsync")
def cli() -> None:
    """owsync - deploy a directory of actions as one OpenWhisk package.

    Every subdirectory of the deployment root is an action. Actions are
    only uploaded when their content fingerprint changed, and remote
    actions without a local directory are deleted.

    \b
    Package settings: <root>/openwhisk.package.json
    Action settings:  <root>/<action>/openwhisk.action.json
    """
    pass


@cli.command()
@click.option(
    "--dir",
    "-d",
    "directory",
    type=click.Path(path_type=Path),
    default=".",
    show_default=True,
    help="Root directory of the actions to deploy",
)
@click.option("--apihost", help="OpenWhisk API host (overrides __OW_API_HOST and ~/.wskprops)")
@click.option("--auth", help="OpenWhisk credentials 'uuid:key' (overrides __OW_API_KEY and ~/.wskprops)")
@click.option("--namespace", help="Target namespace (default: '_')")
@click.option("--insecure", "-i", is_flag=True, help="Skip TLS certificate verification")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Path to owsync config file")
@click.option("--dry-run", "-n", is_flag=True, help="Preview changes without applying")
@click.option("--force", "-f", is_flag=True, help="Upload every action even if unchanged")
@click.option("--no-prune", is_flag=True, help="Keep remote actions that have no local directory")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
def deploy(
    directory: Path,
    apihost: Optional[str],
    auth: Optional[str],
    namespace: Optional[str],
    insecure: bool,
    config_path: Optional[Path],
    dry_run: bool,
    force: bool,
    no_prune: bool,
    verbose: bool,
) -> None:
    """Deploy the actions below a directory.

    Creates or updates the package, builds and uploads changed actions one
    after another, then deletes remote actions that no longer exist locally.

    \b
    Examples:
        owsync deploy -d ./functions
        owsync deploy -d ./functions --dry-run -v
    """
    con = create_console(verbose=verbose)
    logger = DeployLogger(con.rich, verbose=verbose)

    try:
        config = load_config(config_path)
        platform = resolve_platform_config(apihost=apihost, auth=auth, namespace=namespace, insecure=insecure)
    except ConfigurationError as e:
        con.print_error(e.message)
        sys.exit(1)

    root = expand_path(directory)
    logger.info(f"Deploying {root} to {platform.apihost} (namespace '{platform.namespace}')")
    if dry_run:
        logger.info("Dry-run mode - no remote changes will be made")

    with tempfile.TemporaryDirectory(prefix="owsync-") as work_dir:
        with OpenWhiskGateway(platform, default_kind=config.default_kind, timeout=config.timeout) as gateway:
            builder = Builder(
                Path(work_dir),
                install_command=config.install_command,
                install_marker=config.install_marker,
                logger=logger,
            )
            engine = SyncEngine(
                root,
                gateway,
                builder,
                config,
                logger=logger,
                dry_run=dry_run,
                force=force,
                prune=not no_prune,
            )

            try:
                result = engine.deploy()
            except ConfigurationError as e:
                con.print_error(e.message)
                sys.exit(1)
            except SyncAbortedError as e:
                con.print_aborted(e)
                sys.exit(1)

    con.print_deploy_result(result)

    if not result.success:
        sys.exit(1)


@cli.command("fingerprint")
@click.argument("directory", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--exclude", "-e", multiple=True, help="Additional exclude pattern (repeatable)")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Path to owsync config file")
def show_fingerprint(directory: Path, exclude: tuple[str, ...], config_path: Optional[Path]) -> None:
    """Print the content fingerprint of DIRECTORY.

    Uses the configured fingerprint exclude patterns plus any --exclude.
    The action descriptor file is always left out, as during deployment.
    """
    con = create_console()
    try:
        config = load_config(config_path)
    except ConfigurationError as e:
        con.print_error(e.message)
        sys.exit(1)

    patterns = [*config.fingerprint_exclude, config.action_config_file, *exclude]
    click.echo(fingerprint(expand_path(directory), patterns))


@cli.group()
def config() -> None:
    """Manage the owsync configuration file."""
    pass


@config.command("init")
def config_init() -> None:
    """Create a configuration file with default settings."""
    con = create_console()
    path, created = ensure_config_exists()
    if created:
        con.print_success(f"Created configuration: {path}")
    else:
        con.print_info(f"Configuration already exists: {path}")


@config.command("show")
@click.option("--config", "config_path", type=click.Path(path_type=Path), help="Path to owsync config file")
def config_show(config_path: Optional[Path]) -> None:
    """Show the effective configuration as YAML."""
    con = create_console()
    try:
        settings = load_config(config_path)
    except ConfigurationError as e:
        con.print_error(e.message)
        sys.exit(1)

    click.echo(yaml.dump(settings.model_dump(mode="json"), default_flow_style=False, sort_keys=False), nl=False)


@config.command("path")
def config_path_cmd() -> None:
    """Show the configuration file location."""
    click.echo(str(get_config_path()))
