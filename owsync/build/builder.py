# OWSYNC Build Step
# Dependency installation and archive creation for action directories

import shlex
import subprocess
import zipfile
from pathlib import Path
from typing import Optional

from owsync.exceptions import BuildError
from owsync.logger import DeployLogger, NullLogger
from owsync.utils.paths import EntryKind, ensure_dir, list_entries


def run_install(command: str, directory: Path) -> subprocess.CompletedProcess[str]:
    """
    Run a dependency install command inside a directory.

    Args:
        command: Shell-style command line, e.g. "npm install --only=production".
        directory: Working directory.

    Returns:
        CompletedProcess with captured output.

    Raises:
        BuildError: If the command exits non-zero or cannot be started.
    """
    cmd = shlex.split(command)
    try:
        result = subprocess.run(
            cmd,
            cwd=directory,
            check=False,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError:
        raise BuildError(f"Install command not found: {cmd[0]}", directory=directory)

    if result.returncode != 0:
        raise BuildError(
            f"Install command failed in {directory}: {command}",
            directory=directory,
            returncode=result.returncode,
            stderr=result.stderr.strip() if result.stderr else "",
        )
    return result


def create_zip_archive(directory: Path, archive_path: Path, exclude: Optional[list[str]] = None) -> list[str]:
    """
    Create a ZIP archive of a directory.

    Args:
        directory: The directory to archive.
        archive_path: The ZIP file to create. Replaced if it exists.
        exclude: Glob patterns of files to leave out.

    Returns:
        The relative paths written into the archive.
    """
    files = list_entries(directory, exclude=exclude, kind=EntryKind.FILE, recursive=True)

    ensure_dir(archive_path.parent)
    if archive_path.exists():
        archive_path.unlink()

    with zipfile.ZipFile(archive_path, "w", zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        for rel_path in files:
            zf.write(directory / rel_path, rel_path)

    return files


class Builder:
    """
    Builds deployable archives for action directories.

    Archives are written into ``work_dir``, which should live outside the
    deployment root so archives never show up as actions or in fingerprints.
    """

    def __init__(
        self,
        work_dir: Path,
        *,
        install_command: Optional[str] = None,
        install_marker: Optional[str] = None,
        logger: Optional[DeployLogger] = None,
    ):
        """
        Initialize builder.

        Args:
            work_dir: Directory receiving the built archives.
            install_command: Dependency install command. None skips installation.
            install_marker: File that must exist for installation to run.
            logger: Progress logger.
        """
        self.work_dir = work_dir
        self.install_command = install_command
        self.install_marker = install_marker
        self.logger = logger or NullLogger()

    def needs_install(self, directory: Path) -> bool:
        """Check whether the install command applies to a directory."""
        if not self.install_command:
            return False
        if self.install_marker is None:
            return True
        return (directory / self.install_marker).exists()

    def install(self, directory: Path) -> None:
        """Install dependencies for a directory, if applicable."""
        if not self.needs_install(directory):
            return

        self.logger.info(f"Executing '{self.install_command}' in {directory} ...")
        result = run_install(self.install_command, directory)
        if result.stdout:
            self.logger.debug(f"stdout:\n{result.stdout.strip()}")
        if result.stderr:
            self.logger.debug(f"stderr:\n{result.stderr.strip()}")

    def build(self, directory: Path, name: str, exclude: Optional[list[str]] = None) -> Path:
        """
        Install dependencies and package a directory.

        Args:
            directory: Action directory.
            name: Action name, used for the archive file name.
            exclude: Archive exclude patterns.

        Returns:
            Path of the created archive.

        Raises:
            BuildError: If installation or archiving fails.
        """
        self.install(directory)

        archive_path = self.work_dir / f"{name}.zip"
        try:
            files = create_zip_archive(directory, archive_path, exclude)
        except OSError as e:
            raise BuildError(f"Failed to create archive for '{name}': {e}", directory=directory) from e

        self.logger.debug(f"Archived {len(files)} file(s) into {archive_path}")
        return archive_path
