# OWSYNC Configuration Schema
# Pydantic models for tool and platform configuration

from pydantic import BaseModel, Field, field_validator

from owsync.config.defaults import (
    DEFAULT_ACTION_CONFIG_FILE,
    DEFAULT_ACTION_EXCLUDE,
    DEFAULT_ARCHIVE_EXCLUDE,
    DEFAULT_FINGERPRINT_EXCLUDE,
    DEFAULT_IGNORE_FILE,
    DEFAULT_INSTALL_COMMAND,
    DEFAULT_INSTALL_MARKER,
    DEFAULT_KIND,
    DEFAULT_NAMESPACE,
    DEFAULT_PACKAGE_CONFIG_FILE,
    DEFAULT_TIMEOUT,
)


class DeployConfig(BaseModel):
    """Tool settings controlling discovery, fingerprinting and packaging."""

    action_include: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Patterns a subdirectory must match to count as an action",
    )
    action_exclude: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ACTION_EXCLUDE),
        description="Subdirectories that are never actions",
    )
    fingerprint_exclude: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FINGERPRINT_EXCLUDE),
        description="Files left out of the content fingerprint",
    )
    archive_exclude: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ARCHIVE_EXCLUDE),
        description="Files left out of the uploaded archive",
    )
    ignore_file: str | None = Field(
        default=DEFAULT_IGNORE_FILE,
        description="Per-action file listing extra archive exclude patterns",
    )
    install_command: str | None = Field(
        default=DEFAULT_INSTALL_COMMAND,
        description="Dependency install command run inside each action directory",
    )
    install_marker: str | None = Field(
        default=DEFAULT_INSTALL_MARKER,
        description="File that must exist for the install command to run (None = always run)",
    )
    package_config_file: str = Field(default=DEFAULT_PACKAGE_CONFIG_FILE, description="Package descriptor file name")
    action_config_file: str = Field(default=DEFAULT_ACTION_CONFIG_FILE, description="Action descriptor file name")
    default_kind: str = Field(default=DEFAULT_KIND, description="Runtime kind when an action names none")
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="HTTP timeout in seconds")

    @field_validator("install_command", "install_marker", "ignore_file")
    @classmethod
    def empty_to_none(cls, v: str | None) -> str | None:
        """Treat blank strings as unset."""
        if v is None or not v.strip():
            return None
        return v


class PlatformConfig(BaseModel):
    """Connection settings for the remote OpenWhisk platform."""

    apihost: str = Field(description="API host, with or without scheme")
    auth: str = Field(description="Credentials in 'uuid:key' form")
    namespace: str = Field(default=DEFAULT_NAMESPACE, description="Target namespace ('_' = default)")
    insecure: bool = Field(default=False, description="Skip TLS certificate verification")

    @field_validator("auth")
    @classmethod
    def check_auth(cls, v: str) -> str:
        """Credentials must be 'user:password'."""
        if ":" not in v:
            raise ValueError("auth must have the form 'uuid:key'")
        return v

    @property
    def base_url(self) -> str:
        """API root URL including scheme."""
        host = self.apihost.rstrip("/")
        if not host.startswith(("http://", "https://")):
            host = f"https://{host}"
        return f"{host}/api/v1"

    @property
    def credentials(self) -> tuple[str, str]:
        """Split auth into (user, password)."""
        user, _, password = self.auth.partition(":")
        return user, password
