# OWSYNC Configuration Loader
# Load tool configuration from YAML and resolve platform credentials

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from owsync.config.defaults import (
    DEFAULT_CONFIG,
    ENV_APIHOST,
    ENV_AUTH,
    ENV_CONFIG,
    ENV_NAMESPACE,
    ENV_WSKPROPS,
    generate_default_config,
)
from owsync.config.schema import DeployConfig, PlatformConfig
from owsync.exceptions import ConfigurationError


def get_config_dir() -> Path:
    """Get the owsync configuration directory."""
    return Path.home() / ".config" / "owsync"


def get_config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Get the path to the configuration file."""
    environ = os.environ if environ is None else environ
    env_path = environ.get(ENV_CONFIG)
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> DeployConfig:
    """
    Load tool configuration from YAML file.

    The default file is optional: when it doesn't exist the defaults are
    used. A file named explicitly, by argument or by $OWSYNC_CONFIG, must exist.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        DeployConfig: Validated configuration object.

    Raises:
        ConfigurationError: If an explicitly named file is missing, or the file
            is not valid YAML or fails validation.
    """
    explicit = config_path is not None or bool(os.environ.get(ENV_CONFIG))
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        if explicit:
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        return DeployConfig()

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

    merged = {**DEFAULT_CONFIG, **data}

    try:
        return DeployConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}:\n{_format_errors(e)}") from e


def ensure_config_exists(config_path: Optional[Path] = None) -> tuple[Path, bool]:
    """
    Ensure configuration file exists, creating default if needed.

    Returns:
        Tuple of (config_path, was_created).
    """
    if config_path is None:
        config_path = get_config_path()

    if config_path.exists():
        return config_path, False

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(generate_default_config(), encoding="utf-8")
    return config_path, True


def get_wskprops_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Get the path of the wsk CLI properties file."""
    environ = os.environ if environ is None else environ
    env_path = environ.get(ENV_WSKPROPS)
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".wskprops"


def read_properties(path: Path) -> dict[str, str]:
    """
    Read a KEY=VALUE properties file such as ~/.wskprops.

    Blank lines and lines starting with '#' or '!' are ignored.
    Missing file yields an empty dict.
    """
    if not path.is_file():
        return {}

    properties: dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith(("#", "!")):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        properties[key.strip()] = value.strip()
    return properties


def resolve_platform_config(
    *,
    apihost: Optional[str] = None,
    auth: Optional[str] = None,
    namespace: Optional[str] = None,
    insecure: bool = False,
    environ: Optional[Mapping[str, str]] = None,
    wskprops_path: Optional[Path] = None,
) -> PlatformConfig:
    """
    Resolve platform settings.

    Each field is taken from the explicit argument first, then the
    environment, then the wskprops file.

    Raises:
        ConfigurationError: If API host or credentials cannot be resolved.
    """
    environ = os.environ if environ is None else environ
    if wskprops_path is None:
        wskprops_path = get_wskprops_path(environ)
    properties = read_properties(wskprops_path)

    resolved = {
        "apihost": apihost or environ.get(ENV_APIHOST) or properties.get("APIHOST"),
        "auth": auth or environ.get(ENV_AUTH) or properties.get("AUTH"),
        "namespace": namespace or environ.get(ENV_NAMESPACE) or properties.get("NAMESPACE"),
        "insecure": insecure,
    }

    missing = [key for key in ("apihost", "auth") if not resolved[key]]
    if missing:
        raise ConfigurationError(
            f"Missing platform setting(s): {', '.join(missing)}. "
            f"Pass them as options, set {ENV_APIHOST}/{ENV_AUTH}, or configure {wskprops_path}."
        )

    if not resolved["namespace"]:
        del resolved["namespace"]

    try:
        return PlatformConfig.model_validate(resolved)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid platform configuration:\n{_format_errors(e)}") from e


def _format_errors(error: ValidationError) -> str:
    """Render pydantic errors as 'loc: msg' lines."""
    lines = []
    for err in error.errors():
        loc = " -> ".join(str(part) for part in err["loc"])
        lines.append(f"  {loc}: {err['msg']}")
    return "\n".join(lines)
