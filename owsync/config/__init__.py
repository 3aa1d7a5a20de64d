# OWSYNC Configuration Module
# Handles YAML tool configuration, platform credentials and defaults

from owsync.config.defaults import DEFAULT_CONFIG, FINGERPRINT_ANNOTATION, generate_default_config
from owsync.config.loader import (
    ensure_config_exists,
    get_config_path,
    get_wskprops_path,
    load_config,
    read_properties,
    resolve_platform_config,
)
from owsync.config.schema import DeployConfig, PlatformConfig

__all__ = [
    # Schema
    "DeployConfig",
    "PlatformConfig",
    # Loader
    "load_config",
    "get_config_path",
    "ensure_config_exists",
    "get_wskprops_path",
    "read_properties",
    "resolve_platform_config",
    # Defaults
    "DEFAULT_CONFIG",
    "FINGERPRINT_ANNOTATION",
    "generate_default_config",
]
