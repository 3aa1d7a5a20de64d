# OWSYNC Default Configuration
# Default values and YAML generator for the tool configuration

from typing import Any

import yaml

DEFAULT_ACTION_EXCLUDE = [".*", "node_modules", "__pycache__"]
DEFAULT_FINGERPRINT_EXCLUDE = [".git", ".DS_Store", "node_modules"]
DEFAULT_ARCHIVE_EXCLUDE = [".git", ".DS_Store", "openwhisk.action.json", ".owignore"]
DEFAULT_IGNORE_FILE = ".owignore"
DEFAULT_INSTALL_COMMAND = "npm install --only=production"
DEFAULT_INSTALL_MARKER = "package.json"
DEFAULT_PACKAGE_CONFIG_FILE = "openwhisk.package.json"
DEFAULT_ACTION_CONFIG_FILE = "openwhisk.action.json"
DEFAULT_KIND = "nodejs:default"
DEFAULT_NAMESPACE = "_"
DEFAULT_TIMEOUT = 60.0

# Annotation key holding the recorded fingerprint of an uploaded action
FINGERPRINT_ANNOTATION = "md5sum"

# Environment variables consulted for platform settings
ENV_APIHOST = "__OW_API_HOST"
ENV_AUTH = "__OW_API_KEY"
ENV_NAMESPACE = "__OW_NAMESPACE"
ENV_WSKPROPS = "WSK_CONFIG_FILE"
ENV_CONFIG = "OWSYNC_CONFIG"

DEFAULT_CONFIG: dict[str, Any] = {
    "action_include": ["*"],
    "action_exclude": DEFAULT_ACTION_EXCLUDE,
    "fingerprint_exclude": DEFAULT_FINGERPRINT_EXCLUDE,
    "archive_exclude": DEFAULT_ARCHIVE_EXCLUDE,
    "ignore_file": DEFAULT_IGNORE_FILE,
    "install_command": DEFAULT_INSTALL_COMMAND,
    "install_marker": DEFAULT_INSTALL_MARKER,
    "package_config_file": DEFAULT_PACKAGE_CONFIG_FILE,
    "action_config_file": DEFAULT_ACTION_CONFIG_FILE,
    "default_kind": DEFAULT_KIND,
    "timeout": DEFAULT_TIMEOUT,
}


def generate_default_config() -> str:
    """Generate the default configuration as commented YAML."""
    header = (
        "# owsync configuration\n"
        "# Patterns are shell globs matched against paths relative to the\n"
        "# directory being scanned. Patterns without '/' match any path component.\n\n"
    )
    return header + yaml.dump(DEFAULT_CONFIG, default_flow_style=False, sort_keys=False, allow_unicode=True)
