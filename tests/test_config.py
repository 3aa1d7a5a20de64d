# Tests for owsync.config
# Configuration loading, validation and platform resolution

import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from owsync.config.defaults import DEFAULT_CONFIG, generate_default_config
from owsync.config.loader import (
    ensure_config_exists,
    get_config_path,
    get_wskprops_path,
    load_config,
    read_properties,
    resolve_platform_config,
)
from owsync.config.schema import DeployConfig, PlatformConfig
from owsync.exceptions import ConfigurationError


class TestDeployConfig:
    """Tests for DeployConfig schema."""

    def test_defaults(self):
        config = DeployConfig()
        assert config.action_include == ["*"]
        assert "node_modules" in config.fingerprint_exclude
        assert config.install_command == "npm install --only=production"
        assert config.install_marker == "package.json"
        assert config.ignore_file == ".owignore"
        assert config.default_kind == "nodejs:default"

    def test_blank_strings_become_none(self):
        config = DeployConfig(install_command="", install_marker="  ", ignore_file="")
        assert config.install_command is None
        assert config.install_marker is None
        assert config.ignore_file is None

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValueError):
            DeployConfig(timeout=0)

    def test_default_config_matches_schema(self):
        assert DeployConfig.model_validate(DEFAULT_CONFIG) == DeployConfig()

    def test_generated_yaml_round_trips(self):
        data = yaml.safe_load(generate_default_config())
        assert DeployConfig.model_validate(data) == DeployConfig()


class TestPlatformConfig:
    """Tests for PlatformConfig schema."""

    def test_namespace_default(self):
        platform = PlatformConfig(apihost="host", auth="a:b")
        assert platform.namespace == "_"
        assert platform.insecure is False

    def test_auth_requires_colon(self):
        with pytest.raises(ValueError):
            PlatformConfig(apihost="host", auth="nocolon")


class TestLoadConfig:
    """Tests for load_config."""

    def test_missing_default_file_uses_defaults(self, temp_dir: Path):
        with patch.dict(os.environ, clear=True):
            with patch("owsync.config.loader.get_config_path", return_value=temp_dir / "config.yaml"):
                assert load_config() == DeployConfig()

    def test_missing_explicit_file_raises(self, temp_dir: Path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(temp_dir / "missing.yaml")

    def test_missing_file_from_env_raises(self, temp_dir: Path):
        missing = temp_dir / "typo.yaml"
        with patch.dict(os.environ, {"OWSYNC_CONFIG": str(missing)}):
            with pytest.raises(ConfigurationError, match="not found"):
                load_config()

    def test_empty_file_uses_defaults(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == DeployConfig()

    def test_partial_override(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("install_command: null\narchive_exclude: ['*.md']\n", encoding="utf-8")

        config = load_config(path)

        assert config.install_command is None
        assert config.archive_exclude == ["*.md"]
        assert config.fingerprint_exclude == DeployConfig().fingerprint_exclude

    def test_invalid_yaml(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("action_include: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(path)

    def test_root_not_mapping(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(path)

    def test_validation_error(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text("timeout: -5\n", encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(path)
        assert "timeout" in exc_info.value.message


class TestConfigPaths:
    """Tests for configuration file locations."""

    def test_config_path_from_env(self, temp_dir: Path):
        path = get_config_path({"OWSYNC_CONFIG": str(temp_dir / "c.yaml")})
        assert path == temp_dir / "c.yaml"

    def test_config_path_default(self):
        assert get_config_path({}).name == "config.yaml"

    def test_wskprops_path_from_env(self, temp_dir: Path):
        assert get_wskprops_path({"WSK_CONFIG_FILE": str(temp_dir / "props")}) == temp_dir / "props"

    def test_wskprops_path_default(self):
        assert get_wskprops_path({}) == Path.home() / ".wskprops"

    def test_ensure_config_exists(self, temp_dir: Path):
        path = temp_dir / "sub" / "config.yaml"

        created_path, created = ensure_config_exists(path)
        assert created is True
        assert created_path.exists()

        _, created_again = ensure_config_exists(path)
        assert created_again is False


class TestReadProperties:
    """Tests for read_properties."""

    def test_parse(self, temp_dir: Path):
        path = temp_dir / ".wskprops"
        path.write_text(
            "# comment\nAPIHOST=openwhisk.example.com\n\nAUTH = user:secret\nNOVALUE\n",
            encoding="utf-8",
        )
        assert read_properties(path) == {"APIHOST": "openwhisk.example.com", "AUTH": "user:secret"}

    def test_missing(self, temp_dir: Path):
        assert read_properties(temp_dir / ".wskprops") == {}


class TestResolvePlatformConfig:
    """Tests for platform setting precedence."""

    @pytest.fixture
    def wskprops(self, temp_dir: Path) -> Path:
        path = temp_dir / ".wskprops"
        path.write_text("APIHOST=props-host\nAUTH=props:key\nNAMESPACE=props-ns\n", encoding="utf-8")
        return path

    def test_from_wskprops(self, wskprops: Path):
        platform = resolve_platform_config(environ={}, wskprops_path=wskprops)
        assert platform.apihost == "props-host"
        assert platform.auth == "props:key"
        assert platform.namespace == "props-ns"

    def test_env_overrides_wskprops(self, wskprops: Path):
        environ = {"__OW_API_HOST": "env-host", "__OW_API_KEY": "env:key"}
        platform = resolve_platform_config(environ=environ, wskprops_path=wskprops)
        assert platform.apihost == "env-host"
        assert platform.auth == "env:key"
        assert platform.namespace == "props-ns"

    def test_explicit_overrides_env(self, wskprops: Path):
        environ = {"__OW_API_HOST": "env-host", "__OW_API_KEY": "env:key", "__OW_NAMESPACE": "env-ns"}
        platform = resolve_platform_config(
            apihost="cli-host",
            auth="cli:key",
            namespace="cli-ns",
            insecure=True,
            environ=environ,
            wskprops_path=wskprops,
        )
        assert (platform.apihost, platform.auth, platform.namespace) == ("cli-host", "cli:key", "cli-ns")
        assert platform.insecure is True

    def test_namespace_defaults(self, temp_dir: Path):
        platform = resolve_platform_config(
            environ={"__OW_API_HOST": "h", "__OW_API_KEY": "a:b"},
            wskprops_path=temp_dir / "missing",
        )
        assert platform.namespace == "_"

    def test_missing_settings(self, temp_dir: Path):
        with pytest.raises(ConfigurationError, match="apihost, auth"):
            resolve_platform_config(environ={}, wskprops_path=temp_dir / "missing")

    def test_invalid_auth(self, temp_dir: Path):
        with pytest.raises(ConfigurationError, match="auth"):
            resolve_platform_config(apihost="h", auth="bad", environ={}, wskprops_path=temp_dir / "missing")
