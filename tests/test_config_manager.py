"""
Tests for the configuration management system.
"""

import os
import json
import yaml
import pytest
from unittest.mock import patch

from lineup_efficiency.config_manager import (
    ConfigManager,
    ConfigurationModel,
    EngineConfig,
    PresentationConfig,
    ServerConfig,
    ValidationLimits,
    get_config_manager,
    set_config_manager,
)


class TestConfigurationModels:
    """Test configuration data models."""

    def test_server_config_defaults(self):
        config = ServerConfig()
        assert config.name == "Lineup Efficiency Server"
        assert config.version == "0.1.0"
        assert config.port == 9000

    def test_presentation_defaults(self):
        config = PresentationConfig()
        assert config.precision == 1
        assert config.max_mistakes == 0

    def test_engine_defaults(self):
        config = EngineConfig()
        assert config.exclude_injured_reserve is False
        assert config.consistency_tolerance == 1e-9

    def test_validation_limits_defaults(self):
        limits = ValidationLimits()
        assert limits.max_players_per_week == 60
        assert limits.max_weeks == 22
        assert limits.max_teams == 32


class TestConfigurationValidation:
    """Test configuration validation with pydantic."""

    def test_partial_configuration(self):
        """Test that partial configuration uses defaults."""
        config = ConfigurationModel(presentation={"precision": 2})
        assert config.presentation.precision == 2
        assert config.presentation.max_mistakes == 0
        assert config.limits.max_teams == 32

    def test_invalid_configuration_type(self):
        with pytest.raises(Exception):  # pydantic ValidationError
            ConfigurationModel(limits={"max_weeks": "many"})


class TestConfigManager:
    """Test the ConfigManager class."""

    def test_defaults(self):
        manager = ConfigManager(enable_hot_reload=False)

        assert manager.config.server.name == "Lineup Efficiency Server"
        assert manager.get_presentation_options() == {"precision": 1, "max_mistakes": 0}

    def test_environment_variables(self):
        env = {
            "LINEUP_EFF_PORT": "9100",
            "LINEUP_EFF_PRECISION": "2",
            "LINEUP_EFF_EXCLUDE_IR": "yes",
            "LINEUP_EFF_MAX_TEAMS": "12",
        }
        with patch.dict(os.environ, env):
            manager = ConfigManager(enable_hot_reload=False)

        config = manager.config
        assert config.server.port == 9100
        assert config.presentation.precision == 2
        assert config.engine.exclude_injured_reserve is True
        assert config.limits.max_teams == 12

    def test_invalid_environment_variable(self):
        with patch.dict(os.environ, {"LINEUP_EFF_MAX_WEEKS": "lots"}):
            with pytest.raises(ValueError, match="LINEUP_EFF_MAX_WEEKS"):
                ConfigManager(enable_hot_reload=False)

    def test_yaml_file(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text(yaml.dump({
            "server": {"name": "League Office"},
            "presentation": {"max_mistakes": 3},
        }))

        manager = ConfigManager(config_file=config_file, enable_hot_reload=False)

        assert manager.config.server.name == "League Office"
        assert manager.config.presentation.max_mistakes == 3

    def test_json_file(self, tmp_path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"engine": {"exclude_injured_reserve": True}}))

        manager = ConfigManager(config_file=config_file, enable_hot_reload=False)

        assert manager.config.engine.exclude_injured_reserve is True

    def test_environment_overrides_file(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text(yaml.dump({"presentation": {"precision": 3}}))

        with patch.dict(os.environ, {"LINEUP_EFF_PRECISION": "0"}):
            manager = ConfigManager(config_file=config_file, enable_hot_reload=False)

        assert manager.config.presentation.precision == 0

    def test_unsupported_file_format(self, tmp_path):
        config_file = tmp_path / "config.toml"
        config_file.write_text("precision = 2")

        with pytest.raises(ValueError, match="Unsupported configuration file format"):
            ConfigManager(config_file=config_file, enable_hot_reload=False)

    def test_invalid_file_values(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text(yaml.dump({"limits": {"max_teams": "all"}}))

        with pytest.raises(ValueError, match="Configuration validation failed"):
            ConfigManager(config_file=config_file, enable_hot_reload=False)

    def test_reload_configuration(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text(yaml.dump({"presentation": {"precision": 1}}))
        manager = ConfigManager(config_file=config_file, enable_hot_reload=False)

        config_file.write_text(yaml.dump({"presentation": {"precision": 2}}))
        manager.reload_configuration()

        assert manager.config.presentation.precision == 2

    def test_failed_reload_keeps_previous(self, tmp_path):
        config_file = tmp_path / "config.yml"
        config_file.write_text(yaml.dump({"presentation": {"precision": 2}}))
        manager = ConfigManager(config_file=config_file, enable_hot_reload=False)

        config_file.write_text(yaml.dump({"presentation": {"precision": "two"}}))
        manager.reload_configuration()

        assert manager.config.presentation.precision == 2


class TestGlobalConfigManager:
    """Test the process-wide configuration manager."""

    def teardown_method(self):
        set_config_manager(None)

    def test_set_and_get(self):
        manager = ConfigManager(enable_hot_reload=False)
        set_config_manager(manager)

        assert get_config_manager() is manager

    def test_created_on_demand(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        set_config_manager(None)

        manager = get_config_manager()

        assert manager.config.server.name == "Lineup Efficiency Server"
        assert get_config_manager() is manager
