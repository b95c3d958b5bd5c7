"""
Configuration management for the lineup efficiency server.

This module provides flexible configuration management with support for:
- Environment variables
- Configuration files (YAML/JSON)
- Configuration validation
- Hot-reloading

Only the tool and server layers read configuration. The engine functions
take every setting as an explicit argument.
"""

import os
import json
import logging
import yaml
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Union
from dataclasses import dataclass
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler
from pydantic import BaseModel, ValidationError, Field

logger = logging.getLogger(__name__)


@dataclass
class ServerConfig:
    """Server configuration."""
    name: str = "Lineup Efficiency Server"
    version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 9000


@dataclass
class PresentationConfig:
    """How results are rendered for the dashboard."""
    precision: int = 1
    max_mistakes: int = 0  # 0 keeps every mistake


@dataclass
class EngineConfig:
    """Defaults passed to the engine by the tool layer."""
    exclude_injured_reserve: bool = False
    consistency_tolerance: float = 1e-9


@dataclass
class ValidationLimits:
    """Input size limits for tool calls."""
    max_players_per_week: int = 60
    max_weeks: int = 22
    max_teams: int = 32


class ConfigurationModel(BaseModel):
    """Pydantic model for configuration validation."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    presentation: PresentationConfig = Field(default_factory=PresentationConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    limits: ValidationLimits = Field(default_factory=ValidationLimits)

    model_config = {"arbitrary_types_allowed": True}


def _parse_bool(value: str) -> bool:
    return value.lower() in ['true', '1', 'yes']


# Environment variable mapping
ENV_MAPPINGS = {
    # Server configuration
    'LINEUP_EFF_SERVER_NAME': ('server', 'name', str),
    'LINEUP_EFF_SERVER_VERSION': ('server', 'version', str),
    'LINEUP_EFF_HOST': ('server', 'host', str),
    'LINEUP_EFF_PORT': ('server', 'port', int),

    # Presentation
    'LINEUP_EFF_PRECISION': ('presentation', 'precision', int),
    'LINEUP_EFF_MAX_MISTAKES': ('presentation', 'max_mistakes', int),

    # Engine defaults
    'LINEUP_EFF_EXCLUDE_IR': ('engine', 'exclude_injured_reserve', _parse_bool),
    'LINEUP_EFF_CONSISTENCY_TOLERANCE': ('engine', 'consistency_tolerance', float),

    # Validation limits
    'LINEUP_EFF_MAX_PLAYERS_PER_WEEK': ('limits', 'max_players_per_week', int),
    'LINEUP_EFF_MAX_WEEKS': ('limits', 'max_weeks', int),
    'LINEUP_EFF_MAX_TEAMS': ('limits', 'max_teams', int),
}


class ConfigFileHandler(FileSystemEventHandler):
    """File system event handler for configuration hot-reloading."""

    def __init__(self, config_manager: 'ConfigManager'):
        self.config_manager = config_manager
        super().__init__()

    def on_modified(self, event):
        if not event.is_directory and event.src_path == str(self.config_manager.config_file_path):
            logger.info(f"Configuration file {event.src_path} modified, reloading...")
            self.config_manager.reload_configuration()


class ConfigManager:
    """
    Configuration manager supporting environment variables,
    configuration files, validation, and hot-reloading.
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None, enable_hot_reload: bool = True):
        """
        Initialize the configuration manager.

        Args:
            config_file: Path to configuration file (YAML or JSON)
            enable_hot_reload: Whether to enable hot-reloading of configuration files
        """
        self.config_file_path = Path(config_file) if config_file else None
        self.enable_hot_reload = enable_hot_reload
        self._config_lock = threading.RLock()
        self._observer = None
        self._config: Optional[ConfigurationModel] = None

        # Load initial configuration
        self.load_configuration()

        # Set up hot-reloading if enabled and config file exists
        if self.enable_hot_reload and self.config_file_path and self.config_file_path.exists():
            self._setup_hot_reload()

    def _setup_hot_reload(self):
        """Set up file system monitoring for hot-reloading."""
        if self._observer:
            self._observer.stop()
            self._observer.join()

        self._observer = Observer()
        event_handler = ConfigFileHandler(self)
        self._observer.schedule(event_handler, str(self.config_file_path.parent), recursive=False)
        self._observer.start()

    def load_configuration(self):
        """Load configuration from environment variables and config file."""
        with self._config_lock:
            # Start with default configuration
            config_dict = {}

            # Load from config file if it exists
            if self.config_file_path and self.config_file_path.exists():
                config_dict = self._load_config_file()

            # Override with environment variables
            config_dict = self._load_environment_variables(config_dict)

            # Validate and create configuration object
            try:
                self._config = ConfigurationModel(**config_dict)
            except ValidationError as e:
                raise ValueError(f"Configuration validation failed: {e}")

    def _load_config_file(self) -> Dict[str, Any]:
        """Load configuration from YAML or JSON file."""
        try:
            with open(self.config_file_path, 'r') as f:
                if self.config_file_path.suffix.lower() in ['.yml', '.yaml']:
                    return yaml.safe_load(f) or {}
                elif self.config_file_path.suffix.lower() == '.json':
                    return json.load(f)
                else:
                    raise ValueError(f"Unsupported configuration file format: {self.config_file_path.suffix}")
        except Exception as e:
            raise ValueError(f"Failed to load configuration file {self.config_file_path}: {e}")

    def _load_environment_variables(self, config_dict: Dict[str, Any]) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        for env_var, (section, key, type_converter) in ENV_MAPPINGS.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                try:
                    # Ensure nested structure exists
                    if section not in config_dict:
                        config_dict[section] = {}

                    # Convert and set the value
                    config_dict[section][key] = type_converter(env_value)
                except (ValueError, TypeError) as e:
                    raise ValueError(f"Invalid value for environment variable {env_var}: {env_value} ({e})")

        return config_dict

    def reload_configuration(self):
        """Reload configuration from file and environment variables."""
        try:
            self.load_configuration()
            logger.info("Configuration reloaded successfully")
        except ValueError as e:
            logger.error(f"Failed to reload configuration: {e}")

    @property
    def config(self) -> ConfigurationModel:
        """Get the current configuration."""
        with self._config_lock:
            if self._config is None:
                raise RuntimeError("Configuration not loaded")
            return self._config

    def get_presentation_options(self) -> Dict[str, int]:
        """Keyword arguments for ``to_dict`` on engine results."""
        presentation = self.config.presentation
        return {
            "precision": presentation.precision,
            "max_mistakes": presentation.max_mistakes,
        }

    def stop(self):
        """Stop the configuration manager and clean up resources."""
        if self._observer:
            self._observer.stop()
            self._observer.join()
            self._observer = None


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None

CONFIG_PATHS = [
    Path("config.yml"),
    Path("config.yaml"),
    Path("config.json"),
    Path("/etc/lineup-efficiency/config.yml"),
    Path("/etc/lineup-efficiency/config.yaml"),
    Path("/etc/lineup-efficiency/config.json"),
]


def get_config_manager() -> ConfigManager:
    """Get the global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        # Look for config file in common locations
        config_file = None
        for path in CONFIG_PATHS:
            if path.exists():
                config_file = path
                break

        _config_manager = ConfigManager(config_file)

    return _config_manager


def set_config_manager(config_manager: Optional[ConfigManager]):
    """Set the global configuration manager instance."""
    global _config_manager
    if _config_manager:
        _config_manager.stop()
    _config_manager = config_manager
