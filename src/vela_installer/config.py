"""Configuration management for the Vela installer."""

import json
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from vela_installer.exceptions import ConfigurationError
from vela_installer.logger import get_logger
from vela_installer.models.app_config import AppConfig
from vela_installer.models.deploy import DeployMode
from vela_installer.models.repository import RepositorySource
from vela_installer.utils.paths import get_resources_dir

logger = get_logger(__name__)

CONFIG_PATH_ENV = "VELA_INSTALLER_CONFIG"


def default_config_path() -> Path:
    """Location of the user config file: $XDG_CONFIG_HOME/vela-installer/config.yaml."""
    config_home = os.getenv("XDG_CONFIG_HOME")
    base = Path(config_home).expanduser() if config_home else Path.home() / ".config"
    return base / "vela-installer" / "config.yaml"


class ConfigManager:
    """Manages installer configuration with YAML file and environment variable support."""

    def __init__(self, config_path: Path | None = None) -> None:
        """Initialize configuration manager.

        Args:
            config_path: Path to config file. If None, uses VELA_INSTALLER_CONFIG
                        environment variable or defaults to the XDG config directory
        """
        if config_path is None:
            env_path = os.getenv(CONFIG_PATH_ENV)
            config_path = Path(env_path).expanduser() if env_path else default_config_path()

        self.config_path = config_path

    def load(self) -> AppConfig:
        """Load configuration from file and apply environment variable overrides.

        Returns:
            Loaded configuration

        Raises:
            ConfigurationError: If the file is not valid YAML or fails validation
        """
        config_data: dict[str, Any] = {}

        # 1. Load from YAML file if it exists
        if self.config_path.exists():
            try:
                with open(self.config_path, encoding="utf-8") as f:
                    config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(error=f"{self.config_path}: {e}") from e

        # 2. Create config object (applies defaults)
        try:
            config = AppConfig(**config_data)
        except ValidationError as e:
            raise ConfigurationError(error=str(e)) from e

        # 3. Fill in the packaged repository list if the user has none
        if not config.repositories.sources:
            config = self._apply_default_repositories(config)

        # 4. Apply environment variable overrides
        config = self._apply_env_overrides(config)

        return config

    def _apply_default_repositories(self, config: AppConfig) -> AppConfig:
        preset_path = get_resources_dir() / "default_config.json"
        if not preset_path.exists():
            logger.warning("Default repository list not found", path=str(preset_path))
            return config

        with open(preset_path, encoding="utf-8") as f:
            preset_data = json.load(f)

        config.repositories.sources = [
            RepositorySource(**r) for r in preset_data.get("repositories", {}).get("sources", [])
        ]
        return config

    def _apply_env_overrides(self, config: AppConfig) -> AppConfig:
        """Apply environment variable overrides.

        Environment variables use the format: VELA_INSTALLER_<KEY>
        Examples:
            - VELA_INSTALLER_ROOT_DIR=~/src/vela
            - VELA_INSTALLER_LOG_LEVEL=DEBUG
            - VELA_INSTALLER_SHELL_DEPLOY_MODE=filtered_copy

        Args:
            config: Base configuration

        Returns:
            Configuration with environment overrides applied
        """
        if root_dir := os.getenv("VELA_INSTALLER_ROOT_DIR"):
            config.paths.root_dir = Path(root_dir).expanduser()
            # Recalculate dependent paths
            config.paths.logs_dir = None
            config.paths.model_post_init(None)

        if level := os.getenv("VELA_INSTALLER_LOG_LEVEL"):
            if level.upper() in ("INFO", "DEBUG", "TRACE"):
                config.advanced.log_level = level.upper()  # type: ignore[assignment]

        if mode := os.getenv("VELA_INSTALLER_SHELL_DEPLOY_MODE"):
            try:
                config.deploy.shell_mode = DeployMode(mode.lower())
            except ValueError as e:
                raise ConfigurationError(error=f"VELA_INSTALLER_SHELL_DEPLOY_MODE={mode}") from e

        return config


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load the installer configuration.

    Args:
        config_path: Explicit config file, overriding the environment and default location

    Returns:
        Application configuration
    """
    return ConfigManager(config_path).load()
