"""Configuration data models for the Vela installer."""

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from vela_installer.models.deploy import DeployMode
from vela_installer.models.repository import RepositorySource


def _xdg_dir(env_var: str, fallback: str) -> Path:
    value = os.getenv(env_var)
    if value:
        return Path(value).expanduser()
    return Path.home() / fallback


class PathsConfig(BaseModel):
    """Paths configuration."""

    root_dir: Path = Field(default_factory=lambda: Path.home() / ".vela")
    config_root: Path = Field(default_factory=lambda: _xdg_dir("XDG_CONFIG_HOME", ".config"))
    state_dir: Path = Field(default_factory=lambda: _xdg_dir("XDG_STATE_HOME", ".local/state") / "vela")
    logs_dir: Path | None = None
    home_dir: Path = Field(default_factory=Path.home)  # Shell rc files and NVM live here

    @field_validator("root_dir", "config_root", "state_dir", "home_dir", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Expand user path."""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    @field_validator("logs_dir", mode="before")
    @classmethod
    def expand_optional_path(cls, v: str | Path | None) -> Path | None:
        """Expand user path for optional paths."""
        if v is None:
            return None
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    def model_post_init(self, __context: object) -> None:
        """Set default subdirectories if not specified."""
        if self.logs_dir is None:
            self.logs_dir = self.root_dir / "logs"

    def get_repo_path(self, repo_id: str) -> Path:
        """
        Get the working copy path for a managed repository.

        Example paths:
            - ~/.vela/shell   - QuickShell configuration
            - ~/.vela/cli     - Companion CLI sources

        Args:
            repo_id: Repository identifier (e.g., "shell", "cli")

        Returns:
            Path to the repository working copy
        """
        return self.root_dir / repo_id

    def get_vela_config_dir(self) -> Path:
        """Directory holding shell.json and cli.json."""
        return self.config_root / "vela"

    def get_palette_override_path(self) -> Path:
        return self.state_dir / "palette_override.json"


class ToolsConfig(BaseModel):
    """Executables used by the installer."""

    git: str = "git"
    gum: str = "gum"
    aur_helper: str = "aura"
    aur_helper_package_url: str = "https://aur.archlinux.org/aura-bin.git"
    code: str = "code"
    cargo: str = "cargo"
    vela: str = "vela"


class RepositoriesConfig(BaseModel):
    """Repositories configuration."""

    sources: list[RepositorySource] = Field(default_factory=list)

    def get(self, repo_id: str) -> RepositorySource | None:
        return next((s for s in self.sources if s.id == repo_id), None)


class DeployConfig(BaseModel):
    """Settings for materializing synced repositories into the config root."""

    shell_mode: DeployMode = DeployMode.LINK
    allowed_extensions: list[str] = Field(
        default_factory=lambda: [
            ".qml",
            ".js",
            ".mjs",
            ".json",
            ".conf",
            ".frag",
            ".vert",
            ".svg",
            ".png",
            ".jpg",
            ".jpeg",
            ".gif",
            ".webp",
            ".ttf",
            ".otf",
            ".woff",
            ".woff2",
        ]
    )
    script_extensions: list[str] = Field(default_factory=lambda: [".qml", ".js", ".mjs"])
    # Names excluded at any depth: VCS metadata, build plugins, build files, migration notes
    denylist: list[str] = Field(
        default_factory=lambda: [
            ".git",
            ".github",
            "plugin",
            "plugins",
            "build",
            "CMakeLists.txt",
            "Makefile",
            "meson.build",
            "MIGRATION.md",
        ]
    )
    unsupported_directive_pattern: str = r"^\s*(//\s*@?\s*)?pragma\s+ComponentBehavior\b.*$"
    # Earlier installer versions left these behind; relative to config_root, globs allowed
    legacy_paths: list[str] = Field(default_factory=lambda: ["quickshell/vela.backup-*"])

    @field_validator("allowed_extensions", "script_extensions", mode="after")
    @classmethod
    def normalize_extensions(cls, v: list[str]) -> list[str]:
        """Lower-case extensions and ensure a leading dot."""
        return [e.lower() if e.startswith(".") else f".{e.lower()}" for e in v]


class AdvancedConfig(BaseModel):
    """Advanced configuration."""

    log_level: Literal["INFO", "DEBUG", "TRACE"] = "INFO"
    network_timeout: int = 60  # Seconds, for installer script downloads


class AppConfig(BaseModel):
    """Application configuration."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    repositories: RepositoriesConfig = Field(default_factory=RepositoriesConfig)
    deploy: DeployConfig = Field(default_factory=DeployConfig)
    advanced: AdvancedConfig = Field(default_factory=AdvancedConfig)
