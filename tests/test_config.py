from pathlib import Path

import pytest
import yaml

from vela_installer.config import ConfigManager, default_config_path, load_config
from vela_installer.exceptions import ConfigurationError
from vela_installer.models.deploy import DeployMode


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in (
        "VELA_INSTALLER_CONFIG",
        "VELA_INSTALLER_ROOT_DIR",
        "VELA_INSTALLER_LOG_LEVEL",
        "VELA_INSTALLER_SHELL_DEPLOY_MODE",
    ):
        monkeypatch.delenv(var, raising=False)


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / "absent.yaml")

    assert config.paths.root_dir == Path.home() / ".vela"
    assert config.paths.logs_dir == config.paths.root_dir / "logs"
    assert config.deploy.shell_mode is DeployMode.LINK
    assert config.advanced.log_level == "INFO"
    assert [s.id for s in config.repositories.sources] == ["shell", "cli", "codium", "settings"]
    assert all(not s.preserve_local_changes for s in config.repositories.sources)


def test_yaml_values_are_applied(tmp_path: Path) -> None:
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        yaml.safe_dump(
            {
                "paths": {"root_dir": str(tmp_path / "dots")},
                "deploy": {"shell_mode": "filtered_copy", "allowed_extensions": ["QML", ".Js"]},
                "repositories": {
                    "sources": [
                        {"id": "cli", "name": "CLI", "url": "file:///srv/cli.git", "preserve_local_changes": True}
                    ]
                },
            }
        )
    )

    config = load_config(config_file)

    assert config.paths.root_dir == tmp_path / "dots"
    assert config.paths.logs_dir == tmp_path / "dots" / "logs"
    assert config.deploy.shell_mode is DeployMode.FILTERED_COPY
    assert config.deploy.allowed_extensions == [".qml", ".js"]
    source = config.repositories.get("cli")
    assert source is not None and source.preserve_local_changes
    assert config.repositories.get("shell") is None


def test_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VELA_INSTALLER_ROOT_DIR", str(tmp_path / "elsewhere"))
    monkeypatch.setenv("VELA_INSTALLER_LOG_LEVEL", "debug")
    monkeypatch.setenv("VELA_INSTALLER_SHELL_DEPLOY_MODE", "FILTERED_COPY")

    config = load_config(tmp_path / "absent.yaml")

    assert config.paths.root_dir == tmp_path / "elsewhere"
    assert config.paths.logs_dir == tmp_path / "elsewhere" / "logs"
    assert config.advanced.log_level == "DEBUG"
    assert config.deploy.shell_mode is DeployMode.FILTERED_COPY


def test_invalid_deploy_mode_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VELA_INSTALLER_SHELL_DEPLOY_MODE", "hardlink")

    with pytest.raises(ConfigurationError):
        load_config(tmp_path / "absent.yaml")


def test_unknown_log_level_env_is_ignored(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VELA_INSTALLER_LOG_LEVEL", "verbose")

    assert load_config(tmp_path / "absent.yaml").advanced.log_level == "INFO"


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    config_file = tmp_path / "config.yaml"
    config_file.write_text("paths: [unclosed\n")

    with pytest.raises(ConfigurationError):
        load_config(config_file)


def test_invalid_values_raise(tmp_path: Path) -> None:
    config_file = tmp_path / "config.yaml"
    config_file.write_text("advanced:\n  log_level: LOUD\n")

    with pytest.raises(ConfigurationError) as exc_info:
        load_config(config_file)

    assert exc_info.value.code == "config.invalid"


def test_config_path_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_file = tmp_path / "custom.yaml"
    config_file.write_text("advanced:\n  log_level: TRACE\n")
    monkeypatch.setenv("VELA_INSTALLER_CONFIG", str(config_file))

    manager = ConfigManager()

    assert manager.config_path == config_file
    assert manager.load().advanced.log_level == "TRACE"


def test_default_config_path_follows_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))

    assert default_config_path() == tmp_path / "vela-installer" / "config.yaml"

