import json
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from conftest import RemoteRepo, add_source, make_context, requires_git

from vela_installer.exceptions import StepFailedError
from vela_installer.models.app_config import AppConfig
from vela_installer.models.policy import Operation
from vela_installer.services.installers import MODULE_HANDLERS, InstallContext, ModuleKind
from vela_installer.services.installers.modules import (
    apply_themes,
    cargo_build,
    detect_project_languages,
    install_cli,
    install_vela_config,
)
from vela_installer.services.prompts import ScriptedPrompter


class StepRecorder:
    def __init__(self, result: bool = True) -> None:
        self.steps: list[tuple[Operation, tuple[str, ...], dict[str, Any]]] = []
        self.result = result

    def __call__(self, operation: Operation, *args: str, **kwargs: Any) -> bool:
        self.steps.append((operation, args, kwargs))
        return self.result


def with_tools(ctx: InstallContext, *names: str) -> None:
    ctx.which = lambda name, path=None: f"/usr/bin/{name}" if name in names else None


def messages(ctx: InstallContext, kind: str) -> list[str]:
    assert isinstance(ctx.prompter, ScriptedPrompter)
    return ctx.prompter.messages(kind)


def test_every_module_has_a_handler() -> None:
    assert set(MODULE_HANDLERS) == set(ModuleKind)


def test_run_step_fatal_policy_raises(app_config: AppConfig) -> None:
    ctx = make_context(app_config)

    with pytest.raises(StepFailedError) as exc_info:
        ctx.run_step(Operation.PACKAGE_INSTALL, sys.executable, "-c", "import sys; sys.exit(3)")

    assert exc_info.value.params["operation"] == "package_install"


def test_run_step_warn_policy_notifies(app_config: AppConfig) -> None:
    ctx = make_context(app_config)

    ok = ctx.run_step(
        Operation.CARGO_BUILD, sys.executable, "-c", "import sys; sys.exit(101)", streaming=True, notice="CLI build failed"
    )

    assert not ok
    assert messages(ctx, "warn") == ["CLI build failed"]


def test_run_step_ignore_policy_is_silent(app_config: AppConfig) -> None:
    ctx = make_context(app_config)

    assert not ctx.run_step(Operation.CARGO_CLEAN, "vela-installer-no-such-binary", "clean")
    assert messages(ctx, "warn") == []


def test_run_step_uses_context_environment(app_config: AppConfig, tmp_path: Path) -> None:
    ctx = make_context(app_config)
    ctx.env["VELA_PROBE"] = "1"
    marker = tmp_path / "marker"

    assert ctx.run_step(
        Operation.TOOLCHAIN_SETUP,
        sys.executable,
        "-c",
        f"import os, pathlib; pathlib.Path({str(marker)!r}).write_text(os.environ['VELA_PROBE'])",
    )
    assert marker.read_text() == "1"


def test_cargo_build_skipped_without_cargo(app_config: AppConfig, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ctx = make_context(app_config)
    steps = StepRecorder()
    monkeypatch.setattr(ctx, "run_step", steps)
    (tmp_path / "Cargo.toml").write_text("[package]\n")

    assert not cargo_build(ctx, tmp_path, "CLI")
    assert steps.steps == []


def test_cargo_build_finds_nested_manifest(app_config: AppConfig, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ctx = make_context(app_config)
    with_tools(ctx, "cargo")
    steps = StepRecorder()
    monkeypatch.setattr(ctx, "run_step", steps)
    (tmp_path / "cli").mkdir()
    (tmp_path / "cli" / "Cargo.toml").write_text("[package]\n")

    assert cargo_build(ctx, tmp_path, "CLI")
    assert [(op, args) for op, args, _ in steps.steps] == [
        (Operation.CARGO_CLEAN, ("cargo", "clean", "--manifest-path", "cli/Cargo.toml")),
        (Operation.CARGO_BUILD, ("cargo", "build", "--release", "--manifest-path", "cli/Cargo.toml")),
    ]
    assert steps.steps[1][2]["cwd"] == tmp_path


def test_cargo_build_without_manifest(app_config: AppConfig, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ctx = make_context(app_config)
    with_tools(ctx, "cargo")
    steps = StepRecorder()
    monkeypatch.setattr(ctx, "run_step", steps)

    assert not cargo_build(ctx, tmp_path, "Settings app")
    assert steps.steps == []


def test_vela_config_prefers_cli_defaults(app_config: AppConfig, monkeypatch: pytest.MonkeyPatch) -> None:
    ctx = make_context(app_config)
    with_tools(ctx, "vela")
    steps = StepRecorder()
    monkeypatch.setattr(ctx, "run_step", steps)

    install_vela_config(ctx)

    config_dir = app_config.paths.get_vela_config_dir()
    assert [args for _, args, _ in steps.steps] == [("vela", "colors", "write-defaults")]
    assert not (config_dir / "shell.json").exists()
    assert json.loads((config_dir / "cli.json").read_text())["toggles"] == {}


def test_vela_config_falls_back_when_cli_fails(app_config: AppConfig, monkeypatch: pytest.MonkeyPatch) -> None:
    ctx = make_context(app_config)
    with_tools(ctx, "vela")
    monkeypatch.setattr(ctx, "run_step", StepRecorder(result=False))
    shell_json = app_config.paths.get_vela_config_dir() / "shell.json"
    shell_json.parent.mkdir(parents=True)
    shell_json.write_text('{"scheme": {"primary": "#000000"}}')

    install_vela_config(ctx)

    assert json.loads(shell_json.read_text())["scheme"]["surfaceTint"] == "#ff3e00"


def test_apply_themes_only_when_scheme_missing(app_config: AppConfig, monkeypatch: pytest.MonkeyPatch) -> None:
    ctx = make_context(app_config)
    with_tools(ctx, "vela")
    steps = StepRecorder()
    monkeypatch.setattr(ctx, "run_step", steps)

    apply_themes(ctx)
    shell_json = app_config.paths.get_vela_config_dir() / "shell.json"
    shell_json.parent.mkdir(parents=True)
    shell_json.write_text("{}")
    apply_themes(ctx)

    assert len(steps.steps) == 1
    assert messages(ctx, "info") == ["Themes refreshed.", "Themes refreshed."]


def test_project_detection(app_config: AppConfig, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    ctx = make_context(app_config, [f"  {tmp_path}  "])
    with_tools(ctx, "vela")
    steps = StepRecorder()
    monkeypatch.setattr(ctx, "run_step", steps)

    detect_project_languages(ctx)

    assert [args for _, args, _ in steps.steps] == [("vela", "editor", "detect", "-p", str(tmp_path))]


@pytest.mark.parametrize("answer", [None, "", "   "])
def test_project_detection_skipped_on_blank(
    app_config: AppConfig, monkeypatch: pytest.MonkeyPatch, answer: str | None
) -> None:
    ctx = make_context(app_config, [answer])
    with_tools(ctx, "vela")
    steps = StepRecorder()
    monkeypatch.setattr(ctx, "run_step", steps)

    detect_project_languages(ctx)

    assert steps.steps == []


def test_project_detection_rejects_non_directory(app_config: AppConfig, tmp_path: Path) -> None:
    ctx = make_context(app_config, [str(tmp_path / "nope")])

    detect_project_languages(ctx)

    assert messages(ctx, "warn") == [f"{tmp_path / 'nope'} is not a directory; skipping detection"]


@requires_git
def test_cli_rebuild_cleans_only_after_new_commits(
    app_config: AppConfig, make_remote: Callable[..., RemoteRepo], monkeypatch: pytest.MonkeyPatch
) -> None:
    remote = make_remote("cli", {"Cargo.toml": "[package]\nname = \"vela\"\n"})
    add_source(app_config, "cli", remote.url)
    ctx = make_context(app_config)
    with_tools(ctx, "cargo")

    def operations() -> list[Operation]:
        steps = StepRecorder()
        monkeypatch.setattr(ctx, "run_step", steps)
        install_cli(ctx)
        return [op for op, _, _ in steps.steps]

    assert operations() == [Operation.CARGO_CLEAN, Operation.CARGO_BUILD]
    assert operations() == [Operation.CARGO_BUILD]

    remote.push({"src/main.rs": "fn main() {}\n"})
    assert operations() == [Operation.CARGO_CLEAN, Operation.CARGO_BUILD]
    assert "CLI built." in messages(ctx, "info")
