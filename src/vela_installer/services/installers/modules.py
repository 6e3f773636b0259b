"""Module installers: sync sources, build, deploy and register.

Each installer takes an InstallContext and is safe to run repeatedly.
"""

import json
from collections.abc import Callable
from enum import Enum
from pathlib import Path

from vela_installer.exceptions import ConfigurationError, DeploySourceMissingError
from vela_installer.logger import get_logger
from vela_installer.models.deploy import DeployMode
from vela_installer.models.palette import PaletteOverride
from vela_installer.models.policy import Operation
from vela_installer.services.deploy import write_palette_override, write_text_atomic

from .context import InstallContext

logger = get_logger(__name__)

DEFAULT_SHELL_SCHEME = {
    "scheme": {
        "primary": "#ff3e00",
        "secondary": "#312e81",
        "surfaceTint": "#ff3e00",
    }
}

DEFAULT_CLI_SETTINGS = {
    "theme": {
        "enableTerm": True,
        "enableHypr": True,
        "enableDiscord": False,
        "enableSpicetify": False,
        "enableFuzzel": True,
        "enableBtop": True,
        "enableGtk": True,
        "enableQt": True,
    },
    "toggles": {},
}

# First match on PATH wins
DESIGN_APP_PALETTES: dict[str, tuple[str, str, str]] = {
    "figma-linux": ("ff7262", "1e1e1e", "2f80ed"),
    "inkscape": ("0a84ff", "1e8b60", "7e57c2"),
    "gimp": ("5a9ece", "8e44ad", "e67e22"),
    "krita": ("3daee9", "d08770", "a3be8c"),
    "blender": ("f5792a", "5e81ac", "81a1c1"),
}
DEFAULT_PALETTE = ("ff3e00", "312e81", "1f2937")

TEMPLATES = "cli/src/vela/data/templates"

# Menu label -> (source relative to root_dir, destination relative to config_root)
SYMLINK_TARGETS: dict[str, tuple[str, str] | None] = {
    "Hypr -> ~/.config/hypr": ("shell/config/hypr", "hypr"),
    "Fuzzel -> ~/.config/fuzzel": (f"{TEMPLATES}/fuzzel.ini", "fuzzel/fuzzel.ini"),
    "Btop -> ~/.config/btop": (f"{TEMPLATES}/btop.theme", "btop/themes/vela.theme"),
    "Helix -> ~/.config/helix": (f"{TEMPLATES}/helix.toml", "helix/themes/vela.toml"),
    "VS Code theme": None,
}


class ModuleKind(str, Enum):
    CORE = "core"
    CLI = "cli"
    SHELL = "shell"
    VELA_CONFIG = "vela_config"
    CODE_EXTENSION = "code_extension"
    SETTINGS_APP = "settings_app"
    SYMLINKS = "symlinks"
    THEMES = "themes"
    PALETTE_OVERRIDE = "palette_override"
    PROJECT_DETECT = "project_detect"

    @property
    def label(self) -> str:
        return MODULE_LABELS[self]


MODULE_LABELS: dict[ModuleKind, str] = {
    ModuleKind.CORE: "Install Core",
    ModuleKind.CLI: "Install CLI",
    ModuleKind.SHELL: "Install Shell",
    ModuleKind.VELA_CONFIG: "Install Vela Config",
    ModuleKind.CODE_EXTENSION: "Install Code Extension",
    ModuleKind.SETTINGS_APP: "Install Settings App",
    ModuleKind.SYMLINKS: "Setup Config Symlinks",
    ModuleKind.THEMES: "Apply Themes",
    ModuleKind.PALETTE_OVERRIDE: "Write Designer Palette",
    ModuleKind.PROJECT_DETECT: "Detect Project Languages",
}


def shell_config_dest(ctx: InstallContext) -> Path:
    return ctx.config.paths.config_root / "quickshell" / "vela"


def install_core(ctx: InstallContext) -> None:
    ctx.prompter.title("Installing Core")
    ctx.sync("shell", "cli")
    ctx.prompter.info(f"Core synced into {ctx.config.paths.root_dir}")


def cargo_build(ctx: InstallContext, repo_dir: Path, target: str, clean: bool = True) -> bool:
    """Release-build a Rust project in repo_dir (or its cli/ subdirectory).

    ``cargo clean`` runs first unless ``clean`` is False.

    Returns:
        True if a build ran and succeeded
    """
    cargo = ctx.tools.cargo
    if not ctx.has(cargo):
        ctx.prompter.info(f"{cargo} not found; skipping {target} build (install a Rust toolchain first)")
        return False

    if (repo_dir / "Cargo.toml").is_file():
        manifest: list[str] = []
    elif (repo_dir / "cli" / "Cargo.toml").is_file():
        manifest = ["--manifest-path", "cli/Cargo.toml"]
    else:
        ctx.prompter.info(f"No Cargo.toml in {repo_dir}; skipping {target} build")
        return False

    if clean:
        ctx.run_step(Operation.CARGO_CLEAN, cargo, "clean", *manifest, cwd=repo_dir)
    return ctx.run_step(
        Operation.CARGO_BUILD,
        cargo,
        "build",
        "--release",
        *manifest,
        cwd=repo_dir,
        streaming=True,
        notice=f"{target} build failed; see the installer log",
    )


def install_cli(ctx: InstallContext) -> None:
    ctx.prompter.title("Installing CLI")
    (outcome,) = ctx.sync("cli")
    if cargo_build(ctx, outcome.path, "CLI", clean=outcome.commit_changed):
        ctx.prompter.info("CLI built.")


def install_shell(ctx: InstallContext) -> None:
    ctx.prompter.title("Installing Shell")
    (outcome,) = ctx.sync("shell")
    mode = ctx.config.deploy.shell_mode
    ctx.deployer.deploy(outcome.path, shell_config_dest(ctx), mode)
    verb = "linked to repo" if mode is DeployMode.LINK else "copied from repo"
    ctx.prompter.info(f"Shell synced and QuickShell config refreshed ({verb}).")


def install_vela_config(ctx: InstallContext) -> None:
    ctx.prompter.title("Installing Vela config")
    config_dir = ctx.config.paths.get_vela_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)

    vela = ctx.tools.vela
    written_by_cli = ctx.has(vela) and ctx.run_step(Operation.VELA_CLI, vela, "colors", "write-defaults")
    if not written_by_cli:
        write_text_atomic(config_dir / "shell.json", json.dumps(DEFAULT_SHELL_SCHEME, indent=2) + "\n")
    write_text_atomic(config_dir / "cli.json", json.dumps(DEFAULT_CLI_SETTINGS, indent=2) + "\n")
    ctx.prompter.info(f"Installed {config_dir}/{{shell.json,cli.json}}.")


def ensure_code(ctx: InstallContext) -> None:
    if not ctx.has(ctx.tools.code):
        ctx.packages.install_any("code", "code-bin")


def install_code_extension(ctx: InstallContext) -> None:
    ctx.prompter.title("Installing Code + extension")
    ensure_code(ctx)
    (outcome,) = ctx.sync("codium")
    ctx.prompter.info(f"Open {outcome.path} in VS Code to build/install extension.")


def install_settings_app(ctx: InstallContext) -> None:
    ctx.prompter.title("Installing Settings app")
    (outcome,) = ctx.sync("settings")
    if cargo_build(ctx, outcome.path, "Settings app", clean=outcome.commit_changed):
        ctx.prompter.info("Settings app built.")


def setup_symlinks(ctx: InstallContext) -> None:
    ctx.prompter.title("Set up config symlinks")
    ctx.deployer.purge_legacy()

    picks = ctx.prompter.choose_many(list(SYMLINK_TARGETS))
    if picks is None:
        ctx.prompter.info("Symlink setup skipped.")
        return

    root = ctx.config.paths.root_dir
    config_root = ctx.config.paths.config_root
    for pick in picks:
        target = SYMLINK_TARGETS[pick]
        if target is None:
            ctx.prompter.info("Run: vela colors write-defaults (VS Code theme generation handled separately)")
            continue
        source, dest = target
        try:
            ctx.deployer.deploy(root / source, config_root / dest, DeployMode.LINK, purge=False)
        except DeploySourceMissingError as e:
            # Only this link is skipped
            logger.warning("Symlink source missing", choice=pick, error=str(e))
            ctx.prompter.warn(f"{pick}: {e}")


def apply_themes(ctx: InstallContext) -> None:
    ctx.prompter.title("Apply themes")
    vela = ctx.tools.vela
    shell_json = ctx.config.paths.get_vela_config_dir() / "shell.json"
    if ctx.has(vela) and not shell_json.exists():
        ctx.run_step(Operation.VELA_CLI, vela, "colors", "write-defaults")
    ctx.prompter.info("Themes refreshed.")


def detect_design_palette(ctx: InstallContext) -> tuple[str | None, tuple[str, str, str]]:
    for app, palette in DESIGN_APP_PALETTES.items():
        if ctx.has(app):
            return app, palette
    return None, DEFAULT_PALETTE


def write_designer_palette(ctx: InstallContext) -> None:
    app, (primary, secondary, tertiary) = detect_design_palette(ctx)
    path = write_palette_override(ctx.config, PaletteOverride.from_triple(primary, secondary, tertiary))
    logger.info("Designer palette selected", app=app or "default", path=str(path))
    ctx.prompter.info("Designer preset wrote palette override; toggle accents in tray to enable.")


def detect_project_languages(ctx: InstallContext) -> None:
    ctx.prompter.title("Optional: detect project languages")
    answer = ctx.prompter.text_input("Project path (blank skip)")
    if not answer or not answer.strip():
        return
    project = Path(answer.strip()).expanduser()
    if not project.is_dir():
        ctx.prompter.warn(f"{project} is not a directory; skipping detection")
        return
    if not ctx.has(ctx.tools.vela):
        ctx.prompter.info("vela CLI not found; skipping detection")
        return
    ctx.run_step(Operation.VELA_CLI, ctx.tools.vela, "editor", "detect", "-p", str(project))


ModuleHandler = Callable[[InstallContext], None]

MODULE_HANDLERS: dict[ModuleKind, ModuleHandler] = {
    ModuleKind.CORE: install_core,
    ModuleKind.CLI: install_cli,
    ModuleKind.SHELL: install_shell,
    ModuleKind.VELA_CONFIG: install_vela_config,
    ModuleKind.CODE_EXTENSION: install_code_extension,
    ModuleKind.SETTINGS_APP: install_settings_app,
    ModuleKind.SYMLINKS: setup_symlinks,
    ModuleKind.THEMES: apply_themes,
    ModuleKind.PALETTE_OVERRIDE: write_designer_palette,
    ModuleKind.PROJECT_DETECT: detect_project_languages,
}


def validate_module_handlers(handlers: dict[ModuleKind, ModuleHandler]) -> None:
    """Every ModuleKind must have a handler and a menu label.

    Raises:
        ConfigurationError: On the first unmapped module
    """
    for kind in ModuleKind:
        if kind not in handlers or kind not in MODULE_LABELS:
            raise ConfigurationError("config.unmapped_module", module=kind.value)
