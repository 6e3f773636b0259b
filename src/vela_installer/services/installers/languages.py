"""Language toolchains and their editor extensions."""

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import httpx

from vela_installer.exceptions import (
    ConfigurationError,
    InstallerError,
    ToolchainInstallFailedError,
)
from vela_installer.logger import get_logger
from vela_installer.models.policy import Operation
from vela_installer.services.deploy import write_text_atomic
from vela_installer.utils.system import temporary_directory

from .context import InstallContext
from .modules import ensure_code

logger = get_logger(__name__)

NVM_INSTALL_URL = "https://raw.githubusercontent.com/nvm-sh/nvm/v0.40.3/install.sh"

RC_NVM_DIR_LINE = 'export NVM_DIR="${XDG_CONFIG_HOME:-$HOME/.nvm}"'
RC_NVM_LOAD_LINE = '[ -s "$NVM_DIR/nvm.sh" ] && . "$NVM_DIR/nvm.sh"  # loads nvm'
RC_CARGO_LINE = 'export PATH="$HOME/.cargo/bin:$PATH"'
# Lines from older setups that conflict with the managed NVM block
RC_LEGACY_PATTERNS = (
    re.compile(r"/usr/share/nvm/init-nvm\.sh"),
    re.compile(r'export NVM_DIR="\$HOME/\.nvm"'),
)
RC_NVM_PRESENT = re.compile(r"NVM_DIR=.*(XDG_CONFIG_HOME|\.nvm)")

ESLINT = "dbaeumer.vscode-eslint"
PRETTIER = "esbenp.prettier-vscode"


class LanguageKind(str, Enum):
    SVELTE = "Svelte"
    PYTHON = "Python"
    LUA = "Lua"
    RUST = "Rust"
    ASTRO = "Astro"
    TYPESCRIPT = "TypeScript"
    JAVASCRIPT = "JavaScript"
    TAILWIND = "TailwindCSS"
    NVM_ONLY = "Install NVM + Node LTS only"


@dataclass(frozen=True)
class ToolchainSpec:
    """What installing one language means.

    ``extensions`` holds groups of alternatives; the first id in a group that
    installs successfully satisfies it.
    """

    packages: tuple[str, ...] = ()
    replaces: tuple[str, ...] = ()
    needs_node: bool = False
    setup_commands: tuple[tuple[str, ...], ...] = ()
    extensions: tuple[tuple[str, ...], ...] = ()
    refresh_shell: bool = False


TOOLCHAINS: dict[LanguageKind, ToolchainSpec] = {
    LanguageKind.SVELTE: ToolchainSpec(
        needs_node=True, extensions=(("svelte.svelte-vscode",), (ESLINT,), (PRETTIER,))
    ),
    LanguageKind.PYTHON: ToolchainSpec(
        packages=("python", "python-pip", "python-virtualenv"),
        extensions=(("ms-python.python",), ("ms-python.vscode-pylance",), ("ms-toolsai.jupyter",)),
    ),
    LanguageKind.LUA: ToolchainSpec(packages=("lua", "luarocks"), extensions=(("sumneko.lua", "luals.lua"),)),
    LanguageKind.RUST: ToolchainSpec(
        packages=("rustup",),
        replaces=("rust",),
        setup_commands=(("rustup", "default", "stable"),),
        extensions=(("rust-lang.rust-analyzer",), ("serayuzgur.crates",), ("vadimcn.vscode-lldb",)),
        refresh_shell=True,
    ),
    LanguageKind.ASTRO: ToolchainSpec(needs_node=True, extensions=(("astro-build.astro-vscode",), (PRETTIER,))),
    LanguageKind.TYPESCRIPT: ToolchainSpec(needs_node=True, extensions=((ESLINT,), (PRETTIER,))),
    LanguageKind.JAVASCRIPT: ToolchainSpec(needs_node=True, extensions=((ESLINT,), (PRETTIER,))),
    LanguageKind.TAILWIND: ToolchainSpec(
        needs_node=True, extensions=(("bradlc.vscode-tailwindcss",), (PRETTIER,))
    ),
    LanguageKind.NVM_ONLY: ToolchainSpec(needs_node=True),
}


def nvm_dir(ctx: InstallContext) -> Path:
    """Where the NVM installer puts nvm.sh."""
    if existing := ctx.env.get("NVM_DIR"):
        return Path(existing).expanduser()
    if xdg := ctx.env.get("XDG_CONFIG_HOME"):
        return Path(xdg).expanduser() / "nvm"
    return ctx.config.paths.home_dir / ".nvm"


def download_nvm_installer(ctx: InstallContext, dest: Path) -> bool:
    try:
        response = httpx.get(NVM_INSTALL_URL, follow_redirects=True, timeout=ctx.config.advanced.network_timeout)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning("NVM installer download failed", url=NVM_INSTALL_URL, error=str(e))
        ctx.prompter.warn("Failed to download nvm installer; check your network and try again.")
        return False
    dest.write_bytes(response.content)
    return True


def install_nvm_and_lts(ctx: InstallContext) -> None:
    ctx.prompter.title("Installing NVM + Node LTS")
    directory = nvm_dir(ctx)
    nvm_sh = directory / "nvm.sh"

    if not nvm_sh.is_file():
        with temporary_directory(prefix="vela-nvm.") as tmp:
            script = tmp / "install.sh"
            if download_nvm_installer(ctx, script):
                ctx.run_step(Operation.NVM_COMMAND, "bash", str(script))

    ctx.env["NVM_DIR"] = str(directory)
    if nvm_sh.is_file():
        # nvm is a shell function, so every call sources it first
        for command in ("nvm install --lts", "nvm use --lts"):
            ctx.run_step(Operation.NVM_COMMAND, "bash", "-c", f'. "$NVM_DIR/nvm.sh" && {command}')
    else:
        ctx.prompter.info(
            "nvm not found in this shell. After install, open a new shell or 'source ~/.zshrc', "
            "then run: nvm install --lts"
        )
    configure_shell_refresh(ctx)


def refresh_rc_text(text: str) -> str:
    """Return rc content with legacy NVM lines dropped and the NVM/cargo lines present once."""
    lines = [line for line in text.splitlines() if not any(p.search(line) for p in RC_LEGACY_PATTERNS)]
    result = "\n".join(lines)
    if lines:
        result += "\n"
    if not RC_NVM_PRESENT.search(result):
        result += f"\n{RC_NVM_DIR_LINE}\n{RC_NVM_LOAD_LINE}\n"
    if "cargo/bin" not in result:
        result += f"\n{RC_CARGO_LINE}\n"
    return result


def configure_shell_refresh(ctx: InstallContext) -> None:
    ctx.prompter.title("Configuring shell refresh")
    home = ctx.config.paths.home_dir
    ctx.prepend_path(home / ".cargo" / "bin")

    for rc in (home / ".zshrc",):
        if not rc.is_file():
            continue
        try:
            original = rc.read_text(encoding="utf-8", errors="surrogateescape")
            updated = refresh_rc_text(original)
            if updated != original:
                write_text_atomic(rc, updated, errors="surrogateescape")
        except OSError as e:
            logger.warning("Shell rc update failed", path=str(rc), error=str(e))
            ctx.prompter.warn(f"Could not update {rc}: {e}")
    ctx.prompter.info("Ensured zshrc sets NVM_DIR and loads nvm; added Cargo PATH.")


def install_code_extension_id(ctx: InstallContext, *alternatives: str) -> bool:
    """Install the first editor extension that succeeds, reinstalling from scratch."""
    ensure_code(ctx)
    code = ctx.tools.code
    for ext in alternatives:
        ctx.run_step(Operation.EXTENSION_UNINSTALL, code, "--uninstall-extension", ext)
        if ctx.run_step(Operation.EXTENSION_INSTALL, code, "--install-extension", ext, "--force"):
            return True
    return False


def install_language(ctx: InstallContext, kind: LanguageKind) -> None:
    """Install one language toolchain.

    Raises:
        ToolchainInstallFailedError: If its packages or the editor cannot be installed
    """
    spec = TOOLCHAINS[kind]
    ctx.prompter.title(f"Installing {kind.value}")
    try:
        for package in spec.replaces:
            ctx.packages.remove(package)
        if spec.packages:
            ctx.packages.install(*spec.packages)
        if spec.needs_node:
            install_nvm_and_lts(ctx)
        for command in spec.setup_commands:
            ctx.run_step(Operation.TOOLCHAIN_SETUP, *command)
        failed = [group[0] for group in spec.extensions if not install_code_extension_id(ctx, *group)]
        if spec.refresh_shell:
            configure_shell_refresh(ctx)
    except ToolchainInstallFailedError:
        raise
    except (InstallerError, OSError) as e:
        raise ToolchainInstallFailedError(kind.value, e) from e

    if failed:
        logger.warning("Some extensions were not installed", language=kind.value, extensions=failed)
    ctx.prompter.info(f"{kind.value} ready.")


LanguageHandler = Callable[[InstallContext, LanguageKind], None]


def validate_toolchains() -> None:
    for kind in LanguageKind:
        if kind not in TOOLCHAINS:
            raise ConfigurationError("config.unmapped_module", module=kind.value)

