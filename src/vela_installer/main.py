import argparse
import sys
from pathlib import Path

from vela_installer import __version__
from vela_installer.config import load_config
from vela_installer.exceptions import ConfigurationError, PrerequisiteMissingError
from vela_installer.logger import configure_logging, configure_startup_logging, get_logger
from vela_installer.models.dispatch import Preset
from vela_installer.services.dispatch import Dispatcher
from vela_installer.services.installers import InstallContext
from vela_installer.services.prompts import GumPrompter
from vela_installer.services.system import PrerequisiteResolver

logger = get_logger(__name__)

# Any of these runs the Everything preset without the preset menu
RUN_ALL_TOKENS = frozenset({"--all", "-a", "everything", "Everything"})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vela-installer",
        description="Vela Installer - presets, dotfiles and language tooling",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  vela-installer               # Pick a preset interactively
  vela-installer --all         # Install everything, then ask about languages
  vela-installer everything    # Same as --all
        """,
    )
    parser.add_argument("token", nargs="?", help="'everything' (or --all / -a) to skip the preset menu")
    parser.add_argument("--config", type=Path, metavar="PATH", help="Installer config file (YAML)")
    parser.add_argument("--version", action="version", version=f"Vela Installer {__version__}")
    return parser


def wants_everything(token: str | None, extra: list[str]) -> bool:
    return any(t in RUN_ALL_TOKENS for t in [token, *extra] if t)


def main(argv: list[str] | None = None) -> int:
    """Main entry point with CLI argument parsing."""
    parser = build_parser()
    # Unrecognized arguments fall through to the interactive menu
    args, extra = parser.parse_known_args(argv)

    configure_startup_logging()
    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"[!] {e}", file=sys.stderr)
        return 1

    log_file = configure_logging(config)
    logger.info("Installer started", version=__version__, argv=argv if argv is not None else sys.argv[1:])
    logger.debug("Configuration loaded", repositories=[s.id for s in config.repositories.sources])
    config.paths.root_dir.mkdir(parents=True, exist_ok=True)

    try:
        PrerequisiteResolver(config).ensure_all()
    except PrerequisiteMissingError as e:
        logger.error("Prerequisite missing", error=str(e))
        print(f"[!] {e}", file=sys.stderr)
        return 1

    ctx = InstallContext.create(config, GumPrompter(config.tools.gum))
    try:
        dispatcher = Dispatcher(ctx)
        dispatcher.run(Preset.EVERYTHING if wants_everything(args.token, extra) else None)
    except ConfigurationError as e:
        logger.error("Invalid dispatch table", error=str(e))
        print(f"[!] {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130

    if log_file:
        logger.debug("Log written", path=str(log_file))
    return 0


def main_entry() -> None:
    sys.exit(main())
