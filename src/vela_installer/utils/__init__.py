"""Utilities for the Vela installer."""

from vela_installer.utils.paths import get_resources_dir
from vela_installer.utils.subprocess_executor import SubprocessExecutor
from vela_installer.utils.system import command_exists, temporary_directory

__all__ = ["SubprocessExecutor", "command_exists", "get_resources_dir", "temporary_directory"]
