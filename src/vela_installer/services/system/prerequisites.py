"""Ensures the AUR helper, the prompt tool and git exist before anything runs."""

import subprocess

from vela_installer.exceptions import PackageInstallError, PrerequisiteMissingError
from vela_installer.logger import get_logger
from vela_installer.models.app_config import AppConfig
from vela_installer.utils.subprocess_executor import SubprocessExecutor
from vela_installer.utils.system import command_exists, temporary_directory

from .packages import PackageHelper

logger = get_logger(__name__)


class PrerequisiteResolver:
    def __init__(self, config: AppConfig, packages: PackageHelper | None = None) -> None:
        self.config = config
        self.tools = config.tools
        self.packages = packages or PackageHelper(config)

    def ensure_all(self) -> None:
        """Resolve the prompt tool and git (each pulls in the AUR helper on demand).

        Raises:
            PrerequisiteMissingError: If any prerequisite cannot be provided
        """
        self.ensure_prompt_tool()
        self.ensure_git()

    def ensure_aur_helper(self) -> None:
        if command_exists(self.tools.aur_helper):
            return

        logger.info("Bootstrapping AUR helper", helper=self.tools.aur_helper, url=self.tools.aur_helper_package_url)
        if not command_exists(self.tools.git):
            raise PrerequisiteMissingError(self.tools.aur_helper, f"'{self.tools.git}' is required to fetch it")

        with temporary_directory(prefix="vela-aur.") as tmp:
            package_dir = tmp / "helper"
            try:
                SubprocessExecutor.run_streaming(
                    self.tools.git, "clone", self.tools.aur_helper_package_url, str(package_dir)
                )
                result = SubprocessExecutor.run_attached("makepkg", "-si", cwd=package_dir)
            except (subprocess.CalledProcessError, OSError) as e:
                raise PrerequisiteMissingError(self.tools.aur_helper, e) from e
            if result.returncode != 0:
                raise PrerequisiteMissingError(self.tools.aur_helper, f"makepkg exited with {result.returncode}")

        if not command_exists(self.tools.aur_helper):
            raise PrerequisiteMissingError(self.tools.aur_helper, "not on PATH after makepkg")

    def ensure_prompt_tool(self) -> None:
        if command_exists(self.tools.gum):
            return
        self.ensure_aur_helper()
        try:
            self.packages.install_any("gum", "gum-bin")
        except PackageInstallError as e:
            raise PrerequisiteMissingError(self.tools.gum, e) from e

    def ensure_git(self) -> None:
        if command_exists(self.tools.git):
            return
        self.ensure_aur_helper()
        try:
            self.packages.install("git")
        except PackageInstallError as e:
            raise PrerequisiteMissingError(self.tools.git, e) from e
