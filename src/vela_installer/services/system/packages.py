"""System package installation through the AUR helper."""

from vela_installer.exceptions import PackageInstallError
from vela_installer.logger import get_logger
from vela_installer.models.app_config import AppConfig
from vela_installer.utils.subprocess_executor import SubprocessExecutor

logger = get_logger(__name__)


class PackageHelper:
    """Installs and removes packages with the configured AUR helper (aura by default)."""

    def __init__(self, config: AppConfig) -> None:
        self.helper = config.tools.aur_helper

    def install(self, *packages: str) -> None:
        """Install packages, prompting through the helper as it sees fit.

        Raises:
            PackageInstallError: If the helper exits non-zero or is missing
        """
        logger.info("Installing packages", packages=list(packages))
        try:
            result = SubprocessExecutor.run_attached(self.helper, "-S", *packages)
        except OSError as e:
            raise PackageInstallError(packages) from e
        if result.returncode != 0:
            raise PackageInstallError(packages)

    def install_any(self, *alternatives: str) -> str:
        """Install the first alternative that succeeds (e.g. 'gum', then 'gum-bin').

        Returns:
            Name of the package that was installed
        """
        for package in alternatives:
            try:
                self.install(package)
                return package
            except PackageInstallError:
                logger.warning("Package install failed, trying next alternative", package=package)
        raise PackageInstallError(alternatives)

    def remove(self, package: str) -> bool:
        """Remove a package. Failure (e.g. not installed) is not an error."""
        try:
            result = SubprocessExecutor.run_attached(self.helper, "-R", package)
        except OSError as e:
            logger.debug("Package removal failed", package=package, error=str(e))
            return False
        if result.returncode != 0:
            logger.debug("Package removal failed", package=package, returncode=result.returncode)
            return False
        return True
