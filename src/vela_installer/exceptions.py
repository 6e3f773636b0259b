"""Centralized exception hierarchy for the Vela installer.

Every error carries a dotted ``code`` used both for the English message shown
to the user and as the ``event`` field in the structured log.
"""

MESSAGES: dict[str, str] = {
    "prerequisite.missing": "Required tool '{tool}' is not available and could not be installed: {error}",
    "sync.clone_failed": "Cloning '{name}' from {url} failed: {error}",
    "deploy.source_missing": "Deploy source does not exist: {source}",
    "deploy.dest_unwritable": "Cannot write deploy destination {dest}: {error}",
    "toolchain.install_failed": "Installing {toolchain} failed: {error}",
    "packages.install_failed": "Installing package(s) {packages} failed",
    "config.invalid": "Invalid configuration: {error}",
    "config.unmapped_module": "Module '{module}' has no installer registered",
    "config.unknown_repository": "Repository '{name}' is not configured",
    "step.failed": "{operation} failed: {command}: {error}",
}


class InstallerError(Exception):
    """Base exception for all installer errors."""

    def __init__(self, code: str, retriable: bool = False, **params: object) -> None:
        """
        Initialize the error.

        Args:
            code: Dotted message code (e.g., 'sync.clone_failed')
            retriable: Whether re-running the installer may succeed
            **params: Parameters for message formatting
        """
        super().__init__(code)
        self.code = code
        self.retriable = retriable
        self.params = params

    def __str__(self) -> str:
        template = MESSAGES.get(self.code)
        if template:
            try:
                return template.format(**self.params)
            except KeyError:
                pass
        params_str = ", ".join(f"{k}={v}" for k, v in self.params.items())
        return f"[{self.code}] {params_str} (retriable: {self.retriable})"


class PrerequisiteMissingError(InstallerError):
    """Raised when the AUR helper, prompt tool or git cannot be provided."""

    def __init__(self, tool: str, error: object = "not found") -> None:
        super().__init__("prerequisite.missing", tool=tool, error=error)


class CloneFailedError(InstallerError):
    """Raised when the initial clone of a managed repository fails."""

    def __init__(self, name: str, url: str, error: object) -> None:
        super().__init__("sync.clone_failed", retriable=True, name=name, url=url, error=error)


class DeploySourceMissingError(InstallerError):
    """Raised when the content to deploy does not exist."""

    def __init__(self, source: object) -> None:
        super().__init__("deploy.source_missing", source=source)


class DeployDestUnwritableError(InstallerError):
    """Raised when the destination (or its parent) cannot be created or replaced."""

    def __init__(self, dest: object, error: object) -> None:
        super().__init__("deploy.dest_unwritable", dest=dest, error=error)


class ToolchainInstallFailedError(InstallerError):
    """Raised when a language toolchain or editor extension cannot be installed."""

    def __init__(self, toolchain: str, error: object) -> None:
        super().__init__("toolchain.install_failed", retriable=True, toolchain=toolchain, error=error)


class PackageInstallError(InstallerError):
    """Raised when the package helper cannot install the requested packages."""

    def __init__(self, packages: list[str] | tuple[str, ...]) -> None:
        super().__init__("packages.install_failed", retriable=True, packages=" ".join(packages))


class ConfigurationError(InstallerError):
    """Raised when configuration or the module dispatch table is invalid."""

    def __init__(self, code: str = "config.invalid", **params: object) -> None:
        super().__init__(code, **params)


class StepFailedError(InstallerError):
    """Raised when a command whose failure policy is FATAL exits non-zero."""

    def __init__(self, operation: str, command: str, error: object) -> None:
        super().__init__("step.failed", operation=operation, command=command, error=error)
