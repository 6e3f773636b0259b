"""Shared collaborators handed to every module installer."""

import os
import shutil
import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from vela_installer.exceptions import CloneFailedError, StepFailedError
from vela_installer.logger import get_logger
from vela_installer.models.app_config import AppConfig, ToolsConfig
from vela_installer.models.policy import Operation, Policy, policy_for
from vela_installer.models.repository import SyncOutcome
from vela_installer.services.deploy import ConfigDeployer
from vela_installer.services.git import GitService
from vela_installer.services.prompts import Prompter
from vela_installer.services.system import PackageHelper
from vela_installer.utils.subprocess_executor import SubprocessExecutor

logger = get_logger(__name__)

WhichFunc = Callable[..., str | None]


@dataclass
class InstallContext:
    """Everything an installer needs; there is no other shared state.

    ``env`` is the environment passed to every command, so toolchain PATH
    entries added by one installer are visible to the ones that follow.
    """

    config: AppConfig
    prompter: Prompter
    git: GitService
    deployer: ConfigDeployer
    packages: PackageHelper
    env: dict[str, str] = field(default_factory=lambda: dict(os.environ))
    which: WhichFunc = shutil.which

    @classmethod
    def create(cls, config: AppConfig, prompter: Prompter) -> "InstallContext":
        return cls(
            config=config,
            prompter=prompter,
            git=GitService(config),
            deployer=ConfigDeployer(config),
            packages=PackageHelper(config),
        )

    @property
    def tools(self) -> ToolsConfig:
        return self.config.tools

    def has(self, command: str) -> bool:
        """Whether ``command`` is on the PATH of the installer environment."""
        return self.which(command, path=self.env.get("PATH")) is not None

    def prepend_path(self, directory: Path) -> None:
        entries = self.env.get("PATH", "").split(os.pathsep)
        if str(directory) not in entries:
            self.env["PATH"] = os.pathsep.join([str(directory), *[e for e in entries if e]])

    def repo_path(self, repo_id: str) -> Path:
        return self.config.paths.get_repo_path(repo_id)

    def sync(self, *repo_ids: str) -> list[SyncOutcome]:
        """Sync repositories in order; a failed clone does not stop the others.

        Raises:
            CloneFailedError: The first clone failure, after all repositories were attempted
        """
        outcomes: list[SyncOutcome] = []
        failures: list[CloneFailedError] = []
        for repo_id in repo_ids:
            try:
                outcome = self.git.sync_repository(repo_id)
            except CloneFailedError as e:
                logger.error("Clone failed", repo=repo_id, error=str(e))
                self.prompter.warn(str(e))
                failures.append(e)
                continue
            for warning in outcome.warnings:
                self.prompter.warn(f"{repo_id}: {warning.operation} failed, continuing with local copy")
            if outcome.preserved_local:
                self.prompter.info(f"Kept local changes in {outcome.path}")
            outcomes.append(outcome)
        if failures:
            raise failures[0]
        return outcomes

    def run_step(
        self,
        operation: Operation,
        *args: str,
        cwd: Path | None = None,
        streaming: bool = False,
        notice: str | None = None,
    ) -> bool:
        """Run a command under the failure policy of ``operation``.

        Returns:
            True if the command succeeded

        Raises:
            StepFailedError: If it failed and the policy is FATAL
        """
        cmd_str = " ".join(args)
        try:
            if streaming:
                SubprocessExecutor.run_streaming(*args, cwd=cwd, env=self.env)
                return True
            result = SubprocessExecutor.run_sync(*args, cwd=cwd, env=self.env)
            if result.returncode == 0:
                return True
            detail = result.stderr.decode("utf-8", errors="replace").strip() or f"exit code {result.returncode}"
        except subprocess.CalledProcessError as e:
            detail = f"exit code {e.returncode}"
        except OSError as e:
            detail = str(e)

        policy = policy_for(operation)
        if policy is Policy.FATAL:
            raise StepFailedError(operation.value, cmd_str, detail)
        if policy is Policy.WARN:
            logger.warning("Step failed", operation=operation.value, command=cmd_str, error=detail)
            self.prompter.warn(notice or f"{cmd_str} failed ({detail.splitlines()[-1] if detail else 'error'})")
        else:
            logger.debug("Step failed", operation=operation.value, command=cmd_str, error=detail)
        return False
