"""Git repository synchronization service."""

import os
import subprocess
from collections.abc import Callable
from pathlib import Path

from vela_installer.exceptions import CloneFailedError, ConfigurationError
from vela_installer.logger import get_logger
from vela_installer.models.app_config import AppConfig
from vela_installer.models.policy import Operation, Policy, policy_for
from vela_installer.models.repository import RepositorySource, SyncAction, SyncOutcome, SyncWarning
from vela_installer.utils.subprocess_executor import SubprocessExecutor

logger = get_logger(__name__)

FALLBACK_BRANCH = "main"
REMOTE = "origin"


class GitService:
    """Brings managed working copies under the root directory to a known state.

    A missing working copy is cloned (with submodules). An existing one is
    fetched and then hard-reset to the remote default branch and cleaned, unless
    it is flagged to preserve local changes and has uncommitted edits.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.git_exec = config.tools.git
        # Never block on a credential prompt; a failing fetch is tolerated anyway
        self._env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}

    def resolve_source(self, repo_id: str) -> RepositorySource:
        source = self.config.repositories.get(repo_id)
        if source is None:
            raise ConfigurationError("config.unknown_repository", name=repo_id)
        return source

    def sync_repository(
        self, repo_id: str, progress_callback: Callable[[str], None] | None = None
    ) -> SyncOutcome:
        """Sync a repository declared in the configuration by its id."""
        source = self.resolve_source(repo_id)
        return self.sync(source.id, source.url, source.preserve_local_changes, progress_callback)

    def sync(
        self,
        name: str,
        remote_url: str,
        preserve_local_changes: bool = False,
        progress_callback: Callable[[str], None] | None = None,
    ) -> SyncOutcome:
        """
        Clone the repository or reconcile an existing working copy with its remote.

        Args:
            name: Repository name; the working copy lives at <root_dir>/<name>
            remote_url: Remote URL used for the initial clone
            preserve_local_changes: Keep uncommitted edits instead of resetting
            progress_callback: Receives clone output lines

        Returns:
            Outcome describing what was done and where the working copy landed

        Raises:
            CloneFailedError: If there is no working copy and cloning fails
        """
        repo_dir = self.config.paths.get_repo_path(name)

        if not self.is_repository(repo_dir):
            logger.info("Cloning repository", name=name, url=remote_url, path=str(repo_dir))
            self._clone(name, remote_url, repo_dir, progress_callback)
            return SyncOutcome(
                name=name,
                path=repo_dir,
                action=SyncAction.CLONED,
                branch=self.query_current_branch(repo_dir),
                commit_hash=self.get_commit_hash(repo_dir),
            )

        logger.info("Updating repository", name=name, path=str(repo_dir))
        warnings: list[SyncWarning] = []
        previous_commit = self.get_commit_hash(repo_dir)

        # Remote-tracking refs are refreshed even when local edits are preserved
        self._git(Operation.FETCH, repo_dir, warnings, "fetch", "--all", "--prune", "--tags")

        if preserve_local_changes and self.query_dirty(repo_dir):
            logger.info("Preserving local changes", name=name)
            return SyncOutcome(
                name=name,
                path=repo_dir,
                action=SyncAction.PRESERVED_LOCAL,
                branch=self.query_current_branch(repo_dir),
                commit_hash=self.get_commit_hash(repo_dir),
                previous_commit=previous_commit,
                warnings=warnings,
            )

        branch = self._reset_to_default_branch(repo_dir, warnings)
        self._git(Operation.CLEAN, repo_dir, warnings, "clean", "-fdx")
        self._git(Operation.SUBMODULE_UPDATE, repo_dir, warnings, "submodule", "update", "--init", "--recursive")

        return SyncOutcome(
            name=name,
            path=repo_dir,
            action=SyncAction.UPDATED,
            branch=branch,
            commit_hash=self.get_commit_hash(repo_dir),
            previous_commit=previous_commit,
            warnings=warnings,
        )

    def is_repository(self, repo_dir: Path) -> bool:
        return (repo_dir / ".git").exists()

    def query_remote_default_branch(self, repo_dir: Path) -> str | None:
        """Ask the remote which branch its HEAD points to."""
        result = self._git(Operation.QUERY_REMOTE_DEFAULT, repo_dir, None, "remote", "show", REMOTE)
        if result is None:
            return None
        for line in result.stdout.decode("utf-8", errors="replace").splitlines():
            line = line.strip()
            if line.startswith("HEAD branch:"):
                branch = line.split(":", 1)[1].strip()
                # Ambiguous or unreachable remotes report "(unknown)"
                if branch and not branch.startswith("("):
                    return branch
        return None

    def query_current_branch(self, repo_dir: Path) -> str | None:
        result = self._git(Operation.QUERY_CURRENT_BRANCH, repo_dir, None, "symbolic-ref", "--short", "-q", "HEAD")
        if result is None:
            return None
        branch = result.stdout.decode("utf-8", errors="replace").strip()
        return branch or None

    def query_dirty(self, repo_dir: Path) -> bool:
        """Whether the working tree has uncommitted (or untracked) changes.

        An unreadable status counts as dirty so that nothing is discarded.
        """
        try:
            result = SubprocessExecutor.run_sync(self.git_exec, "status", "--porcelain", cwd=repo_dir, env=self._env)
        except OSError as e:
            logger.warning("git status failed", path=str(repo_dir), error=str(e))
            return True
        if result.returncode != 0:
            logger.warning("git status failed", path=str(repo_dir), returncode=result.returncode)
            return True
        return bool(result.stdout.strip())

    def resolve_default_branch(self, repo_dir: Path) -> str:
        """Remote-reported default branch, else the checked-out branch, else 'main'."""
        return self.query_remote_default_branch(repo_dir) or self.query_current_branch(repo_dir) or FALLBACK_BRANCH

    def get_commit_hash(self, repo_dir: Path) -> str | None:
        try:
            result = SubprocessExecutor.run_sync(self.git_exec, "rev-parse", "HEAD", cwd=repo_dir, env=self._env)
        except OSError:
            return None
        if result.returncode != 0:
            return None
        return result.stdout.decode().strip() or None

    def _clone(
        self, name: str, remote_url: str, repo_dir: Path, progress_callback: Callable[[str], None] | None
    ) -> None:
        try:
            repo_dir.parent.mkdir(parents=True, exist_ok=True)
            SubprocessExecutor.run_streaming(
                self.git_exec,
                "clone",
                "--recurse-submodules",
                remote_url,
                str(repo_dir),
                env=self._env,
                progress_callback=progress_callback,
            )
        except subprocess.CalledProcessError as e:
            lines = (e.output or "").strip().splitlines()
            raise CloneFailedError(name, remote_url, lines[-1] if lines else f"exit code {e.returncode}") from e
        except OSError as e:
            raise CloneFailedError(name, remote_url, e) from e

    def _reset_to_default_branch(self, repo_dir: Path, warnings: list[SyncWarning]) -> str | None:
        branch = self.resolve_default_branch(repo_dir)
        if self._git(Operation.RESET, repo_dir, warnings, "reset", "--hard", f"{REMOTE}/{branch}") is not None:
            return branch

        # Last resort: whatever the remote's symbolic HEAD points to
        if self._git(Operation.RESET, repo_dir, warnings, "reset", "--hard", f"{REMOTE}/HEAD") is not None:
            return self.query_current_branch(repo_dir) or "HEAD"
        return None

    def _git(
        self,
        operation: Operation,
        repo_dir: Path,
        warnings: list[SyncWarning] | None,
        *args: str,
    ) -> subprocess.CompletedProcess[bytes] | None:
        """Run a git command in repo_dir and apply the failure policy of ``operation``.

        Returns the completed process on success, None on a tolerated failure.
        """
        error: str
        try:
            result = SubprocessExecutor.run_sync(self.git_exec, *args, cwd=repo_dir, env=self._env)
            if result.returncode == 0:
                return result
            error = result.stderr.decode("utf-8", errors="replace").strip() or f"exit code {result.returncode}"
        except OSError as e:
            error = str(e)

        policy = policy_for(operation)
        if policy is Policy.FATAL:
            raise subprocess.CalledProcessError(1, [self.git_exec, *args], stderr=error)
        if policy is Policy.WARN:
            logger.warning("git operation failed", operation=operation.value, path=str(repo_dir), error=error)
            if warnings is not None:
                warnings.append(SyncWarning(operation=operation.value, detail=error))
        else:
            logger.debug("git query failed", operation=operation.value, path=str(repo_dir), error=error)
        return None
