import os
import shutil
import subprocess
from collections.abc import Callable
from pathlib import Path

import pytest

from vela_installer.models.app_config import AppConfig, PathsConfig
from vela_installer.models.repository import RepositorySource
from vela_installer.services.installers import InstallContext
from vela_installer.services.prompts import ScriptedPrompter

# Local-path submodules are refused by default since git 2.38.1
FILE_PROTOCOL_ENV = {
    "GIT_CONFIG_COUNT": "1",
    "GIT_CONFIG_KEY_0": "protocol.file.allow",
    "GIT_CONFIG_VALUE_0": "always",
}

GIT_ENV = {
    **os.environ,
    "GIT_AUTHOR_NAME": "Vela Test",
    "GIT_AUTHOR_EMAIL": "test@example.com",
    "GIT_COMMITTER_NAME": "Vela Test",
    "GIT_COMMITTER_EMAIL": "test@example.com",
    "GIT_CONFIG_NOSYSTEM": "1",
    **FILE_PROTOCOL_ENV,
}

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def git(*args: str, cwd: Path) -> str:
    result = subprocess.run(["git", *args], cwd=cwd, env=GIT_ENV, check=True, capture_output=True, text=True)
    return result.stdout.strip()


class RemoteRepo:
    """A bare repository plus the working clone used to push new commits into it."""

    def __init__(self, base: Path, name: str, files: dict[str, str], branch: str = "main") -> None:
        self.branch = branch
        self.work = base / f"{name}-work"
        self.bare = base / f"{name}.git"
        self.work.mkdir(parents=True)
        git("init", "-q", cwd=self.work)
        git("symbolic-ref", "HEAD", f"refs/heads/{branch}", cwd=self.work)
        self.commit(files, "initial")
        git("clone", "-q", "--bare", str(self.work), str(self.bare), cwd=base)
        git("remote", "add", "origin", str(self.bare), cwd=self.work)

    @property
    def url(self) -> str:
        return str(self.bare)

    def commit(self, files: dict[str, str], message: str) -> None:
        for rel, content in files.items():
            path = self.work / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        git("add", "-A", cwd=self.work)
        git("commit", "-q", "-m", message, cwd=self.work)

    def push(self, files: dict[str, str], message: str = "update") -> str:
        self.commit(files, message)
        git("push", "-q", "origin", f"HEAD:refs/heads/{self.branch}", cwd=self.work)
        return self.head()

    def head(self) -> str:
        return git("rev-parse", f"refs/heads/{self.branch}", cwd=self.bare)

    def add_submodule(self, sub: "RemoteRepo", path: str) -> str:
        git("submodule", "add", "-q", sub.url, path, cwd=self.work)
        return self.push({}, f"add {path}")

    def bump_submodule(self, sub: "RemoteRepo", path: str) -> str:
        """Point the submodule at the tip of its remote branch and push the new pointer."""
        git("fetch", "-q", "origin", cwd=self.work / path)
        git("checkout", "-q", f"origin/{sub.branch}", cwd=self.work / path)
        return self.push({}, f"bump {path}")


@pytest.fixture
def app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        paths=PathsConfig(
            root_dir=tmp_path / "vela",
            config_root=tmp_path / "config",
            state_dir=tmp_path / "state" / "vela",
            home_dir=tmp_path / "home",
        )
    )


@pytest.fixture
def make_remote(tmp_path: Path) -> Callable[..., RemoteRepo]:
    remotes = tmp_path / "remotes"
    remotes.mkdir()

    def _make(name: str, files: dict[str, str] | None = None, branch: str = "main") -> RemoteRepo:
        return RemoteRepo(remotes, name, files or {"README.md": f"# {name}\n"}, branch=branch)

    return _make


@pytest.fixture
def file_submodules(monkeypatch: pytest.MonkeyPatch) -> None:
    for key, value in FILE_PROTOCOL_ENV.items():
        monkeypatch.setenv(key, value)


def add_source(config: AppConfig, repo_id: str, url: str, preserve: bool = False) -> None:
    config.repositories.sources.append(
        RepositorySource(id=repo_id, name=repo_id.title(), url=url, preserve_local_changes=preserve)
    )


def no_tools(name: str, path: str | None = None) -> str | None:
    return None


def make_context(config: AppConfig, answers: list[object] | None = None) -> InstallContext:
    ctx = InstallContext.create(config, ScriptedPrompter(answers or []))
    ctx.which = no_tools
    return ctx
