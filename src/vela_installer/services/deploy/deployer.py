"""Materializes synced repository content into the configuration root."""

import os
import re
import shutil
import tempfile
from pathlib import Path

from vela_installer.exceptions import DeployDestUnwritableError, DeploySourceMissingError
from vela_installer.logger import get_logger
from vela_installer.models.app_config import AppConfig
from vela_installer.models.deploy import DeployMode, DeployResult

logger = get_logger(__name__)


def remove_path(path: Path) -> bool:
    """Remove a file, symlink or directory tree. Returns True if something was removed."""
    if path.is_symlink() or path.is_file():
        path.unlink()
        return True
    if path.is_dir():
        shutil.rmtree(path)
        return True
    return False


def write_text_atomic(path: Path, content: str, errors: str = "strict") -> None:
    """Replace ``path`` with ``content`` so readers see either the old or the new file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", errors=errors) as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class ConfigDeployer:
    """Replaces destination paths with links to, or filtered copies of, repository content."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.settings = config.deploy
        self._directive = re.compile(self.settings.unsupported_directive_pattern)

    def legacy_paths(self) -> list[Path]:
        """Existing paths left behind by earlier installer versions."""
        root = self.config.paths.config_root
        found: list[Path] = []
        for pattern in self.settings.legacy_paths:
            if any(ch in pattern for ch in "*?["):
                found.extend(sorted(root.glob(pattern)))
            else:
                candidate = root / pattern
                if candidate.exists() or candidate.is_symlink():
                    found.append(candidate)
        return found

    def purge_legacy(self) -> list[Path]:
        removed = []
        for path in self.legacy_paths():
            try:
                if remove_path(path):
                    removed.append(path)
            except OSError as e:
                raise DeployDestUnwritableError(path, e) from e
        if removed:
            logger.info("Purged legacy config paths", paths=[str(p) for p in removed])
        return removed

    def deploy(
        self,
        source: Path,
        dest: Path,
        mode: DeployMode = DeployMode.LINK,
        allowed_extensions: list[str] | None = None,
        purge: bool = True,
    ) -> DeployResult:
        """
        Replace ``dest`` with content derived from ``source``.

        Args:
            source: Path inside a synced repository
            dest: Destination under the configuration root
            mode: LINK creates a symlink; FILTERED_COPY mirrors allowed files
            allowed_extensions: Overrides the configured extension allowlist
            purge: Remove legacy installed paths first

        Returns:
            Summary of the deployment

        Raises:
            DeploySourceMissingError: If source does not exist
            DeployDestUnwritableError: If dest or its parent cannot be written
        """
        if not source.exists():
            raise DeploySourceMissingError(source)

        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DeployDestUnwritableError(dest, e) from e

        if purge:
            self.purge_legacy()

        try:
            if mode is DeployMode.LINK:
                result = self._link(source, dest)
            else:
                extensions = allowed_extensions if allowed_extensions is not None else self.settings.allowed_extensions
                result = self._filtered_copy(source, dest, {e.lower() for e in extensions})
        except OSError as e:
            raise DeployDestUnwritableError(dest, e) from e

        logger.info(
            "Deployed config",
            source=str(source),
            dest=str(dest),
            mode=mode.value,
            files=result.files_copied,
            lines_stripped=result.lines_stripped,
        )
        return result

    def _link(self, source: Path, dest: Path) -> DeployResult:
        is_dir = source.is_dir()
        if dest.is_symlink() or dest.is_file():
            # Files and links are swapped in a single rename
            tmp = dest.with_name(f".{dest.name}.vela-link-{os.getpid()}")
            remove_path(tmp)
            tmp.symlink_to(source, target_is_directory=is_dir)
            os.replace(tmp, dest)
        else:
            # A real directory cannot be renamed over; it is discarded, not backed up
            remove_path(dest)
            dest.symlink_to(source, target_is_directory=is_dir)
        return DeployResult(source=source, dest=dest, mode=DeployMode.LINK)

    def _filtered_copy(self, source: Path, dest: Path, extensions: set[str]) -> DeployResult:
        staging = Path(tempfile.mkdtemp(prefix=f".{dest.name}.staging-", dir=dest.parent))
        try:
            if source.is_dir():
                copied, stripped = self._populate(source, staging, extensions)
                self._swap_into_place(staging, dest)
            else:
                copied, stripped = self._populate_file(source, staging / source.name, extensions)
                if copied:
                    self._swap_into_place(staging / source.name, dest)
                else:
                    remove_path(dest)
        finally:
            if staging.exists():
                shutil.rmtree(staging, ignore_errors=True)
        return DeployResult(
            source=source, dest=dest, mode=DeployMode.FILTERED_COPY, files_copied=copied, lines_stripped=stripped
        )

    def _populate(self, source: Path, staging: Path, extensions: set[str]) -> tuple[int, int]:
        denied = set(self.settings.denylist)
        copied = 0
        stripped = 0
        for dirpath, dirnames, filenames in os.walk(source):
            # Prune denied directories in place so os.walk skips them
            dirnames[:] = sorted(d for d in dirnames if d not in denied)
            rel = Path(dirpath).relative_to(source)
            for filename in sorted(filenames):
                if filename in denied:
                    continue
                file_copied, file_stripped = self._populate_file(
                    Path(dirpath) / filename, staging / rel / filename, extensions
                )
                copied += file_copied
                stripped += file_stripped
        return copied, stripped

    def _populate_file(self, src_file: Path, target: Path, extensions: set[str]) -> tuple[int, int]:
        if src_file.suffix.lower() not in extensions or not src_file.is_file():
            return 0, 0
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src_file, target)
        stripped = 0
        if target.suffix.lower() in self.settings.script_extensions:
            stripped = self.strip_directives(target)
        return 1, stripped

    def strip_directives(self, path: Path) -> int:
        """Drop every line matching the unsupported-directive pattern. Returns lines removed."""
        text = path.read_text(encoding="utf-8", errors="surrogateescape")
        lines = text.splitlines(keepends=True)
        kept = [line for line in lines if not self._directive.match(line.rstrip("\r\n"))]
        removed = len(lines) - len(kept)
        if removed:
            path.write_text("".join(kept), encoding="utf-8", errors="surrogateescape")
            logger.debug("Stripped unsupported directives", path=str(path), lines=removed)
        return removed

    def _swap_into_place(self, staged: Path, dest: Path) -> None:
        if not (dest.exists() or dest.is_symlink()):
            os.rename(staged, dest)
            return

        backup = dest.with_name(f".{dest.name}.vela-old-{os.getpid()}")
        remove_path(backup)
        os.rename(dest, backup)
        try:
            os.rename(staged, dest)
        except OSError:
            os.rename(backup, dest)
            raise
        remove_path(backup)
