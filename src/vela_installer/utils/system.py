"""Process-existence checks and scoped temporary directories."""

import shutil
import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from vela_installer.logger import get_logger

logger = get_logger(__name__)


def command_exists(name: str) -> bool:
    """Return True if *name* resolves to an executable on PATH."""
    return shutil.which(name) is not None


@contextmanager
def temporary_directory(prefix: str = "vela-installer.") -> Iterator[Path]:
    """Yield a fresh temporary directory that is removed on exit, even on error."""
    tmp = Path(tempfile.mkdtemp(prefix=prefix))
    logger.debug("Created temporary directory", path=str(tmp))
    try:
        yield tmp
    finally:
        shutil.rmtree(tmp, ignore_errors=True)
        logger.debug("Removed temporary directory", path=str(tmp))
