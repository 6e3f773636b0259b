"""Config deployment models."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel


class DeployMode(str, Enum):
    """How a destination path is materialized from its source."""

    LINK = "link"
    FILTERED_COPY = "filtered_copy"


class DeployResult(BaseModel):
    """Summary of one deploy call."""

    source: Path
    dest: Path
    mode: DeployMode
    files_copied: int = 0
    lines_stripped: int = 0
