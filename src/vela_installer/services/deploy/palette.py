"""Palette override persistence."""

import json
from pathlib import Path

from vela_installer.logger import get_logger
from vela_installer.models.app_config import AppConfig
from vela_installer.models.palette import PaletteOverride

from .deployer import write_text_atomic

logger = get_logger(__name__)


def write_palette_override(config: AppConfig, override: PaletteOverride) -> Path:
    """Write the override record, replacing any previous one wholesale."""
    path = config.paths.get_palette_override_path()
    payload = override.model_dump(by_alias=True)
    write_text_atomic(path, json.dumps(payload, separators=(",", ":")) + "\n")
    logger.info("Wrote palette override", path=str(path), colors=payload["colors"])
    return path

