"""Path utilities for the Vela installer."""

from pathlib import Path


def get_resources_dir() -> Path:
    """Get the packaged resources directory (src/vela_installer/resources)."""
    return Path(__file__).parent.parent / "resources"
