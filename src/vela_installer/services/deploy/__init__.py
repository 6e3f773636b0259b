"""Config deployment services."""

from .deployer import ConfigDeployer, remove_path, write_text_atomic
from .palette import write_palette_override

__all__ = ["ConfigDeployer", "remove_path", "write_palette_override", "write_text_atomic"]
