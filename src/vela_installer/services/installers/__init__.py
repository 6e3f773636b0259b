"""Module installers and language toolchains."""

from .context import InstallContext
from .languages import TOOLCHAINS, LanguageKind, install_language, validate_toolchains
from .modules import MODULE_HANDLERS, MODULE_LABELS, ModuleKind, validate_module_handlers

__all__ = [
    "InstallContext",
    "LanguageKind",
    "MODULE_HANDLERS",
    "MODULE_LABELS",
    "ModuleKind",
    "TOOLCHAINS",
    "install_language",
    "validate_module_handlers",
    "validate_toolchains",
]
