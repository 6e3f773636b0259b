"""Preset dispatch."""

from .dispatcher import CUSTOM_MODULE_ORDER, PRESET_MODULES, Dispatcher

__all__ = ["CUSTOM_MODULE_ORDER", "Dispatcher", "PRESET_MODULES"]
