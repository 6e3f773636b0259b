"""Prompt providers."""

from .base import Prompter
from .gum import GumPrompter
from .scripted import ScriptedPrompter, ScriptExhaustedError

__all__ = ["GumPrompter", "Prompter", "ScriptExhaustedError", "ScriptedPrompter"]
