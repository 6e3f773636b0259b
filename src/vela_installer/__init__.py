"""Vela dotfiles installer."""

__version__ = "0.3.0"
