"""System package services."""

from .packages import PackageHelper
from .prerequisites import PrerequisiteResolver

__all__ = ["PackageHelper", "PrerequisiteResolver"]
