"""Data models for the Vela installer."""

from vela_installer.models.app_config import AppConfig, DeployConfig, PathsConfig, RepositoriesConfig, ToolsConfig
from vela_installer.models.deploy import DeployMode, DeployResult
from vela_installer.models.dispatch import DispatchReport, DispatchState, ModuleRun, Preset
from vela_installer.models.palette import PaletteColors, PaletteOverride
from vela_installer.models.policy import FAILURE_POLICY, Operation, Policy, policy_for
from vela_installer.models.repository import RepositorySource, SyncAction, SyncOutcome, SyncWarning

__all__ = [
    "AppConfig",
    "DeployConfig",
    "DeployMode",
    "DeployResult",
    "DispatchReport",
    "DispatchState",
    "FAILURE_POLICY",
    "ModuleRun",
    "Operation",
    "PaletteColors",
    "PaletteOverride",
    "PathsConfig",
    "Policy",
    "Preset",
    "RepositoriesConfig",
    "RepositorySource",
    "SyncAction",
    "SyncOutcome",
    "SyncWarning",
    "ToolsConfig",
    "policy_for",
]
