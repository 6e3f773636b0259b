"""Dispatcher state and run report models."""

from enum import Enum

from pydantic import BaseModel, Field


class DispatchState(str, Enum):
    SELECTING_PRESET = "selecting_preset"
    RUNNING_MODULES = "running_modules"
    SELECTING_LANGUAGES = "selecting_languages"
    RUNNING_LANGUAGE_MODULES = "running_language_modules"
    DONE = "done"


class Preset(str, Enum):
    EVERYTHING = "Everything"
    CORE = "Core"
    DEVELOPER = "Developer"
    DESIGNER = "Designer"
    CUSTOM = "Custom"


class ModuleRun(BaseModel):
    """Outcome of one guarded installer call."""

    name: str
    ok: bool
    error: str | None = None


class DispatchReport(BaseModel):
    preset: Preset | None = None
    modules: list[ModuleRun] = Field(default_factory=list)
    languages: list[ModuleRun] = Field(default_factory=list)
    states: list[DispatchState] = Field(default_factory=list)
    cancelled: bool = False

    @property
    def failures(self) -> list[ModuleRun]:
        return [run for run in [*self.modules, *self.languages] if not run.ok]
