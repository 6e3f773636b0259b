"""Preset and language menus driving the module installers."""

from collections.abc import Callable

from vela_installer.logger import get_logger
from vela_installer.models.dispatch import DispatchReport, DispatchState, ModuleRun, Preset
from vela_installer.services.installers import (
    MODULE_HANDLERS,
    InstallContext,
    LanguageKind,
    ModuleKind,
    install_language,
    validate_module_handlers,
    validate_toolchains,
)
from vela_installer.services.installers.languages import LanguageHandler
from vela_installer.services.installers.modules import ModuleHandler

logger = get_logger(__name__)

BASE_MODULES = [ModuleKind.CORE, ModuleKind.CLI, ModuleKind.SHELL]

PRESET_MODULES: dict[Preset, list[ModuleKind]] = {
    Preset.EVERYTHING: [
        *BASE_MODULES,
        ModuleKind.CODE_EXTENSION,
        ModuleKind.SETTINGS_APP,
        ModuleKind.SYMLINKS,
        ModuleKind.VELA_CONFIG,
        ModuleKind.THEMES,
    ],
    Preset.CORE: [*BASE_MODULES, ModuleKind.SYMLINKS, ModuleKind.VELA_CONFIG, ModuleKind.THEMES],
    Preset.DEVELOPER: [
        *BASE_MODULES,
        ModuleKind.CODE_EXTENSION,
        ModuleKind.SYMLINKS,
        ModuleKind.VELA_CONFIG,
        ModuleKind.PROJECT_DETECT,
        ModuleKind.THEMES,
    ],
    Preset.DESIGNER: [
        *BASE_MODULES,
        ModuleKind.SYMLINKS,
        ModuleKind.VELA_CONFIG,
        ModuleKind.PALETTE_OVERRIDE,
        ModuleKind.THEMES,
    ],
}

# Custom selections always run in this order, whatever order they were picked in
CUSTOM_MODULE_ORDER = [
    ModuleKind.CORE,
    ModuleKind.CLI,
    ModuleKind.SHELL,
    ModuleKind.VELA_CONFIG,
    ModuleKind.CODE_EXTENSION,
    ModuleKind.SETTINGS_APP,
    ModuleKind.SYMLINKS,
    ModuleKind.THEMES,
]

LANGUAGES_QUESTION = "Install programming languages / extensions?"


class Dispatcher:
    """Runs a preset (or a custom selection), then optional language tooling.

    States: SELECTING_PRESET -> RUNNING_MODULES -> SELECTING_LANGUAGES ->
    RUNNING_LANGUAGE_MODULES -> DONE. Cancelling any prompt jumps to DONE.
    Installer failures are reported and never stop the run.
    """

    def __init__(
        self,
        ctx: InstallContext,
        handlers: dict[ModuleKind, ModuleHandler] | None = None,
        language_handler: LanguageHandler = install_language,
    ) -> None:
        self.ctx = ctx
        self.prompter = ctx.prompter
        self.handlers = handlers if handlers is not None else MODULE_HANDLERS
        self.language_handler = language_handler
        validate_module_handlers(self.handlers)
        validate_toolchains()
        self.state = DispatchState.SELECTING_PRESET
        self.report = DispatchReport()

    def _transition(self, state: DispatchState) -> None:
        logger.debug("Dispatcher transition", source=self.state.value, target=state.value)
        self.state = state
        self.report.states.append(state)

    def run(self, preset: Preset | None = None) -> DispatchReport:
        """
        Run the full menu flow.

        Args:
            preset: Skip preset selection and run this preset directly

        Returns:
            Report of every installer that ran
        """
        self.report = DispatchReport(states=[DispatchState.SELECTING_PRESET])
        self.state = DispatchState.SELECTING_PRESET

        if preset is None:
            preset = self.select_preset()
            if preset is None:
                return self._cancel()
        self.report.preset = preset

        modules = self.modules_for(preset)
        if modules is None:
            return self._cancel()

        self._transition(DispatchState.RUNNING_MODULES)
        if preset is Preset.EVERYTHING:
            self.prompter.title("Installing Everything")
        for kind in modules:
            self.report.modules.append(self._guarded(kind.label, lambda k=kind: self.handlers[k](self.ctx)))
        self.prompter.info(f"{preset.value} preset completed.")

        self._transition(DispatchState.SELECTING_LANGUAGES)
        languages = self.select_languages()
        if languages:
            self._transition(DispatchState.RUNNING_LANGUAGE_MODULES)
            for language in languages:
                self.report.languages.append(
                    self._guarded(language.value, lambda lang=language: self.language_handler(self.ctx, lang))
                )

        self._transition(DispatchState.DONE)
        logger.info(
            "Run finished",
            preset=preset.value,
            modules=len(self.report.modules),
            languages=len(self.report.languages),
            failures=[f.name for f in self.report.failures],
        )
        return self.report

    def select_preset(self) -> Preset | None:
        choice = self.prompter.choose([p.value for p in Preset], header="Select a preset")
        if not choice:
            return None
        return Preset(choice)

    def modules_for(self, preset: Preset) -> list[ModuleKind] | None:
        """Modules to run for ``preset``; None if the custom selection was cancelled."""
        if preset is not Preset.CUSTOM:
            return list(PRESET_MODULES[preset])

        self.prompter.banner("Vela Installer")
        picks = self.prompter.choose_many(
            [kind.label for kind in CUSTOM_MODULE_ORDER], header="Select modules to install"
        )
        if picks is None:
            return None
        chosen = set(picks)
        return [kind for kind in CUSTOM_MODULE_ORDER if kind.label in chosen]

    def select_languages(self) -> list[LanguageKind]:
        """Languages in the order the user picked them; empty when declined or cancelled."""
        if not self.prompter.confirm(LANGUAGES_QUESTION):
            return []
        self.prompter.title("Language Setup")
        picks = self.prompter.choose_many([kind.value for kind in LanguageKind], header="Select languages")
        if not picks:
            return []
        return [LanguageKind(pick) for pick in picks]

    def _cancel(self) -> DispatchReport:
        self.report.cancelled = True
        self._transition(DispatchState.DONE)
        logger.info("Run cancelled at selection prompt")
        return self.report

    def _guarded(self, name: str, action: Callable[[], None]) -> ModuleRun:
        try:
            action()
        except Exception as e:
            logger.error("Installer failed", installer=name, error=str(e), error_type=type(e).__name__)
            self.prompter.warn(f"{name} failed: {e}")
            return ModuleRun(name=name, ok=False, error=str(e))
        return ModuleRun(name=name, ok=True)
