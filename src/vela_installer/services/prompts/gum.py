"""Prompts rendered by charmbracelet/gum."""

from vela_installer.logger import get_logger
from vela_installer.utils.subprocess_executor import SubprocessExecutor

logger = get_logger(__name__)

ACCENT = "212"
WARN_COLOR = "203"


class GumPrompter:
    """Renders menus, inputs and styled text by shelling out to ``gum``."""

    def __init__(self, gum_executable: str = "gum") -> None:
        self.gum = gum_executable

    def choose(self, options: list[str], header: str | None = None) -> str | None:
        args = ["choose"]
        if header:
            args += ["--header", header]
        result = SubprocessExecutor.run_attached(self.gum, *args, *options, capture_stdout=True)
        if result.returncode != 0:
            return None
        choice = result.stdout.strip().replace("\r", "")
        return choice or None

    def choose_many(self, options: list[str], header: str | None = None) -> list[str] | None:
        args = ["choose", "--no-limit"]
        if header:
            args += ["--header", header]
        result = SubprocessExecutor.run_attached(self.gum, *args, *options, capture_stdout=True)
        if result.returncode != 0:
            return None
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def text_input(self, placeholder: str) -> str | None:
        result = SubprocessExecutor.run_attached(self.gum, "input", "--placeholder", placeholder, capture_stdout=True)
        if result.returncode != 0:
            return None
        return result.stdout.rstrip("\n")

    def confirm(self, prompt: str) -> bool:
        # 0 = yes, 1 = no, 130 = interrupted
        result = SubprocessExecutor.run_attached(self.gum, "confirm", "--prompt.foreground", ACCENT, prompt)
        return result.returncode == 0

    def banner(self, text: str) -> None:
        SubprocessExecutor.run_attached(
            self.gum,
            "style",
            "--border",
            "normal",
            "--margin",
            "1 2",
            "--padding",
            "1 2",
            "--border-foreground",
            ACCENT,
            text,
        )

    def title(self, text: str) -> None:
        SubprocessExecutor.run_attached(self.gum, "style", "--bold", "--foreground", ACCENT, text)

    def info(self, text: str) -> None:
        SubprocessExecutor.run_attached(self.gum, "format", "--theme", "dracula", text)

    def warn(self, text: str) -> None:
        SubprocessExecutor.run_attached(self.gum, "style", "--foreground", WARN_COLOR, f"! {text}")
