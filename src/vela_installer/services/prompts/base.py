"""Prompt provider interface used by the dispatcher and installers."""

from typing import Protocol


class Prompter(Protocol):
    """Synchronous request/response prompts plus styled output.

    Menu and input methods return None when the user cancels.
    """

    def choose(self, options: list[str], header: str | None = None) -> str | None: ...

    def choose_many(self, options: list[str], header: str | None = None) -> list[str] | None: ...

    def text_input(self, placeholder: str) -> str | None: ...

    def confirm(self, prompt: str) -> bool: ...

    def banner(self, text: str) -> None: ...

    def title(self, text: str) -> None: ...

    def info(self, text: str) -> None: ...

    def warn(self, text: str) -> None: ...
