"""Prompter that replays canned answers, for unattended runs and tests."""

from collections import deque
from collections.abc import Iterable
from typing import Any


class ScriptExhaustedError(LookupError):
    """Raised when a prompt is asked but no answer is queued."""


class ScriptedPrompter:
    """Answers prompts from a queue and records everything that was shown.

    Answers are consumed in order regardless of prompt kind. ``None`` means
    "cancelled" for menus and input; for ``confirm`` any falsy answer is "no".
    When the queue is empty, menus and inputs cancel and confirmations decline,
    unless ``strict`` is set.
    """

    def __init__(self, answers: Iterable[Any] = (), strict: bool = False) -> None:
        self.answers: deque[Any] = deque(answers)
        self.strict = strict
        self.asked: list[tuple[str, Any]] = []
        self.output: list[tuple[str, str]] = []

    def _next(self, kind: str, request: Any) -> Any:
        self.asked.append((kind, request))
        if not self.answers:
            if self.strict:
                raise ScriptExhaustedError(f"No scripted answer for {kind}: {request!r}")
            return None
        return self.answers.popleft()

    def _header(self, header: str | None) -> None:
        if header:
            self.output.append(("header", header))

    def choose(self, options: list[str], header: str | None = None) -> str | None:
        self._header(header)
        answer = self._next("choose", options)
        if answer is not None and answer not in options:
            raise ValueError(f"Scripted answer {answer!r} is not one of {options}")
        return answer

    def choose_many(self, options: list[str], header: str | None = None) -> list[str] | None:
        self._header(header)
        answer = self._next("choose_many", options)
        if answer is None:
            return None
        unknown = [a for a in answer if a not in options]
        if unknown:
            raise ValueError(f"Scripted answers {unknown} are not in {options}")
        return list(answer)

    def text_input(self, placeholder: str) -> str | None:
        return self._next("text_input", placeholder)

    def confirm(self, prompt: str) -> bool:
        return bool(self._next("confirm", prompt))

    def banner(self, text: str) -> None:
        self.output.append(("banner", text))

    def title(self, text: str) -> None:
        self.output.append(("title", text))

    def info(self, text: str) -> None:
        self.output.append(("info", text))

    def warn(self, text: str) -> None:
        self.output.append(("warn", text))

    def messages(self, kind: str | None = None) -> list[str]:
        return [text for k, text in self.output if kind is None or k == kind]
