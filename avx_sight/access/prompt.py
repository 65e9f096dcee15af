"""Prompter interface for interactive folder-access requests.

The Access Coordinator never talks to the user directly. It asks an
AccessPrompter, which blocks until the user answers and returns a
PromptResponse (granted with the selected folder, denied, or cancelled).
"""

import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, TextIO

from avx_sight.models import PromptOutcome, PromptResponse


class AccessPrompter(ABC):
    """Abstract interface for asking the user to grant folder access.

    Example implementations:
    - ConsolePrompter: ask on a terminal
    - StaticPrompter: answer every request the same way (scripts, tests)
    """

    @abstractmethod
    def request_access(self, path: Path) -> PromptResponse:
        """Ask the user to grant read access to a folder.

        Args:
            path: Folder the scan needs to read

        Returns:
            PromptResponse. For a grant, ``selected_path`` is the folder the
            user picked, which the coordinator checks against ``path``.
        """
        pass


class StaticPrompter(AccessPrompter):
    """Answers every request with a fixed outcome, without user interaction."""

    def __init__(self, outcome: PromptOutcome = PromptOutcome.GRANTED):
        self.outcome = outcome
        self.requests: list[Path] = []

    def request_access(self, path: Path) -> PromptResponse:
        self.requests.append(Path(path))
        if self.outcome is PromptOutcome.GRANTED:
            return PromptResponse.granted(path)
        return PromptResponse(self.outcome)


class ConsolePrompter(AccessPrompter):
    """Asks for folder access on a terminal.

    An empty answer (or ``y``/``yes``) grants the requested folder, ``n`` or
    ``no`` denies, any other answer is taken as the path of the folder the
    user selected, and end-of-input cancels.
    """

    def __init__(
        self,
        input_func: Callable[[str], str] = input,
        stream: TextIO | None = None,
    ):
        self._input = input_func
        self._stream = stream or sys.stderr

    def request_access(self, path: Path) -> PromptResponse:
        print(f"Grant Access to Folder: {path.name or path}", file=self._stream)
        print(
            "This app needs access to this folder to find audio plugins.",
            file=self._stream,
        )
        # Keep stdout clean for rendered output
        print(f"Folder to grant [{path}] (n to deny): ", end="", file=self._stream, flush=True)
        try:
            answer = self._input("").strip()
        except EOFError:
            return PromptResponse.cancelled()

        if answer.lower() in ("n", "no"):
            return PromptResponse.denied()
        if answer == "" or answer.lower() in ("y", "yes"):
            return PromptResponse.granted(path)
        return PromptResponse.granted(Path(answer).expanduser())
