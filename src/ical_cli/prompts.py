"""Interactive prompts used by the setup wizard."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass

YES_ANSWERS = ("y", "yes")
NO_ANSWERS = ("n", "no")


@dataclass
class Choice:
    """One entry of a multi-select list."""

    label: str
    value: str
    checked: bool = False


class Prompter(ABC):
    """Asks the user questions on behalf of the setup wizard."""

    @abstractmethod
    def multi_select(self, message: str, choices: Sequence[Choice]) -> list[str]:
        """
        Let the user pick any number of choices.

        Args:
            message: Question shown above the list.
            choices: Entries; checked ones start selected.

        Returns:
            Values of the selected choices, in list order.
        """

    @abstractmethod
    def read_line(self, message: str) -> str:
        """Read one line of input, without the trailing newline."""

    def confirm(self, message: str, default: bool = True) -> bool:
        """Ask a yes/no question. An empty answer picks the default."""
        hint = "Y/n" if default else "y/N"
        while True:
            answer = self.read_line(f"{message} ({hint}) ").strip().lower()
            if not answer:
                return default
            if answer in YES_ANSWERS:
                return True
            if answer in NO_ANSWERS:
                return False


class ConsolePrompter(Prompter):
    """Prompts on the terminal.

    The multi-select shows a numbered checklist. Typing numbers
    (e.g. "1,3") toggles those entries; an empty line accepts.
    """

    def __init__(self, input_func: Callable[[str], str] = input):
        self._input = input_func

    def read_line(self, message: str) -> str:
        try:
            return self._input(message)
        except EOFError:
            return ""

    def multi_select(self, message: str, choices: Sequence[Choice]) -> list[str]:
        selected = [choice.checked for choice in choices]

        while True:
            print(message)
            for number, (choice, checked) in enumerate(zip(choices, selected), start=1):
                mark = "[x]" if checked else "[ ]"
                print(f"  {mark} {number:>2}. {choice.label}")

            answer = self.read_line("Toggle numbers (e.g. 1,3), Enter to confirm: ").strip()
            if not answer:
                break

            for part in answer.split(","):
                try:
                    index = int(part)
                except ValueError:
                    continue
                if 1 <= index <= len(choices):
                    selected[index - 1] = not selected[index - 1]
            print()

        return [choice.value for choice, checked in zip(choices, selected) if checked]
