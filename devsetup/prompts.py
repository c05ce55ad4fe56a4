"""Interactive prompts behind a small capability interface.

Steps that need the operator ask a :class:`Prompter`; tests pass a scripted
double instead of touching the terminal.
"""

import getpass
import sys
from typing import Protocol


class Prompter(Protocol):
    def is_interactive(self) -> bool: ...

    def read_secret(self, prompt: str) -> str: ...

    def confirm(self, prompt: str) -> None: ...


class TerminalPrompter:
    """Reads from the controlling terminal."""

    def is_interactive(self) -> bool:
        return sys.stdin.isatty()

    def read_secret(self, prompt: str) -> str:
        """Read one line with echo disabled. EOF counts as an empty answer."""
        try:
            return getpass.getpass(prompt).strip()
        except EOFError:
            return ""

    def confirm(self, prompt: str) -> None:
        """Block until the user presses Enter; the line's content is discarded."""
        try:
            input(prompt)
        except EOFError:
            pass
