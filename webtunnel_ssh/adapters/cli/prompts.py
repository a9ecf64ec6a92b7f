"""
Rich-based user prompts
"""
import sys
from typing import Optional, TextIO

from rich.console import Console
from rich.prompt import Prompt

from ...core.interfaces import PromptProvider
from ...core.logging import get_stdout_console
from ...core.terminal import no_echo


class RichPromptProvider(PromptProvider):
    """Rich-based prompt provider"""

    def __init__(self, console: Optional[Console] = None, stdin: Optional[TextIO] = None):
        self.console = console or get_stdout_console()
        self.stdin = stdin

    def prompt(self, message: str, default: Optional[str] = None, password: bool = False) -> str:
        """Prompt user for input; end of input counts as an empty answer"""
        if password:
            return self._read_secret(message)
        try:
            if default is None:
                return Prompt.ask(message, console=self.console, stream=self.stdin)
            return Prompt.ask(message, default=default, console=self.console, stream=self.stdin)
        except EOFError:
            return default or ""

    def _read_secret(self, message: str) -> str:
        stream = self.stdin or sys.stdin
        self.console.print(f"{message}: ", end="", markup=False, highlight=False)
        try:
            with no_echo(stream):
                line = stream.readline()
        finally:
            self.console.print()
        return line.rstrip("\r\n")
