"""
Core infrastructure layer
"""
from .constants import *
from .exceptions import *
from .logging import setup_logging, get_logger, get_stdout_console, get_stderr_console
from .interfaces import PromptProvider, RelayConnection, WebSocketFactory
from .terminal import no_echo

__all__ = [
    "setup_logging",
    "get_logger",
    "get_stdout_console",
    "get_stderr_console",
    "PromptProvider",
    "RelayConnection",
    "WebSocketFactory",
    "no_echo",
]
