"""
Terminal helpers
"""
import sys
from contextlib import contextmanager
from typing import Iterator, Optional, TextIO

try:
    import termios
except ImportError:  # Windows
    termios = None

try:
    import msvcrt
    import ctypes
except ImportError:  # POSIX
    msvcrt = None

_ENABLE_ECHO_INPUT = 0x0004


@contextmanager
def no_echo(stream: Optional[TextIO] = None) -> Iterator[None]:
    """
    Disable terminal echo on ``stream`` for the duration of the block.

    The previous terminal mode is restored on every exit path, including
    exceptions raised while reading. Streams that are not attached to a
    terminal are left untouched.

    Args:
        stream: Input stream (default: sys.stdin)
    """
    stream = stream if stream is not None else sys.stdin
    try:
        is_tty = stream.isatty()
    except (AttributeError, ValueError):
        is_tty = False

    if not is_tty:
        yield
        return

    if termios is not None:
        fd = stream.fileno()
        saved = termios.tcgetattr(fd)
        muted = list(saved)
        muted[3] = muted[3] & ~termios.ECHO
        termios.tcsetattr(fd, termios.TCSANOW, muted)
        try:
            yield
        finally:
            termios.tcsetattr(fd, termios.TCSANOW, saved)
    elif msvcrt is not None:
        kernel32 = ctypes.windll.kernel32
        handle = msvcrt.get_osfhandle(stream.fileno())
        mode = ctypes.c_ulong()
        kernel32.GetConsoleMode(handle, ctypes.byref(mode))
        kernel32.SetConsoleMode(handle, mode.value & ~_ENABLE_ECHO_INPUT)
        try:
            yield
        finally:
            kernel32.SetConsoleMode(handle, mode.value)
    else:
        yield
