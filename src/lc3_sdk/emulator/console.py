"""
Console I/O for the LC-3 Emulator
=================================

TRAP routines talk to the outside world through a console object. The
emulator never touches stdin/stdout itself; whoever drives it supplies a
console, so tests can script input and capture output while the command
line tool uses the real terminal.

Consoles:
    - BufferConsole: scripted input, captured output (tests, embedding)
    - TerminalConsole: the process's terminal, through click

Reading past the end of the available input yields '\\0'.
"""

from collections import deque
from typing import Optional, Protocol
import sys

import click


EOF_CHAR = "\0"


class ConsoleProtocol(Protocol):
    """
    Protocol defining the console interface.

    The CPU's TRAP handling interacts with the user only through these
    calls. ``read_char`` may block the caller's thread.
    """

    def read_char(self) -> str:
        """Read one character."""
        ...

    def write_char(self, char: str) -> None:
        """Write one character."""
        ...

    def write_string(self, text: str) -> None:
        """Write a string."""
        ...


class BufferConsole:
    """
    In-memory console.

    Input is taken from a queue of characters; output is accumulated and
    exposed through ``output``.

    Example:
        >>> console = BufferConsole("y")
        >>> console.read_char()
        'y'
        >>> console.write_string("ok")
        >>> console.output
        'ok'
    """

    def __init__(self, input_text: str = ""):
        self._input: deque[str] = deque(input_text)
        self._output: list[str] = []

    def feed(self, text: str) -> None:
        """Queue more input characters."""
        self._input.extend(text)

    @property
    def pending_input(self) -> int:
        return len(self._input)

    @property
    def output(self) -> str:
        return "".join(self._output)

    def clear_output(self) -> None:
        self._output.clear()

    def read_char(self) -> str:
        return self._input.popleft() if self._input else EOF_CHAR

    def write_char(self, char: str) -> None:
        self._output.append(char)

    def write_string(self, text: str) -> None:
        self._output.append(text)


class TerminalConsole:
    """
    Console bound to the process's terminal.

    Interactive terminals are read one keypress at a time with
    ``click.getchar``; piped input is read from stdin a character at a time.
    When `input_text` is given, input comes from it instead of stdin.
    """

    def __init__(self, input_text: Optional[str] = None):
        self._script: Optional[deque[str]] = deque(input_text) if input_text is not None else None

    def read_char(self) -> str:
        if self._script is not None:
            return self._script.popleft() if self._script else EOF_CHAR
        if sys.stdin.isatty():
            return click.getchar()
        char = sys.stdin.read(1)
        return char if char else EOF_CHAR

    def write_char(self, char: str) -> None:
        click.echo(char, nl=False)

    def write_string(self, text: str) -> None:
        click.echo(text, nl=False)


class RecordingConsole:
    """
    Forwards to another console and remembers everything written.

    The CPU wraps the caller's console in one of these for each step so
    that the step's output can be reported back.
    """

    def __init__(self, console: ConsoleProtocol):
        self._console = console
        self._written: list[str] = []

    @property
    def captured(self) -> str:
        return "".join(self._written)

    def read_char(self) -> str:
        return self._console.read_char()

    def write_char(self, char: str) -> None:
        self._written.append(char)
        self._console.write_char(char)

    def write_string(self, text: str) -> None:
        self._written.append(text)
        self._console.write_string(text)
