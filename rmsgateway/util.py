"""Small helpers: character sets, line reading, and file checks."""

from __future__ import annotations

import errno
import logging
import os
import shutil
import sys
import time
from typing import IO, Iterable, Optional, Union

log = logging.getLogger(__name__)

_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)

CharLike = Union[str, int]


def _code(char: CharLike) -> int:
    """Return the 8-bit code of a one-character string or an integer."""
    if isinstance(char, int):
        return char & 0xFF
    if len(char) != 1:
        raise ValueError(f"expected a single character, got {char!r}")
    return ord(char) & 0xFF


class CharSet:
    """A set of 8-bit character values."""

    def __init__(self, chars: Union[str, bytes, Iterable[CharLike]] = "") -> None:
        self._members: set[int] = set()
        for char in chars:
            self.add(char)

    def add(self, char: CharLike) -> None:
        """Add a character (or its code) to the set."""
        self._members.add(_code(char))

    def clear(self) -> None:
        """Remove every member."""
        self._members.clear()

    def __contains__(self, char: object) -> bool:
        if not isinstance(char, (str, int)):
            return False
        if isinstance(char, str) and len(char) != 1:
            return False
        return _code(char) in self._members

    def __len__(self) -> int:
        return len(self._members)

    def __repr__(self) -> str:
        return f"CharSet({bytes(sorted(self._members))!r})"


def downcase(text: Optional[str]) -> Optional[str]:
    """Return text with ASCII letters in lower case; None passes through."""
    if text is None:
        return None
    return text.translate(_ASCII_LOWER)


def read_line(stream: IO[str]) -> Optional[str]:
    """Read one line with its trailing newline dropped; None at end of file."""
    line = stream.readline()
    if not line:
        return None
    return line[:-1] if line.endswith("\n") else line


def read_line_cr(stream: IO[str]) -> Optional[str]:
    """Read one line with a trailing newline turned into a carriage return."""
    line = stream.readline()
    if not line:
        return None
    return line[:-1] + "\r" if line.endswith("\n") else line


def file_exists(filename: Optional[Union[str, os.PathLike]]) -> bool:
    """Tell whether a non-empty path names something that can be stat'ed."""
    if filename is None or os.fspath(filename) == "":
        return False
    try:
        os.stat(filename)
    except OSError:
        return False
    return True


def file_age(path: Union[str, os.PathLike], now: Optional[float] = None) -> int:
    """Return the age of a file in whole seconds, from its modification time.

    A file that cannot be stat'ed counts as modified at the epoch.
    """
    try:
        mtime = int(os.stat(path).st_mtime)
    except OSError as exc:
        if exc.errno != errno.ENOENT:
            log.warning("Can't stat %s (errno = %d)", path, exc.errno or 0)
        mtime = 0
    current = int(time.time() if now is None else now)
    return current - mtime


def print_file(path: Optional[Union[str, os.PathLike]], out: Optional[IO[str]] = None) -> bool:
    """Copy a file's contents to out (stdout by default).

    Returns False, quietly, when there is no path or the file cannot be opened.
    """
    if path is None or os.fspath(path) == "":
        return False
    target = sys.stdout if out is None else out
    try:
        with open(path, "r", newline="") as src:
            shutil.copyfileobj(src, target)
    except OSError:
        return False
    return True