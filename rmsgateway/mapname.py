"""Look up logical names in a simple NAME=value map file."""

from __future__ import annotations

import enum
import os
from typing import Iterable, Optional, Union

from rmsgateway.util import read_line


class MapErrorCode(enum.IntEnum):
    """Reasons a mapping can fail."""

    NO_MAPDB = 1
    MAP_OPEN = 2
    NO_MEM = 3
    ILL_COMMAND = 4
    NOT_FOUND = 5


_MESSAGES = {
    0: "no map error",
    MapErrorCode.NO_MAPDB: "no MAPDB in environment",
    MapErrorCode.MAP_OPEN: "cannot read map file",
    MapErrorCode.NO_MEM: "storage allocator failure during mapping",
    MapErrorCode.NOT_FOUND: "logical not found in mapfile",
    MapErrorCode.ILL_COMMAND: "illegal mapctl command",
}


def map_error_message(code: int) -> str:
    """Return the message for a map error code."""
    return _MESSAGES.get(code, "unknown map error code")


class MapError(Exception):
    """Raised when a map file cannot be used or a name is missing."""

    def __init__(self, code: MapErrorCode, logical: Optional[str] = None) -> None:
        self.code = code
        self.logical = logical
        text = map_error_message(code)
        if logical is not None:
            text = f"{text}: {logical}"
        super().__init__(text)


def _lookup(lines: list[str], logical: str) -> Optional[str]:
    prefix = f"{logical}="
    for line in lines:
        entry = line.strip(" \t")
        if entry.startswith(prefix):
            return entry[len(prefix):]
    return None


def fmapname(
    mapfile: Union[str, os.PathLike],
    logicals: Iterable[str],
    fail_on_not_found: bool = False,
) -> dict[str, Optional[str]]:
    """Map each logical name to its value in mapfile.

    The first line of the form ``NAME=value`` (surrounding blanks ignored)
    gives a name its value. Names without a line map to None, or raise
    MapError when fail_on_not_found is set.
    """
    try:
        with open(mapfile, "r") as stream:
            lines = []
            while (line := read_line(stream)) is not None:
                lines.append(line)
    except OSError as exc:
        raise MapError(MapErrorCode.MAP_OPEN) from exc

    result: dict[str, Optional[str]] = {}
    for logical in logicals:
        value = _lookup(lines, logical)
        if value is None and fail_on_not_found:
            raise MapError(MapErrorCode.NOT_FOUND, logical)
        result[logical] = value
    return result


def mapname(
    logicals: Iterable[str], fail_on_not_found: bool = False
) -> dict[str, Optional[str]]:
    """Map logical names using the file named by the MAPDB environment variable."""
    mapfile = os.environ.get("MAPDB")
    if mapfile is None:
        raise MapError(MapErrorCode.NO_MAPDB)
    return fmapname(mapfile, logicals, fail_on_not_found)