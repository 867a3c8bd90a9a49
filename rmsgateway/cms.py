"""CMS host table: reading, lookup, writing and least-recently-used ordering."""

from __future__ import annotations

import bisect
import logging
import os
import re
from dataclasses import dataclass
from typing import IO, Optional, Union

log = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

_MIN_PORT = 1024
_MAX_PORT = 65535

_SEP = ":"
_EOL = "\n"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass
class CmsHost:
    """One entry of the CMS host table (``host:port:password``)."""

    host: str
    port: int
    password: str


@dataclass
class CmsNode:
    """A CMS host together with the time of its last recorded use."""

    host: str
    port: int
    password: str
    stat_time: int = 0


def _atoi(text: str) -> int:
    """Parse a leading decimal integer the way atoi does; 0 if there is none."""
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def parse_cms_line(line: str) -> Optional[CmsHost]:
    """Parse one line of the host table.

    Returns None for comment lines (starting with '#') and blank lines.
    The host is everything before the first ':', the port is read from the
    start of the second field, and the password runs to the next ':' or the
    end of the line.
    """
    if line.startswith("#"):
        return None
    if not line.strip():
        return None
    body = line[:-1] if line.endswith(_EOL) else line
    host, _, rest = body.partition(_SEP)
    port = _atoi(rest)
    _, _, tail = rest.partition(_SEP)
    field = tail.split(_SEP, 1)[0]
    return CmsHost(host=host, port=port, password=field)


def read_cms_hosts(path: PathLike) -> list[CmsHost]:
    """Return every entry of the host table at path, in file order.

    Raises OSError if the file cannot be opened.
    """
    with open(path, "r") as stream:
        return [entry for entry in map(parse_cms_line, stream) if entry is not None]


def find_cms_host(path: PathLike, name: str) -> Optional[CmsHost]:
    """Return the first entry whose host name starts with name, or None."""
    for entry in read_cms_hosts(path):
        if entry.host.startswith(name):
            return entry
    return None


def format_cms_entry(entry: Union[CmsHost, CmsNode]) -> str:
    """Return the host table line for entry, newline included."""
    fields = (entry.host, str(entry.port), entry.password)
    return _SEP.join(fields) + _EOL


def write_cms_entry(entry: Union[CmsHost, CmsNode], stream: IO[str]) -> None:
    """Write entry as a host table line to stream and flush it."""
    stream.write(format_cms_entry(entry))
    stream.flush()


def insert_cms_node(
    nodes: list[CmsNode], host: Union[CmsHost, CmsNode], stat_time: int
) -> list[CmsNode]:
    """Insert host into nodes, kept in increasing order of stat_time.

    A new node goes after any nodes with the same time. The list is
    changed in place and returned.
    """
    node = CmsNode(host=host.host, port=host.port, password=host.password, stat_time=stat_time)
    index = bisect.bisect_right([item.stat_time for item in nodes], stat_time)
    nodes.insert(index, node)
    return nodes


def get_cms_list(path: PathLike, stat_dir: PathLike) -> list[CmsNode]:
    """Build the list of usable CMS hosts, least recently used first.

    Entries without a host, with a port outside 1024..65535, or without a
    password are skipped. The access time of ``stat_dir/host`` orders the
    list; a missing status file counts as time 0. An unreadable host table
    gives an empty list.
    """
    try:
        hosts = read_cms_hosts(path)
    except OSError as exc:
        log.error("can't read CMS host file %s (%s)", path, exc.strerror)
        return []

    directory = os.fspath(stat_dir)
    nodes: list[CmsNode] = []
    for count, entry in enumerate(hosts, start=1):
        log.debug("get_cms_list(): add host = %s, port = %d", entry.host, entry.port)

        if not entry.host:
            log.warning("missing cms host at line %d. Skipped.", count)
            continue
        if not _MIN_PORT <= entry.port <= _MAX_PORT:
            log.warning(
                "bad port (%d) for host '%s' at line %d. Skipped.",
                entry.port, entry.host, count,
            )
            continue
        if not entry.password:
            log.warning(
                "missing credentials for host '%s' at line %d. Skipped.", entry.host, count
            )
            continue

        statfile = f"{directory}/{entry.host}"
        try:
            atime = int(os.stat(statfile).st_atime)
        except FileNotFoundError:
            atime = 0
        except OSError as exc:
            log.warning("Can't stat %s (errno = %d)", statfile, exc.errno or 0)
            continue

        insert_cms_node(nodes, entry, atime)
    return nodes