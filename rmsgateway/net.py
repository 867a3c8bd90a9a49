"""Line reading, radio-link sending, and CMS/UDP network connections."""

from __future__ import annotations

import errno
import logging
import select
import socket
import sys
import time
from typing import IO, Any, NoReturn, Optional, Union

from rmsgateway.rms import CONNECT_TIMEOUT, SendFlag

log = logging.getLogger(__name__)

Data = Union[str, bytes, bytearray, memoryview]

_DEFAULT_LINE_MAX = 1024
_MAX_RETRIES = 15
_MAX_DELAY = 10
_IN_PROGRESS = {errno.EINPROGRESS, errno.EWOULDBLOCK, errno.EAGAIN}


class ConnectError(OSError):
    """Raised when a connection to a CMS host cannot be made."""

    def __init__(self, message: str, host: Optional[str] = None) -> None:
        super().__init__(message)
        self.host = host


def _as_bytes(data: Data) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def _eol_code(eol: Union[int, str, bytes]) -> int:
    if isinstance(eol, int):
        return eol & 0xFF
    raw = _as_bytes(eol)
    if len(raw) != 1:
        raise ValueError(f"end of line must be a single byte, got {eol!r}")
    return raw[0]


def _read_byte(stream: Any) -> bytes:
    recv = getattr(stream, "recv", None)
    if recv is not None:
        return recv(1)
    return stream.read(1) or b""


def readln(
    stream: Any, maxlen: int = _DEFAULT_LINE_MAX, eol: Union[int, str, bytes] = b"\r"
) -> bytes:
    """Read one line, a byte at a time, from a socket or binary stream.

    The end-of-line byte is kept. At most maxlen - 1 bytes are read. An
    empty result means end of input; read errors propagate as OSError.
    """
    stop = _eol_code(eol)
    line = bytearray()
    while len(line) < maxlen - 1:
        byte = _read_byte(stream)
        if not byte:
            break
        line += byte
        if byte[0] == stop:
            break
    return bytes(line)


def rf_encode(data: Data, flags: SendFlag = SendFlag.NONE) -> bytes:
    """Return data as it is to be sent over the radio link.

    EOL_XLATE turns each newline into a carriage return; ADD_EOL appends a
    final carriage return.
    """
    raw = _as_bytes(data)
    if flags & SendFlag.EOL_XLATE:
        raw = raw.replace(b"\n", b"\r")
    if flags & SendFlag.ADD_EOL:
        raw += b"\r"
    return raw


def _writer(stream: Any):
    send = getattr(stream, "send", None)
    return send if send is not None else stream.write


def sendrf(stream: Any, data: Data, flags: SendFlag = SendFlag.NONE) -> int:
    """Send data to a socket or binary stream after radio-link translation.

    A write that would block is retried with a growing delay (at most ten
    seconds); after fifteen successive such failures OSError is raised.
    Returns the number of bytes sent.
    """
    payload = rf_encode(data, flags)
    log.debug("sendrf(): [%s]", payload.decode("latin-1"))
    write = _writer(stream)
    view = memoryview(payload)
    sent = 0
    retries = 0
    while sent < len(payload):
        try:
            written = write(view[sent:])
        except BlockingIOError:
            delay = retries
            retries += 1
            if retries > _MAX_RETRIES:
                log.error("ERROR: sendrf(): giving up after %d attempts.", retries)
                raise OSError(
                    errno.EAGAIN, f"sendrf(): giving up after {retries} attempts"
                ) from None
            if delay <= 0:
                log.debug("sendrf(): write retry")
                continue
            delay = min(delay, _MAX_DELAY)
            log.debug("sendrf(): write retry (delay = %d)", delay)
            time.sleep(delay)
            continue
        retries = 0
        if written is None:
            written = len(payload) - sent
        if written == 0:
            raise OSError(errno.EIO, "sendrf(): nothing could be written")
        log.debug("sendrf(): wrote %d of %d characters", written, len(payload) - sent)
        sent += written
    flush = getattr(stream, "flush", None)
    if flush is not None:
        flush()
    return sent


def _default_out() -> IO[bytes]:
    return sys.stdout.buffer


def err(message: Data, out: Optional[IO[bytes]] = None) -> NoReturn:
    """Send an error message with a final end of line, log it, and exit with status 1."""
    target = _default_out() if out is None else out
    try:
        sendrf(target, message, SendFlag.EOL_XLATE | SendFlag.ADD_EOL)
    except OSError as exc:
        log.debug("err(): could not send message (%s)", exc)
    text = message if isinstance(message, str) else bytes(message).decode("latin-1")
    log.error("Logout %s ERROR!", text)
    raise SystemExit(1)


def _say(out: IO[bytes], level: int, text: str) -> None:
    log.log(level, "%s", text)
    out.write(text.encode("utf-8"))
    flush = getattr(out, "flush", None)
    if flush is not None:
        flush()


def cms_connect(
    node: Any, timeout: Optional[float] = CONNECT_TIMEOUT, out: Optional[IO[bytes]] = None
) -> socket.socket:
    """Open a TCP connection to a CMS host and return the blocking socket.

    Progress and failure messages are written to out (stdout by default).
    Raises ConnectError when the host is unknown, the connection times out
    or is refused.
    """
    target = _default_out() if out is None else out
    host, port = node.host, node.port

    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    except OSError:
        err("FATAL ERROR! Could not create socket\n", target)

    _say(target, logging.DEBUG, f"INFO: Host Name {host}, Port {port} \r\n")

    try:
        address = socket.gethostbyname(host)
    except (socket.gaierror, socket.herror, UnicodeError):
        sock.close()
        text = f"ERROR: Unknown host {host}. Skipping...\r\n"
        _say(target, logging.ERROR, text)
        raise ConnectError(text.strip(), host) from None

    log.debug("Setting socket to non-blocking...")
    sock.setblocking(False)
    rc = sock.connect_ex((address, port))
    if rc == 0:
        log.debug("cms_connect(): Connected immediately.")
    elif rc in _IN_PROGRESS:
        _, writable, _ = select.select([], [sock], [], timeout)
        if not writable:
            sock.close()
            text = f"ERROR: Timeout connecting to node {host}. Skipping...\r\n"
            _say(target, logging.ERROR, text)
            raise ConnectError(text.strip(), host)
        try:
            status = sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)
        except OSError as exc:
            sock.close()
            text = (
                f"ERROR: getsockopt()failed for node {host} "
                f"(errno = {exc.errno or 0}). Skipping...\r\n"
            )
            _say(target, logging.CRITICAL, text)
            raise ConnectError(text.strip(), host) from exc
        if status != 0:
            sock.close()
            text = f"Connection failed (SO_ERROR = {status})\r\n"
            _say(target, logging.ERROR, text)
            raise ConnectError(text.strip(), host)
        _say(target, logging.DEBUG, "Connected\r\n")
    else:
        sock.close()
        text = "FATAL ERROR: connection failed\r\n"
        _say(target, logging.CRITICAL, text)
        raise ConnectError(text.strip(), host)

    log.debug("Setting socket back to blocking...")
    sock.setblocking(True)
    return sock


def send_datagram(host: str, port: Union[int, str], message: Data) -> int:
    """Send one UDP datagram to host:port (IPv4 or IPv6).

    Returns the number of bytes sent; raises OSError if the address cannot
    be resolved, no address can be connected, or sending fails.
    """
    payload = _as_bytes(message)
    log.debug(
        'send_datagram(host="%s", port="%s", msg="%s", msg_len=%d)',
        host, port, payload.decode("latin-1"), len(payload),
    )
    try:
        infos = socket.getaddrinfo(host, port, socket.AF_UNSPEC, socket.SOCK_DGRAM)
    except socket.gaierror as exc:
        log.error("ERROR: getaddrinfo() failed (%s)", exc)
        raise
    if not infos:
        log.error("ERROR address lookup returned no results")
        raise OSError(f"address lookup for {host} returned no results")

    sock: Optional[socket.socket] = None
    for family, socktype, proto, _, address in infos:
        try:
            candidate = socket.socket(family, socktype, proto)
        except OSError as exc:
            log.info(
                "INFO: send_datagram(): failed socket() (errno = %d). Continuing...",
                exc.errno or 0,
            )
            continue
        try:
            candidate.connect(address)
        except OSError as exc:
            log.info(
                "INFO: send_datagram(): failed connect() (errno = %d). Continuing...",
                exc.errno or 0,
            )
            candidate.close()
            continue
        sock = candidate
        break

    if sock is None:
        log.error("ERROR: send_datagram(): failed to connect.")
        raise OSError(f"send_datagram(): failed to connect to {host}")

    with sock:
        return sock.send(payload)