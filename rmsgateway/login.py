"""Login exchanges with a CMS host: telnet style and secure gateway login."""

from __future__ import annotations

import logging
import re
import socket
import time
from typing import Any, Optional, Union

from rmsgateway.challenge import sgl_challenge_response
from rmsgateway.net import readln
from rmsgateway.rms import SGLState

log = logging.getLogger(__name__)

Text = Union[str, bytes]

_RECEIVE_LIMIT = 2048
_LINE_LIMIT = 1024
_PROMPT_TRIES = 3
_PROMPT_RETRY_DELAY = 2
_SEND_TIMEOUT = 15
_CHALLENGE = re.compile(r";SQ:\s*(\S{1,8})")
_FAILED_STATES = {SGLState.CALLSIGN_FAIL, SGLState.CHALLENGE_FAIL, SGLState.BAD_STATE}


class ExpectTimeout(TimeoutError):
    """Raised when the expected text does not arrive in time."""

    def __init__(self, expect: str, received: bytes) -> None:
        super().__init__(f"timed out waiting for {expect!r}")
        self.expect = expect
        self.received = received


class LoginError(Exception):
    """Raised when a login exchange with a CMS host fails."""

    def __init__(self, message: str, state: Optional[SGLState] = None) -> None:
        super().__init__(message)
        self.state = state


def _as_bytes(value: Optional[Text]) -> bytes:
    if value is None:
        return b""
    return value.encode("latin-1") if isinstance(value, str) else bytes(value)


def _read_one(conn: Any, deadline: float, expect: str, received: bytes) -> bytes:
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise ExpectTimeout(expect, received)
    recv = getattr(conn, "recv", None)
    if recv is None:
        return conn.read(1) or b""
    conn.settimeout(remaining)
    try:
        return recv(1)
    except socket.timeout:
        raise ExpectTimeout(expect, received) from None


def _write_all(conn: Any, data: bytes) -> None:
    write = getattr(conn, "send", None) or conn.write
    try:
        written = write(data)
    except OSError as exc:
        log.error("expect_send(): write error (errno = %d)", exc.errno or 0)
        raise LoginError(f"write error: {exc}") from exc
    if written is not None and written < len(data):
        log.error("ERROR: expect_send() short write")
        raise LoginError("short write")
    flush = getattr(conn, "flush", None)
    if flush is not None:
        flush()


def expect_send(conn: Any, expect: Text = "", send: Text = "", timeout: float = _SEND_TIMEOUT) -> bytes:
    """Wait for expect to arrive on conn, then send send.

    Either may be empty. Returns the bytes received while waiting. Raises
    ExpectTimeout if expect does not arrive within timeout seconds (or the
    input ends first) and LoginError on read or write errors.
    """
    wanted = _as_bytes(expect)
    outgoing = _as_bytes(send)
    expect_text = wanted.decode("latin-1")
    log.debug("expect_send(): expect [%s], send [%s]", expect_text, outgoing.decode("latin-1"))

    received = bytearray()
    if wanted:
        deadline = time.monotonic() + timeout
        previous = getattr(conn, "gettimeout", lambda: None)()
        try:
            while wanted not in received:
                try:
                    byte = _read_one(conn, deadline, expect_text, bytes(received))
                except OSError as exc:
                    if isinstance(exc, ExpectTimeout):
                        raise
                    log.error("expect_send(): read error (errno = %d)", exc.errno or 0)
                    raise LoginError(f"read error: {exc}") from exc
                if not byte:
                    raise ExpectTimeout(expect_text, bytes(received))
                received += byte
                if len(received) > _RECEIVE_LIMIT:
                    del received[: len(received) - _RECEIVE_LIMIT]
        except ExpectTimeout:
            log.warning(
                "WARNING: expect_send(): expect timeout; buffer = [%s]",
                received.decode("latin-1"),
            )
            raise
        finally:
            if hasattr(conn, "settimeout"):
                conn.settimeout(previous)
        log.debug("expect_send() got [%s]", received.decode("latin-1"))

    if outgoing:
        _write_all(conn, outgoing)
    return bytes(received)


def telnet_process(
    conn: Any, password: str, usercall: str, gwcall: str, frequency: str, mode: str
) -> None:
    """Run the older telnet-style login chat; raises LoginError on failure."""
    log.debug("running telnet_process...")
    try:
        expect_send(conn, "Callsign :", f".{usercall}\r", 15)
        expect_send(conn, "Password :", f"{password} {gwcall} {frequency} {mode}\r", 20)
    except ExpectTimeout as exc:
        raise LoginError(str(exc)) from exc


def _read_line(conn: Any) -> str:
    try:
        line = readln(conn, _LINE_LIMIT, b"\r")
    except OSError as exc:
        log.debug("readln() failed (%s)", exc)
        return ""
    log.debug("readln() read %d bytes", len(line))
    return line.decode("latin-1")


def sgl_process(conn: Any, password: str, usercall: str, gwcall: str) -> SGLState:
    """Run the secure gateway login exchange.

    Returns the final state (RESPONSE_SENT or LOGIN_COMPLETE); raises
    LoginError, carrying the failed state, when the login fails.
    """
    log.debug("running sgl_process...")
    state = SGLState.CALLSIGN
    prompt_misses = 0
    running = True

    while running:
        line = _read_line(conn)
        if line:
            log.debug("sgl_process(): readln() returned [%s]", line)

        if state is SGLState.CALLSIGN:
            if not line:
                state, running = SGLState.CALLSIGN_FAIL, False
            elif line == "\r":
                log.debug("eat CR1")
            elif "callsign :" in line.lower():
                log.debug("sgl_process(): got login prompt: [%s]", line)
                try:
                    expect_send(conn, "", f"{usercall} {gwcall}\r", _SEND_TIMEOUT)
                except LoginError:
                    state, running = SGLState.CALLSIGN_FAIL, False
                else:
                    state = SGLState.CHALLENGE
            else:
                log.debug("sgl_process(): login prompt not seen, got: [%s]", line)
                if prompt_misses > _PROMPT_TRIES:
                    state, running = SGLState.CALLSIGN_FAIL, False
                else:
                    prompt_misses += 1
                    time.sleep(_PROMPT_RETRY_DELAY)
                    try:
                        expect_send(conn, "", "\r", _SEND_TIMEOUT)
                    except LoginError:
                        state, running = SGLState.CALLSIGN_FAIL, False
        elif state is SGLState.CHALLENGE:
            if not line:
                state, running = SGLState.CHALLENGE_FAIL, False
            elif line == "\r":
                log.debug("eat CR2")
            elif ";sq: " in line.lower():
                match = _CHALLENGE.match(line)
                challenge = match.group(1) if match else ""
                log.debug("challenge code from CMS = [%s]", challenge)
                response = sgl_challenge_response(challenge, password)
                log.debug("computed response code = [%s]", response)
                try:
                    expect_send(conn, "", f";SR: {response} 25000001 20\r", _SEND_TIMEOUT)
                except LoginError:
                    state = SGLState.LOGIN_COMPLETE
                else:
                    state = SGLState.RESPONSE_SENT
                running = False
            else:
                log.warning("WARNING: SGL Challenge not received (saw: [%s]", line)
                state, running = SGLState.CHALLENGE_FAIL, False
        else:
            log.error("ERROR: sgl_process hit IMPOSSIBLE STATE: %d", state)
            state, running = SGLState.BAD_STATE, False

    if state in _FAILED_STATES:
        log.debug("sgl_process(): failed")
        raise LoginError(f"secure gateway login failed ({state.name})", state)
    log.debug("sgl_process(): succeeded")
    return state


def cms_login(conn: Any, config: Any, channel: Any, usercall: str) -> SGLState:
    """Log usercall in to a CMS host through the gateway channel."""
    if channel is None:
        raise LoginError("no channel information for login")
    if config is None:
        raise LoginError("no configuration for login")
    log.info("*** Secure Gateway Logon")
    return sgl_process(conn, channel.password, usercall, channel.callsign)