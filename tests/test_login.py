import io
import socket
from unittest import mock

import pytest

from rmsgateway.challenge import sgl_challenge_response
from rmsgateway.channels import Channel
from rmsgateway.config import Config
from rmsgateway.login import (
    ExpectTimeout,
    LoginError,
    cms_login,
    expect_send,
    sgl_process,
    telnet_process,
)
from rmsgateway.rms import SGLState


class FakeConn:
    def __init__(self, incoming=b""):
        self.incoming = io.BytesIO(incoming)
        self.written = bytearray()

    def read(self, n):
        return self.incoming.read(n)

    def write(self, data):
        self.written += bytes(data)
        return len(data)


class BrokenWriter(FakeConn):
    def write(self, data):
        raise OSError(32, "broken pipe")


def test_expect_send_waits_then_sends():
    conn = FakeConn(b"hello Callsign :rest")
    got = expect_send(conn, "Callsign :", "abc\r", 5)
    assert got == b"hello Callsign :"
    assert bytes(conn.written) == b"abc\r"


def test_expect_send_eof_is_timeout():
    conn = FakeConn(b"nothing here")
    with pytest.raises(ExpectTimeout) as info:
        expect_send(conn, "Password :", "x", 5)
    assert info.value.received == b"nothing here"
    assert bytes(conn.written) == b""


def test_expect_send_socket_timeout():
    left, right = socket.socketpair()
    with left, right:
        with pytest.raises(ExpectTimeout):
            expect_send(left, "never", "", 0.2)


def test_expect_send_write_error():
    with pytest.raises(LoginError):
        expect_send(BrokenWriter(), "", "data", 5)


def test_telnet_process_sends_credentials():
    conn = FakeConn(b"Callsign :Password :")
    password = "password"
    telnet_process(conn, password, "N0CALL", "N0CALL-10", "145050000", "1200")
    assert bytes(conn.written) == b".N0CALL\r" + b"password N0CALL-10 145050000 1200\r"


def test_telnet_process_missing_prompt():
    conn = FakeConn(b"Callsign :")
    with pytest.raises(LoginError):
        telnet_process(conn, "password", "N0CALL", "N0CALL-10", "1", "2")


def test_sgl_process_full_exchange():
    conn = FakeConn(b"\rCallsign :\r\r;SQ: 12345678\r")
    state = sgl_process(conn, "password", "N0CALL", "N0CALL-10")
    assert state is SGLState.RESPONSE_SENT
    response = sgl_challenge_response("12345678", "password")
    expected = b"N0CALL N0CALL-10\r" + f";SR: {response} 25000001 20\r".encode()
    assert bytes(conn.written) == expected


def test_sgl_process_prompt_case_insensitive():
    conn = FakeConn(b"CALLSIGN :\r;SQ: 00000001\r")
    assert sgl_process(conn, "password", "A", "B") is SGLState.RESPONSE_SENT
    assert bytes(conn.written).startswith(b"A B\r")


def test_sgl_process_no_input():
    with pytest.raises(LoginError) as info:
        sgl_process(FakeConn(b""), "password", "A", "B")
    assert info.value.state is SGLState.CALLSIGN_FAIL


def test_sgl_process_bad_challenge():
    conn = FakeConn(b"Callsign :\rsomething else\r")
    with pytest.raises(LoginError) as info:
        sgl_process(conn, "password", "A", "B")
    assert info.value.state is SGLState.CHALLENGE_FAIL


@mock.patch("rmsgateway.login.time.sleep")
def test_sgl_process_prompt_never_seen(sleep):
    conn = FakeConn(b"hello\r" * 6)
    with pytest.raises(LoginError) as info:
        sgl_process(conn, "password", "A", "B")
    assert info.value.state is SGLState.CALLSIGN_FAIL
    assert bytes(conn.written) == b"\r" * 4
    assert sleep.call_count == 4


def test_cms_login_requires_channel():
    with pytest.raises(LoginError):
        cms_login(FakeConn(), Config(gwcall="N0CALL"), None, "N0CALL")


def test_cms_login_requires_config():
    with pytest.raises(LoginError):
        cms_login(FakeConn(), None, Channel(callsign="N0CALL-10"), "N0CALL")


def test_cms_login_uses_channel_values():
    password = "password"
    channel = Channel(callsign="N0CALL-10", password=password)
    conn = FakeConn(b"Callsign :\r;SQ: 12345678\r")
    state = cms_login(conn, Config(gwcall="N0CALL"), channel, "W1AW")
    assert state is SGLState.RESPONSE_SENT
    assert bytes(conn.written).startswith(b"W1AW N0CALL-10\r")