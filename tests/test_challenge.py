import pytest

from rmsgateway.challenge import SALT, challenged_password, sgl_challenge_response

PASSWORD = "password"


def test_empty_input_uses_md5_of_empty_string():
    # md5("") begins d4 1d 8c d9; top two bits of the fourth byte cleared
    assert challenged_password("", "", b"") == 0x198C1DD4


def test_challenge_and_password_are_concatenated():
    # md5("abc") begins 90 01 50 98
    assert challenged_password("a", "bc", b"") == 0x18500190
    assert challenged_password("ab", "c", b"") == challenged_password("a", "bc", b"")


def test_bytes_and_str_agree():
    assert challenged_password(b"12345678", b"password", SALT) == challenged_password(
        "12345678", PASSWORD, SALT
    )


def test_salt_is_limited_to_64_bytes():
    assert len(SALT) == 64
    assert challenged_password("12345678", PASSWORD, SALT + b"extra") == challenged_password(
        "12345678", PASSWORD, SALT
    )


def test_salt_stops_at_nul():
    assert challenged_password("x", "y", b"ab\x00cd") == challenged_password("x", "y", b"ab")


def test_password_stops_at_nul():
    assert challenged_password("x", "pw\x00junk", b"") == challenged_password("x", "pw", b"")


def test_salt_changes_result():
    assert challenged_password("12345678", PASSWORD, SALT) != challenged_password(
        "12345678", PASSWORD, b""
    )


@pytest.mark.parametrize("challenge", ["00000000", "12345678", "ABCDEFGH", "zz"])
def test_result_fits_in_thirty_bits(challenge):
    value = challenged_password(challenge, PASSWORD)
    assert 0 <= value < 2**30


@pytest.mark.parametrize("challenge", ["00000000", "12345678", "ABCDEFGH", "zz"])
def test_response_is_eight_digits(challenge):
    response = sgl_challenge_response(challenge, PASSWORD)
    assert len(response) == 8
    assert response.isdigit()


@pytest.mark.parametrize("challenge", ["00000000", "12345678", "ABCDEFGH"])
def test_response_is_tail_of_ten_digit_value(challenge):
    value = challenged_password(challenge, PASSWORD, SALT)
    response = sgl_challenge_response(challenge, PASSWORD)
    assert response == str(value).zfill(10)[-8:]
    assert int(response) == value % 100_000_000


def test_response_depends_on_challenge():
    responses = {sgl_challenge_response(f"{n:08d}", PASSWORD) for n in range(20)}
    assert len(responses) > 1


def test_response_depends_on_password():
    assert challenged_password("12345678", PASSWORD) != challenged_password("12345678", "secret")