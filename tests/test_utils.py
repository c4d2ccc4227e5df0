import pytest

from projectchat.api.utils import create_access_token, redact_token, verify_token


@pytest.mark.parametrize("token", [None, ""])
def test_redact_missing_token(token):
    assert redact_token(token) == "<none>"


def test_redact_short_token_hides_everything():
    assert redact_token("abc") == "..."
    assert redact_token("a" * 20) == "..."


def test_redact_long_token_keeps_prefix_only():
    assert redact_token("a" * 20 + "b" * 20) == "a" * 20 + "..."


def test_token_round_trip_and_tamper():
    token = create_access_token({"sub": "user-1"})

    assert verify_token(token) == "user-1"
    assert verify_token(token + "x") is None
    assert verify_token("not.a.jwt") is None
