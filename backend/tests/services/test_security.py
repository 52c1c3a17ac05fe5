"""Auth Security — bcrypt hashing and session token round trips."""

import jwt
import pytest

from aixchange.services.security import (
    create_session_token, decode_session_token, hash_password, verify_password,
)

SECRET = "unit-test-secret-0123456789abcdef"


def test_hash_and_verify():
    hashed = hash_password("hunter22")
    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("hunter23", hashed)


def test_verify_without_hash():
    assert not verify_password("anything", None)
    assert not verify_password("", hash_password("x123456"))


def test_verify_with_malformed_hash():
    assert not verify_password("hunter22", "not-a-bcrypt-hash")


def test_empty_password_cannot_be_hashed():
    with pytest.raises(ValueError):
        hash_password("")


def test_token_round_trip():
    token = create_session_token(
        user_id="u1", role="ADMIN", secret=SECRET, algorithm="HS256", expire_minutes=5,
    )
    payload = decode_session_token(token, secret=SECRET, algorithm="HS256")
    assert payload["sub"] == "u1"
    assert payload["role"] == "ADMIN"
    assert payload["exp"] - payload["iat"] == 300


def test_expired_token_is_rejected():
    token = create_session_token(
        user_id="u1", role="USER", secret=SECRET, algorithm="HS256", expire_minutes=-1,
    )
    assert decode_session_token(token, secret=SECRET, algorithm="HS256") is None


def test_wrong_secret_is_rejected():
    token = create_session_token(
        user_id="u1", role="USER", secret=SECRET, algorithm="HS256", expire_minutes=5,
    )
    assert decode_session_token(token, secret=SECRET + "x", algorithm="HS256") is None


def test_foreign_token_type_is_rejected():
    token = jwt.encode({"sub": "u1", "type": "refresh"}, SECRET, algorithm="HS256")
    assert decode_session_token(token, secret=SECRET, algorithm="HS256") is None


def test_blank_token():
    assert decode_session_token("  ", secret=SECRET, algorithm="HS256") is None
