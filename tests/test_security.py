"""Test password hashing and bearer tokens."""
import base64
import hashlib
import hmac
import json

import pytest

from core.security import (
    InvalidTokenError,
    decode_token,
    hash_password,
    issue_token,
    verify_password,
)

SECRET = "test-secret"


def test_password_hash_verifies():
    stored = hash_password("hunter2", iterations=1000)
    assert stored.startswith("pbkdf2_sha256$1000$")
    assert verify_password("hunter2", stored)
    assert not verify_password("hunter3", stored)


def test_password_hashes_are_salted():
    assert hash_password("same", iterations=1000) != hash_password("same", iterations=1000)


def test_verify_rejects_garbage_hash():
    assert not verify_password("x", "not-a-hash")
    assert not verify_password("x", "md5$1$salt$abc")


def test_token_round_trip():
    token = issue_token(7, "a@test.test", SECRET, expires_in=60, now=1_000)
    claims = decode_token(token, SECRET, now=1_030)
    assert claims.user_id == 7
    assert claims.email == "a@test.test"
    assert claims.issued_at == 1_000
    assert claims.expires_at == 1_060


def test_expired_token():
    token = issue_token(7, "a@test.test", SECRET, expires_in=60, now=1_000)
    with pytest.raises(InvalidTokenError, match="expired"):
        decode_token(token, SECRET, now=1_060)


def test_wrong_secret():
    token = issue_token(7, "a@test.test", SECRET, expires_in=60)
    with pytest.raises(InvalidTokenError, match="signature"):
        decode_token(token, "other-secret")


def test_tampered_payload():
    header, _, signature = issue_token(7, "a@test.test", SECRET, expires_in=60).split(".")
    forged = base64.urlsafe_b64encode(
        json.dumps({"sub": "1", "email": "a@test.test", "iat": 0, "exp": 9_999_999_999}).encode()
    ).rstrip(b"=").decode()
    with pytest.raises(InvalidTokenError):
        decode_token(f"{header}.{forged}.{signature}", SECRET)


@pytest.mark.parametrize("token", ["", "abc", "a.b", "a.b.c.d", "a.b.\u00e9"])
def test_malformed_token(token):
    with pytest.raises(InvalidTokenError):
        decode_token(token, SECRET)


def _signed(header, payload):
    def enc(obj):
        return base64.urlsafe_b64encode(json.dumps(obj).encode()).rstrip(b"=").decode()

    signing_input = f"{enc(header)}.{enc(payload)}"
    mac = hmac.new(SECRET.encode(), signing_input.encode(), hashlib.sha256).digest()
    return f"{signing_input}.{base64.urlsafe_b64encode(mac).rstrip(b'=').decode()}"


def test_rejects_other_algorithms():
    token = _signed({"alg": "none"}, {"sub": "1", "email": "a", "iat": 0, "exp": 9_999_999_999})
    with pytest.raises(InvalidTokenError, match="algorithm"):
        decode_token(token, SECRET)


def test_rejects_non_object_claims():
    token = _signed({"alg": "HS256"}, [1, 2, 3])
    with pytest.raises(InvalidTokenError, match="malformed"):
        decode_token(token, SECRET)
