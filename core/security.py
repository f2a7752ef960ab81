"""Password hashing and signed bearer tokens.

Passwords: PBKDF2-HMAC-SHA256 with a random per-user salt, stored as
``pbkdf2_sha256$<iterations>$<salt>$<hash>``.

Tokens: compact HS256 JWS (header.payload.signature, base64url) carrying
``sub`` (user id), ``email``, ``iat`` and ``exp``. Signatures are compared
in constant time.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import secrets
import time
from dataclasses import dataclass
from typing import Any

PBKDF2_ITERATIONS = 260_000
_HASH_SCHEME = "pbkdf2_sha256"
_TOKEN_HEADER = {"alg": "HS256", "typ": "JWT"}


class InvalidTokenError(Exception):
    """Token is malformed, tampered with, or expired."""


# ---------------------------------------------------------------------------
# Passwords
# ---------------------------------------------------------------------------

def hash_password(password: str, iterations: int = PBKDF2_ITERATIONS) -> str:
    salt = secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), salt.encode(), iterations
    ).hex()
    return f"{_HASH_SCHEME}${iterations}${salt}${digest}"


def verify_password(password: str, stored: str) -> bool:
    try:
        scheme, iterations, salt, digest = stored.split("$")
        rounds = int(iterations)
    except ValueError:
        return False
    if scheme != _HASH_SCHEME:
        return False
    candidate = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), salt.encode(), rounds
    ).hex()
    return hmac.compare_digest(candidate, digest)


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

@dataclass
class TokenClaims:
    user_id: int
    email: str
    issued_at: int
    expires_at: int


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def _b64decode(segment: str) -> bytes:
    padding = "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(segment + padding)


def _sign(signing_input: str, secret: str) -> str:
    mac = hmac.new(secret.encode(), signing_input.encode(), hashlib.sha256)
    return _b64encode(mac.digest())


def issue_token(
    user_id: int,
    email: str,
    secret: str,
    expires_in: int,
    now: float | None = None,
) -> str:
    issued = int(now if now is not None else time.time())
    payload = {"sub": str(user_id), "email": email, "iat": issued, "exp": issued + expires_in}
    header_b64 = _b64encode(json.dumps(_TOKEN_HEADER, separators=(",", ":")).encode())
    payload_b64 = _b64encode(json.dumps(payload, separators=(",", ":")).encode())
    signing_input = f"{header_b64}.{payload_b64}"
    return f"{signing_input}.{_sign(signing_input, secret)}"


def decode_token(token: str, secret: str, now: float | None = None) -> TokenClaims:
    """Verify signature and expiry, then return the claims."""
    # compare_digest only accepts ASCII str
    if not token.isascii():
        raise InvalidTokenError("malformed token")
    try:
        header_b64, payload_b64, signature = token.split(".")
    except ValueError:
        raise InvalidTokenError("malformed token") from None

    expected = _sign(f"{header_b64}.{payload_b64}", secret)
    if not hmac.compare_digest(expected, signature):
        raise InvalidTokenError("bad signature")

    try:
        header: dict[str, Any] = json.loads(_b64decode(header_b64))
        payload: dict[str, Any] = json.loads(_b64decode(payload_b64))
        if not isinstance(header, dict) or not isinstance(payload, dict):
            raise InvalidTokenError("malformed claims")
        claims = TokenClaims(
            user_id=int(payload["sub"]),
            email=str(payload["email"]),
            issued_at=int(payload["iat"]),
            expires_at=int(payload["exp"]),
        )
    except (ValueError, KeyError, TypeError):
        raise InvalidTokenError("malformed claims") from None

    if header.get("alg") != "HS256":
        raise InvalidTokenError("unsupported algorithm")

    current = now if now is not None else time.time()
    if current >= claims.expires_at:
        raise InvalidTokenError("token expired")
    return claims
