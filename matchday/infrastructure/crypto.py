"""PIN hashing and claim token signing.

PINs are hashed with scrypt (memory-hard) using a fresh 16-byte salt.
Claim tokens are ``<base64url(json payload)>.<hex hmac-sha256>``.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import secrets
from typing import Any, Mapping, Optional

SALT_BYTES = 16
SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
KEY_LEN = 32


def new_salt_hex() -> str:
    return secrets.token_hex(SALT_BYTES)


def hash_pin(pin: str, salt_hex: str) -> str:
    derived = hashlib.scrypt(
        pin.encode("utf-8"),
        salt=bytes.fromhex(salt_hex),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=KEY_LEN,
    )
    return derived.hex()


def pin_matches(pin: str, salt_hex: str, expected_hash: str) -> bool:
    return hmac.compare_digest(hash_pin(pin, salt_hex), expected_hash)


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)


def sign_payload(payload: Mapping[str, Any], secret: str) -> str:
    body = _b64encode(json.dumps(dict(payload), sort_keys=True, separators=(",", ":")).encode())
    sig = hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()
    return f"{body}.{sig}"


def verify_token(token: str, secret: str) -> Optional[dict[str, Any]]:
    """Return the payload of a correctly signed token, or ``None``."""
    if not isinstance(token, str) or token.count(".") != 1:
        return None
    body, sig = token.split(".", 1)
    expected = hmac.new(secret.encode("utf-8"), body.encode("utf-8"), hashlib.sha256).hexdigest()
    if not hmac.compare_digest(sig.encode("utf-8"), expected.encode("utf-8")):
        return None
    try:
        payload = json.loads(_b64decode(body))
    except (ValueError, UnicodeDecodeError):
        return None
    return payload if isinstance(payload, dict) else None
