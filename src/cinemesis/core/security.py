"""Password hashing and bearer token helpers."""
from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from cinemesis.core.settings import settings

_SCRYPT_N = 2**14
_SCRYPT_R = 8
_SCRYPT_P = 1
_SALT_BYTES = 16


def hash_password(password: str) -> str:
    """Return a salted scrypt digest encoded as ``scrypt$<salt>$<digest>``."""
    salt = secrets.token_bytes(_SALT_BYTES)
    digest = hashlib.scrypt(
        password.encode("utf-8"), salt=salt, n=_SCRYPT_N, r=_SCRYPT_R, p=_SCRYPT_P
    )
    return f"scrypt${salt.hex()}${digest.hex()}"


def verify_password(password: str, encoded: str) -> bool:
    """Check a plaintext password against a stored scrypt digest."""
    try:
        scheme, salt_hex, digest_hex = encoded.split("$")
        salt = bytes.fromhex(salt_hex)
        expected = bytes.fromhex(digest_hex)
    except ValueError:
        return False
    if scheme != "scrypt":
        return False
    candidate = hashlib.scrypt(
        password.encode("utf-8"), salt=salt, n=_SCRYPT_N, r=_SCRYPT_R, p=_SCRYPT_P
    )
    return hmac.compare_digest(candidate, expected)


def create_access_token(user_id: int, extra_claims: dict[str, str] | None = None) -> str:
    """Create JWT access token for user authentication."""
    to_encode: dict[str, object] = {"sub": str(user_id)}
    if extra_claims:
        to_encode.update(extra_claims)
    expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> int:
    """Return the user id carried by a bearer token.

    Raises:
        ValueError: If the token is malformed, expired or has no usable subject.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError as err:
        raise ValueError("Could not validate credentials") from err
    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise ValueError("Could not validate credentials")
    return int(subject)
