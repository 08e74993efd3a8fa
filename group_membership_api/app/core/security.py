"""
Security helpers for password hashing and bearer-token authentication.

This module implements a lightweight JSON Web Token (JWT) mechanism
using HMAC-SHA256 signatures and base64url encoding.  Tokens embed
arbitrary claims and an expiration timestamp (``exp``).  A secret key
from the application settings is used to sign and verify the token.
Passwords are hashed with PBKDF2-HMAC-SHA256 and a random salt.
"""

import base64
import hashlib
import hmac
import json
import os
import sqlite3
import time
from typing import Any, Dict, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .config import settings
from .db import get_db
from .errors import UnauthorizedError


PBKDF2_ITERATIONS = 100_000


def _b64_url_encode(data: bytes) -> str:
    """Base64-url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64-url encoded string, adding padding if necessary."""
    padding = '=' * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).digest()


def create_access_token(data: Dict[str, Any], expires_delta: Optional[int] = None) -> str:
    """Create a signed JWT token with the given payload.

    The payload is extended with an ``exp`` field representing the
    expiration time as a UNIX timestamp.  Clients send the token in the
    ``Authorization`` header as ``Bearer <token>``.

    Parameters
    ----------
    data : dict
        Claims to embed in the token (e.g. {"sub": "omegaup"}).
    expires_delta : Optional[int]
        Lifetime of the token in seconds.  Defaults to
        ``settings.access_token_expire_minutes * 60``.

    Returns
    -------
    str
        A signed token ``header.payload.signature``.
    """
    to_encode = data.copy()
    exp_seconds = expires_delta or settings.access_token_expire_minutes * 60
    to_encode["exp"] = int(time.time()) + exp_seconds
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64_url_encode(json.dumps(header, separators=(',', ':')).encode("utf-8"))
    payload_b64 = _b64_url_encode(json.dumps(to_encode, separators=(',', ':')).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    signature_b64 = _b64_url_encode(_sign(signing_input, settings.secret_key))
    return f"{header_b64}.{payload_b64}.{signature_b64}"


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify and decode a token.

    Returns the payload when the signature matches and the token has not
    expired, otherwise ``None``.
    """
    parts = token.split('.')
    if len(parts) != 3:
        return None
    header_b64, payload_b64, signature_b64 = parts
    signing_input = f"{header_b64}.{payload_b64}".encode("utf-8")
    expected_sig = _sign(signing_input, settings.secret_key)
    try:
        actual_sig = _b64_url_decode(signature_b64)
        if not hmac.compare_digest(expected_sig, actual_sig):
            return None
        data = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
        if not isinstance(data, dict) or data.get("exp") is None:
            return None
        if int(data["exp"]) < int(time.time()):
            return None
    except (TypeError, ValueError):
        return None
    return data


security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    conn: sqlite3.Connection = Depends(get_db),
) -> Dict[str, Any]:
    """Dependency that resolves the authenticated user of the request.

    The token subject (``sub``) is a username.  Raises
    ``UnauthorizedError`` when the header is missing, the token is
    invalid or expired, or the user no longer exists.  On success
    returns the token payload extended with ``user_id``.
    """
    from ..services.user_service import UserService

    if credentials is None:
        raise UnauthorizedError("Not authenticated")
    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise UnauthorizedError("Invalid or expired token")
    user = await UserService(conn).resolve_user(payload.get("sub"))
    if user is None:
        raise UnauthorizedError("User no longer exists")
    payload["user_id"] = user["user_id"]
    return payload


def hash_password(password: str) -> str:
    """Hash a password using PBKDF2-HMAC with SHA-256.

    A 16-byte random salt is generated for each password.  The result
    holds the salt and the hash in hex separated by ``$``.
    """
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac('sha256', password.encode('utf-8'), salt, PBKDF2_ITERATIONS)
    return f"{salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a plain password against a stored ``salt$hash`` string."""
    if not hashed_password or '$' not in hashed_password:
        return False
    salt_hex, hash_hex = hashed_password.split('$', 1)
    try:
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    dk = hashlib.pbkdf2_hmac('sha256', plain_password.encode('utf-8'), salt, PBKDF2_ITERATIONS)
    return hmac.compare_digest(dk, stored_hash)
