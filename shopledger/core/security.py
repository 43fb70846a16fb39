from __future__ import annotations

import hashlib
import hmac
import secrets
from typing import Optional

from fastapi import Request

from shopledger.config import Settings
from shopledger.core.exceptions import AuthenticationError

SESSION_USER_KEY = "user"


def new_salt() -> str:
    return secrets.token_hex(16)


def hash_password(password: str, salt: str, rounds: int) -> str:
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        salt.encode("utf-8"),
        rounds,
    )
    return digest.hex()


def verify_password(password: str, salt: str, expected_hash: str, rounds: int) -> bool:
    computed = hash_password(password, salt, rounds)
    return hmac.compare_digest(computed, expected_hash)


def load_api_keys(settings: Settings) -> set[str]:
    keys = set()
    if settings.API_KEYS:
        for value in settings.API_KEYS.split(","):
            value = value.strip()
            if value:
                keys.add(value)
    return keys


def _matches_api_key(api_key: Optional[str], keys: set[str]) -> bool:
    if not api_key:
        return False
    return any(hmac.compare_digest(api_key, key) for key in keys)


def authenticate_request(request: Request, settings: Settings) -> Optional[dict]:
    if not settings.AUTH_REQUIRED:
        return None

    username = request.session.get(SESSION_USER_KEY)
    if username:
        return {"auth_type": "session", "username": username}

    keys = load_api_keys(settings)
    if _matches_api_key(request.headers.get(settings.API_KEY_HEADER), keys):
        return {"auth_type": "api_key"}

    raise AuthenticationError()
