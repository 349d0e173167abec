"""Password digests for user accounts, via passlib.

- hash_password(plain: str) -> str
- verify_password(plain: str, hashed: str) -> bool

bcrypt is preferred; if the bcrypt backend cannot be loaded the context falls
back to pbkdf2_sha256 so registration keeps working. `BCRYPT_ROUNDS` (int)
overrides the cost factor of whichever scheme ends up in use.
"""
from __future__ import annotations

import logging
import os
from typing import Optional

from passlib.context import CryptContext

logger = logging.getLogger(__name__)


def _rounds_from_env() -> Optional[int]:
    raw = os.environ.get("BCRYPT_ROUNDS")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer BCRYPT_ROUNDS=%r", raw)
        return None


def build_password_context(rounds: Optional[int] = None) -> CryptContext:
    settings = {"bcrypt__rounds": rounds} if rounds else {}
    ctx = CryptContext(schemes=["bcrypt"], deprecated="auto", **settings)
    try:
        ctx.hash("self-check")
        return ctx
    except Exception as exc:
        logger.warning("bcrypt backend unavailable (%s); using pbkdf2_sha256", exc)

    settings = {"pbkdf2_sha256__rounds": rounds} if rounds else {}
    return CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto", **settings)


pwd_context = build_password_context(_rounds_from_env())


def hash_password(plain: str) -> str:
    if plain is None:
        raise ValueError("Password must not be None")
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """True if `plain` matches the stored digest; malformed digests never match."""
    if plain is None or hashed is None:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False
