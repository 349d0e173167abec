import asyncio
import logging
from typing import Any, Optional

from noteful.services.errors import DuplicateNameError
from noteful.services.validation import validate_new_user
from noteful.storage.document_store import DocumentStore, DuplicateKeyError
from noteful.storage.filters import eq, where
from noteful.utils.auth_hash import hash_password, verify_password

logger = logging.getLogger(__name__)

USERS = "users"


async def register_user(store: DocumentStore, payload: Any) -> dict[str, Any]:
    draft = validate_new_user(payload)
    doc = {
        "username": draft.username,
        "password": await asyncio.to_thread(hash_password, draft.password),
    }
    if draft.full_name:
        doc["fullName"] = draft.full_name
    try:
        user = await store.create(USERS, doc)
    except DuplicateKeyError:
        raise DuplicateNameError("The username already exists", field="username")
    logger.info("user registered id=%s", user["id"])
    return user


async def authenticate(store: DocumentStore, username: str, password: str) -> Optional[dict[str, Any]]:
    """Return the user record if the credentials match, otherwise None."""
    user = await store.find_one(USERS, where(eq("username", username)))
    if user is None:
        return None
    if not await asyncio.to_thread(verify_password, password, user.get("password")):
        logger.info("failed login for username=%s", username)
        return None
    return user
