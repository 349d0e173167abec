from typing import Any

from fastapi import APIRouter, Body, Depends, Response

from noteful.api.deps import get_store
from noteful.models.auth import UserOut
from noteful.services.accounts import register_user
from noteful.storage.document_store import DocumentStore

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserOut, response_model_exclude_none=True, status_code=201)
async def register(
    response: Response,
    payload: Any = Body(None),
    store: DocumentStore = Depends(get_store),
) -> dict:
    user = await register_user(store, payload)
    response.headers["Location"] = f"{router.prefix}/{user['id']}"
    return user
