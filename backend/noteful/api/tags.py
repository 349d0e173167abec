from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from noteful.api.deps import get_store
from noteful.models.notes import TagOut
from noteful.services import mutations, queries
from noteful.storage.document_store import DocumentStore
from noteful.utils.jwt_auth import Identity, get_current_user

router = APIRouter(prefix="/tags", tags=["tags"])


@router.get("", response_model=list[TagOut])
async def list_tags(
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    user: Identity = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> list[dict]:
    return await queries.list_tags(store, user.id, search_term=search_term)


@router.get("/{tag_id}", response_model=TagOut)
async def get_tag(
    tag_id: str,
    user: Identity = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> dict:
    return await queries.get_tag(store, tag_id, user.id)


@router.post("", response_model=TagOut, status_code=201)
async def create_tag(
    response: Response,
    payload: Any = Body(None),
    user: Identity = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> dict:
    tag = await mutations.create_tag(store, payload, user.id)
    response.headers["Location"] = f"{router.prefix}/{tag['id']}"
    return tag


@router.put("/{tag_id}", response_model=TagOut)
async def update_tag(
    tag_id: str,
    payload: Any = Body(None),
    user: Identity = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> dict:
    return await mutations.update_tag(store, tag_id, payload, user.id)


# the tag is pulled from every note that carries it
@router.delete("/{tag_id}", status_code=204)
async def delete_tag(
    tag_id: str,
    user: Identity = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> None:
    await mutations.delete_tag(store, tag_id, user.id)
    return None
