from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from noteful.api.deps import get_store
from noteful.models.notes import NoteOut
from noteful.services import mutations, queries
from noteful.storage.document_store import DocumentStore
from noteful.utils.jwt_auth import Identity, get_current_user

router = APIRouter(prefix="/notes", tags=["notes"])


@router.get("", response_model=list[NoteOut], response_model_exclude_none=True)
async def list_notes(
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    folder_id: Optional[str] = Query(None, alias="folderId"),
    tag_id: Optional[str] = Query(None, alias="tagId"),
    user: Identity = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> list[dict]:
    return await queries.list_notes(store, user.id, search_term=search_term, folder_id=folder_id, tag_id=tag_id)


@router.get("/{note_id}", response_model=NoteOut, response_model_exclude_none=True)
async def get_note(
    note_id: str,
    user: Identity = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> dict:
    return await queries.get_note(store, note_id, user.id)


@router.post("", response_model=NoteOut, response_model_exclude_none=True, status_code=201)
async def create_note(
    response: Response,
    payload: Any = Body(None),
    user: Identity = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> dict:
    note = await mutations.create_note(store, payload, user.id)
    response.headers["Location"] = f"{router.prefix}/{note['id']}"
    return note


@router.put("/{note_id}", response_model=NoteOut, response_model_exclude_none=True)
async def update_note(
    note_id: str,
    payload: Any = Body(None),
    user: Identity = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> dict:
    return await mutations.update_note(store, note_id, payload, user.id)


@router.delete("/{note_id}", status_code=204)
async def delete_note(
    note_id: str,
    user: Identity = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> None:
    await mutations.delete_note(store, note_id, user.id)
    return None
