from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from noteful.api.deps import get_store
from noteful.models.notes import FolderOut
from noteful.services import mutations, queries
from noteful.storage.document_store import DocumentStore
from noteful.utils.jwt_auth import Identity, get_current_user

router = APIRouter(prefix="/folders", tags=["folders"])


@router.get("", response_model=list[FolderOut])
async def list_folders(
    search_term: Optional[str] = Query(None, alias="searchTerm"),
    user: Identity = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> list[dict]:
    return await queries.list_folders(store, user.id, search_term=search_term)


@router.get("/{folder_id}", response_model=FolderOut)
async def get_folder(
    folder_id: str,
    user: Identity = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> dict:
    return await queries.get_folder(store, folder_id, user.id)


@router.post("", response_model=FolderOut, status_code=201)
async def create_folder(
    response: Response,
    payload: Any = Body(None),
    user: Identity = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> dict:
    folder = await mutations.create_folder(store, payload, user.id)
    response.headers["Location"] = f"{router.prefix}/{folder['id']}"
    return folder


@router.put("/{folder_id}", response_model=FolderOut)
async def update_folder(
    folder_id: str,
    payload: Any = Body(None),
    user: Identity = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> dict:
    return await mutations.update_folder(store, folder_id, payload, user.id)


# notes in the folder are kept; their folderId is cleared
@router.delete("/{folder_id}", status_code=204)
async def delete_folder(
    folder_id: str,
    user: Identity = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
) -> None:
    await mutations.delete_folder(store, folder_id, user.id)
    return None
