import asyncio
from typing import Optional, Sequence

from noteful.models.notes import NoteIn
from noteful.services.errors import InvalidReferenceError
from noteful.services.queries import FOLDERS, TAGS
from noteful.storage.document_store import DocumentStore
from noteful.storage.filters import eq, in_, where


async def resolve_folder(store: DocumentStore, folder_id: Optional[str], owner_id: str) -> None:
    if not folder_id:
        return
    n = await store.count(FOLDERS, where(eq("id", folder_id), eq("ownerId", owner_id)))
    if n == 0:
        raise InvalidReferenceError("folderId")


async def resolve_tags(store: DocumentStore, tag_ids: Optional[Sequence[str]], owner_id: str) -> None:
    if not tag_ids:
        return
    wanted = set(tag_ids)
    found = await store.find(TAGS, where(in_("id", wanted), eq("ownerId", owner_id)))
    if len({t["id"] for t in found}) != len(wanted):
        raise InvalidReferenceError("tags")


async def resolve_references(store: DocumentStore, draft: NoteIn, owner_id: str) -> None:
    """Check folder and tags concurrently.

    The first failure is raised; the other check is cancelled and awaited so
    its outcome is never left unretrieved.
    """
    tasks = [
        asyncio.ensure_future(resolve_folder(store, draft.folder_id, owner_id)),
        asyncio.ensure_future(resolve_tags(store, draft.tags, owner_id)),
    ]
    try:
        await asyncio.gather(*tasks)
    except BaseException:
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise
