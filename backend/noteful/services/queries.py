"""Owner-scoped reads for notes, folders and tags."""
from __future__ import annotations

from typing import Any, Optional

from noteful.services.errors import NotFoundError
from noteful.services.validation import validate_object_id
from noteful.storage.document_store import DocumentStore
from noteful.storage.filters import Filter, Sort, eq, icontains, in_, where

NOTES = "notes"
FOLDERS = "folders"
TAGS = "tags"

NOTE_SORT = Sort("updatedAt", descending=True)
NAME_SORT = Sort("name")


def owned(owner_id: str) -> Filter:
    return where(eq("ownerId", owner_id))


def note_filter(
    owner_id: str,
    search_term: Optional[str] = None,
    folder_id: Optional[str] = None,
    tag_id: Optional[str] = None,
) -> Filter:
    flt = owned(owner_id)
    if folder_id:
        flt = flt.and_(eq("folderId", validate_object_id(folder_id, "folderId")))
    if tag_id:
        flt = flt.and_(eq("tags", validate_object_id(tag_id, "tagId")))
    if search_term:
        flt = flt.or_(icontains("title", search_term), icontains("content", search_term))
    return flt


def name_filter(owner_id: str, search_term: Optional[str] = None) -> Filter:
    flt = owned(owner_id)
    if search_term:
        flt = flt.and_(icontains("name", search_term))
    return flt


def by_id(doc_id: str, owner_id: str) -> Filter:
    return where(eq("id", validate_object_id(doc_id)), eq("ownerId", owner_id))


async def populate_tags(store: DocumentStore, notes: list[dict[str, Any]], owner_id: str) -> list[dict[str, Any]]:
    """Replace each note's tag ids with the tag documents, keeping the note's order."""
    wanted = {t for n in notes for t in n.get("tags", [])}
    tags_by_id: dict[str, dict[str, Any]] = {}
    if wanted:
        found = await store.find(TAGS, owned(owner_id).and_(in_("id", wanted)))
        tags_by_id = {t["id"]: t for t in found}

    out = []
    for n in notes:
        doc = dict(n)
        doc["tags"] = [tags_by_id[t] for t in n.get("tags", []) if t in tags_by_id]
        out.append(doc)
    return out


async def list_notes(
    store: DocumentStore,
    owner_id: str,
    search_term: Optional[str] = None,
    folder_id: Optional[str] = None,
    tag_id: Optional[str] = None,
) -> list[dict[str, Any]]:
    flt = note_filter(owner_id, search_term=search_term, folder_id=folder_id, tag_id=tag_id)
    notes = await store.find(NOTES, flt, sort=NOTE_SORT)
    return await populate_tags(store, notes, owner_id)


async def get_note(store: DocumentStore, note_id: str, owner_id: str) -> dict[str, Any]:
    note = await store.find_one(NOTES, by_id(note_id, owner_id))
    if note is None:
        raise NotFoundError("Note not found")
    return (await populate_tags(store, [note], owner_id))[0]


async def list_folders(store: DocumentStore, owner_id: str, search_term: Optional[str] = None) -> list[dict[str, Any]]:
    return await store.find(FOLDERS, name_filter(owner_id, search_term), sort=NAME_SORT)


async def get_folder(store: DocumentStore, folder_id: str, owner_id: str) -> dict[str, Any]:
    folder = await store.find_one(FOLDERS, by_id(folder_id, owner_id))
    if folder is None:
        raise NotFoundError("Folder not found")
    return folder


async def list_tags(store: DocumentStore, owner_id: str, search_term: Optional[str] = None) -> list[dict[str, Any]]:
    return await store.find(TAGS, name_filter(owner_id, search_term), sort=NAME_SORT)


async def get_tag(store: DocumentStore, tag_id: str, owner_id: str) -> dict[str, Any]:
    tag = await store.find_one(TAGS, by_id(tag_id, owner_id))
    if tag is None:
        raise NotFoundError("Tag not found")
    return tag
