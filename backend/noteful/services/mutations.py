"""Create, replace and delete for notes, folders and tags.

Each mutation runs validate -> resolve references -> persist, and deletes of
folders and tags follow up with a cascade over the owner's notes. The cascade
is a separate store call: if it fails the deletion stays committed and the
failure is logged and reported on the returned `DeleteOutcome`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from noteful.models.notes import NameIn
from noteful.services.errors import DuplicateNameError, NotFoundError
from noteful.services.queries import FOLDERS, NOTES, TAGS, by_id, owned, populate_tags
from noteful.services.references import resolve_references
from noteful.services.validation import validate_folder, validate_note, validate_tag
from noteful.storage.document_store import DocumentStore, DuplicateKeyError, StoreError
from noteful.storage.filters import Clause, Update, eq

logger = logging.getLogger(__name__)

# optional note fields cleared by a replace when the payload leaves them out
_OPTIONAL_NOTE_FIELDS = ("content", "folderId")


@dataclass(frozen=True)
class DeleteOutcome:
    deleted: dict[str, Any]
    cascaded: int = 0
    cascade_error: Optional[str] = None


# ---- notes ----

async def create_note(store: DocumentStore, payload: Any, owner_id: str) -> dict[str, Any]:
    draft = validate_note(payload)
    await resolve_references(store, draft, owner_id)

    doc = draft.to_document()
    doc["ownerId"] = owner_id
    note = await store.create(NOTES, doc)
    logger.info("note created id=%s owner=%s", note["id"], owner_id)
    return (await populate_tags(store, [note], owner_id))[0]


async def update_note(store: DocumentStore, note_id: str, payload: Any, owner_id: str) -> dict[str, Any]:
    flt = by_id(note_id, owner_id)
    draft = validate_note(payload)
    await resolve_references(store, draft, owner_id)

    fields = draft.to_document()
    update = Update(set=fields, unset=[f for f in _OPTIONAL_NOTE_FIELDS if f not in fields])
    note = await store.update_one(NOTES, flt, update)
    if note is None:
        raise NotFoundError("Note not found")
    logger.info("note updated id=%s owner=%s", note["id"], owner_id)
    return (await populate_tags(store, [note], owner_id))[0]


async def delete_note(store: DocumentStore, note_id: str, owner_id: str) -> DeleteOutcome:
    deleted = await store.delete_one(NOTES, by_id(note_id, owner_id))
    if deleted is None:
        raise NotFoundError("Note not found")
    logger.info("note deleted id=%s owner=%s", deleted["id"], owner_id)
    return DeleteOutcome(deleted=deleted)


# ---- folders and tags ----

async def _create_named(
    store: DocumentStore,
    collection: str,
    label: str,
    draft: NameIn,
    owner_id: str,
) -> dict[str, Any]:
    doc = draft.to_document()
    doc["ownerId"] = owner_id
    try:
        created = await store.create(collection, doc)
    except DuplicateKeyError:
        raise DuplicateNameError(f"The {label} name already exists", field="name")
    logger.info("%s created id=%s owner=%s", label, created["id"], owner_id)
    return created


async def _update_named(
    store: DocumentStore,
    collection: str,
    label: str,
    doc_id: str,
    draft: NameIn,
    owner_id: str,
) -> dict[str, Any]:
    flt = by_id(doc_id, owner_id)
    try:
        updated = await store.update_one(collection, flt, Update(set=draft.to_document()))
    except DuplicateKeyError:
        raise DuplicateNameError(f"The {label} name already exists", field="name")
    if updated is None:
        raise NotFoundError(f"{label.capitalize()} not found")
    logger.info("%s updated id=%s owner=%s", label, updated["id"], owner_id)
    return updated


async def _delete_named(
    store: DocumentStore,
    collection: str,
    label: str,
    doc_id: str,
    owner_id: str,
    cascade: Callable[[str], tuple[Clause, Update]],
) -> DeleteOutcome:
    deleted = await store.delete_one(collection, by_id(doc_id, owner_id))
    if deleted is None:
        raise NotFoundError(f"{label.capitalize()} not found")
    logger.info("%s deleted id=%s owner=%s", label, deleted["id"], owner_id)

    clause, update = cascade(deleted["id"])
    try:
        n = await store.update_many(NOTES, owned(owner_id).and_(clause), update)
    except StoreError as exc:
        logger.exception("cascade after %s delete failed id=%s owner=%s", label, deleted["id"], owner_id)
        return DeleteOutcome(deleted=deleted, cascade_error=str(exc))
    return DeleteOutcome(deleted=deleted, cascaded=n)


def _detach_folder(folder_id: str) -> tuple[Clause, Update]:
    return eq("folderId", folder_id), Update(unset=["folderId"])


def _pull_tag(tag_id: str) -> tuple[Clause, Update]:
    return eq("tags", tag_id), Update(pull={"tags": tag_id})


async def create_folder(store: DocumentStore, payload: Any, owner_id: str) -> dict[str, Any]:
    return await _create_named(store, FOLDERS, "folder", validate_folder(payload), owner_id)


async def update_folder(store: DocumentStore, folder_id: str, payload: Any, owner_id: str) -> dict[str, Any]:
    return await _update_named(store, FOLDERS, "folder", folder_id, validate_folder(payload), owner_id)


async def delete_folder(store: DocumentStore, folder_id: str, owner_id: str) -> DeleteOutcome:
    return await _delete_named(store, FOLDERS, "folder", folder_id, owner_id, _detach_folder)


async def create_tag(store: DocumentStore, payload: Any, owner_id: str) -> dict[str, Any]:
    return await _create_named(store, TAGS, "tag", validate_tag(payload), owner_id)


async def update_tag(store: DocumentStore, tag_id: str, payload: Any, owner_id: str) -> dict[str, Any]:
    return await _update_named(store, TAGS, "tag", tag_id, validate_tag(payload), owner_id)


async def delete_tag(store: DocumentStore, tag_id: str, owner_id: str) -> DeleteOutcome:
    return await _delete_named(store, TAGS, "tag", tag_id, owner_id, _pull_tag)
