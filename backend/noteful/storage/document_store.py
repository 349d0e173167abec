import asyncio
import json
import logging
import os
import re
import secrets
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

from noteful.storage.filters import Filter, Sort, Update, eq, where

logger = logging.getLogger(__name__)

ID_RE = re.compile(r"^[0-9a-f]{24}$")
_COLLECTION_RE = re.compile(r"^[a-z][a-z0-9_]*$")

# collection -> tuple of field groups that must be unique together
DEFAULT_UNIQUE_INDEXES: dict[str, tuple[tuple[str, ...], ...]] = {
    "users": (("username",),),
    "folders": (("name", "ownerId"),),
    "tags": (("name", "ownerId"),),
}


class StoreError(Exception):
    """Any storage failure other than a unique index violation."""


class DuplicateKeyError(StoreError):
    def __init__(self, collection: str, fields: tuple[str, ...]):
        self.collection = collection
        self.fields = fields
        super().__init__(f"Duplicate key in {collection} on {', '.join(fields)}")


def new_id() -> str:
    return secrets.token_hex(12)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def _atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
        f.flush()
        os.fsync(f.fileno())
    tmp_path.replace(path)


class DocumentStore:
    """JSON-file document store: one file per document under <base_dir>/<collection>/.

    Every public method is a coroutine; the file work runs in a worker thread.
    Writes are serialized by a single lock so that each create/update/delete
    call is atomic and unique indexes cannot race.
    """

    def __init__(self, base_dir: Path, unique_indexes: Optional[dict] = None):
        self.base_dir = Path(base_dir)
        self.unique_indexes = DEFAULT_UNIQUE_INDEXES if unique_indexes is None else unique_indexes
        self._write_lock = threading.Lock()

    # ---- paths ----

    def _collection_dir(self, collection: str) -> Path:
        if not _COLLECTION_RE.match(collection):
            raise ValueError(f"Invalid collection name: {collection!r}")
        return self.base_dir / collection

    def _doc_path(self, collection: str, doc_id: str) -> Path:
        # ids end up in file names; only accept the store's own format
        if not isinstance(doc_id, str) or not ID_RE.match(doc_id):
            raise ValueError(f"Invalid document id: {doc_id!r}")
        return self._collection_dir(collection) / f"{doc_id}.json"

    # ---- sync internals ----

    def _load_all(self, collection: str) -> list[dict[str, Any]]:
        d = self._collection_dir(collection)
        if not d.exists():
            return []
        out: list[dict[str, Any]] = []
        for p in sorted(d.glob("*.json")):
            try:
                out.append(json.loads(p.read_text(encoding="utf-8")))
            except (OSError, ValueError):
                logger.warning("Skipping unreadable document %s", p)
        return out

    def _check_unique(self, collection: str, doc: dict[str, Any], others: Iterable[dict[str, Any]]) -> None:
        indexes = self.unique_indexes.get(collection, ())
        if not indexes:
            return
        others = [o for o in others if o.get("id") != doc.get("id")]
        for fields in indexes:
            key = tuple(doc.get(f) for f in fields)
            if any(tuple(o.get(f) for f in fields) == key for o in others):
                raise DuplicateKeyError(collection, fields)

    def _find(self, collection: str, flt: Filter, sort: Optional[Sort]) -> list[dict[str, Any]]:
        docs = [d for d in self._load_all(collection) if flt.matches(d)]
        return sort.apply(docs) if sort is not None else docs

    def _find_one(self, collection: str, flt: Filter) -> Optional[dict[str, Any]]:
        for d in self._load_all(collection):
            if flt.matches(d):
                return d
        return None

    def _create(self, collection: str, draft: dict[str, Any]) -> dict[str, Any]:
        with self._write_lock:
            now = _utc_now_iso()
            doc = dict(draft)
            doc["id"] = new_id()
            doc["createdAt"] = now
            doc["updatedAt"] = now
            self._check_unique(collection, doc, self._load_all(collection))
            _atomic_write_json(self._doc_path(collection, doc["id"]), doc)
            return doc

    def _insert_many(self, collection: str, docs: list[dict[str, Any]]) -> int:
        with self._write_lock:
            existing = self._load_all(collection)
            now = _utc_now_iso()
            # check the whole batch before the first write
            batch = []
            for raw in docs:
                doc = dict(raw)
                doc.setdefault("id", new_id())
                doc.setdefault("createdAt", now)
                doc.setdefault("updatedAt", doc["createdAt"])
                self._check_unique(collection, doc, existing + [d for _, d in batch])
                batch.append((self._doc_path(collection, doc["id"]), doc))
            for path, doc in batch:
                _atomic_write_json(path, doc)
            return len(batch)

    def _apply(self, collection: str, doc: dict[str, Any], update: Update, others: list[dict[str, Any]]) -> dict[str, Any]:
        new = update.apply(doc)
        now = _utc_now_iso()
        # updatedAt never moves backwards, even if the clock does
        new["updatedAt"] = max(now, doc.get("updatedAt") or now, doc.get("createdAt") or now)
        self._check_unique(collection, new, others)
        _atomic_write_json(self._doc_path(collection, new["id"]), new)
        return new

    def _update_one(self, collection: str, flt: Filter, update: Update) -> Optional[dict[str, Any]]:
        with self._write_lock:
            docs = self._load_all(collection)
            for d in docs:
                if flt.matches(d):
                    return self._apply(collection, d, update, docs)
            return None

    def _update_many(self, collection: str, flt: Filter, update: Update) -> int:
        with self._write_lock:
            docs = self._load_all(collection)
            n = 0
            for d in docs:
                if flt.matches(d):
                    self._apply(collection, d, update, docs)
                    n += 1
            return n

    def _delete_one(self, collection: str, flt: Filter) -> Optional[dict[str, Any]]:
        with self._write_lock:
            for d in self._load_all(collection):
                if flt.matches(d):
                    self._doc_path(collection, d["id"]).unlink()
                    return d
            return None

    def _drop(self, collection: str) -> None:
        with self._write_lock:
            d = self._collection_dir(collection)
            if not d.exists():
                return
            for p in d.glob("*.json*"):
                p.unlink()

    async def _run(self, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, *args)
        except StoreError:
            raise
        except (OSError, ValueError) as exc:
            raise StoreError(str(exc)) from exc

    # ---- public API ----

    async def find(self, collection: str, flt: Filter, sort: Optional[Sort] = None) -> list[dict[str, Any]]:
        return await self._run(self._find, collection, flt, sort)

    async def find_one(self, collection: str, flt: Filter) -> Optional[dict[str, Any]]:
        return await self._run(self._find_one, collection, flt)

    async def count(self, collection: str, flt: Filter) -> int:
        return len(await self.find(collection, flt))

    async def create(self, collection: str, draft: dict[str, Any]) -> dict[str, Any]:
        return await self._run(self._create, collection, draft)

    async def insert_many(self, collection: str, docs: list[dict[str, Any]]) -> int:
        return await self._run(self._insert_many, collection, docs)

    async def update_one(self, collection: str, flt: Filter, update: Update) -> Optional[dict[str, Any]]:
        return await self._run(self._update_one, collection, flt, update)

    async def update_by_id(self, collection: str, doc_id: str, update: Update) -> Optional[dict[str, Any]]:
        return await self.update_one(collection, where(eq("id", doc_id)), update)

    async def update_many(self, collection: str, flt: Filter, update: Update) -> int:
        return await self._run(self._update_many, collection, flt, update)

    async def delete_one(self, collection: str, flt: Filter) -> Optional[dict[str, Any]]:
        return await self._run(self._delete_one, collection, flt)

    async def delete_by_id(self, collection: str, doc_id: str) -> Optional[dict[str, Any]]:
        return await self.delete_one(collection, where(eq("id", doc_id)))

    async def drop(self, collection: str) -> None:
        await self._run(self._drop, collection)
