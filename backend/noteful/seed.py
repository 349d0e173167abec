"""Reset the data dir and load the JSON fixtures from db/seed/.

    python -m noteful.seed [--data-dir DIR] [--seed-dir DIR]

Fixture ids are kept as-is so notes can point at seeded folders and tags.
User passwords are plaintext in users.json and hashed here.
"""
import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from noteful.config import Settings, configure_logging
from noteful.storage.document_store import DocumentStore
from noteful.utils.auth_hash import hash_password

logger = logging.getLogger(__name__)

DEFAULT_SEED_DIR = Path(__file__).resolve().parents[1] / "db" / "seed"

# users first: everything else is owned by them
COLLECTIONS = ("users", "folders", "tags", "notes")


def _load_fixture(seed_dir: Path, collection: str) -> list[dict[str, Any]]:
    p = seed_dir / f"{collection}.json"
    if not p.exists():
        return []
    return json.loads(p.read_text(encoding="utf-8"))


async def seed_database(store: DocumentStore, seed_dir: Path = DEFAULT_SEED_DIR) -> dict[str, int]:
    counts: dict[str, int] = {}
    for collection in COLLECTIONS:
        await store.drop(collection)

    for collection in COLLECTIONS:
        docs = _load_fixture(seed_dir, collection)
        if collection == "users":
            docs = [{**d, "password": await asyncio.to_thread(hash_password, d["password"])} for d in docs]
        counts[collection] = await store.insert_many(collection, docs)
        logger.info("Inserted %d %s", counts[collection], collection)
    return counts


def main(argv=None) -> None:
    settings = Settings.from_env()
    parser = argparse.ArgumentParser(description="Seed the notes database")
    parser.add_argument("--data-dir", type=Path, default=settings.data_dir)
    parser.add_argument("--seed-dir", type=Path, default=DEFAULT_SEED_DIR)
    args = parser.parse_args(argv)

    configure_logging(settings.log_level)
    asyncio.run(seed_database(DocumentStore(args.data_dir), args.seed_dir))


if __name__ == "__main__":
    main()
