import threading

import pytest

from noteful import seed
from noteful.seed import seed_database
from noteful.services import queries
from noteful.services.accounts import authenticate

USER0 = "333333333333333333333300"
USER1 = "333333333333333333333301"


@pytest.mark.asyncio
async def test_seed_loads_fixtures(store):
    counts = await seed_database(store)
    assert counts == {"users": 2, "folders": 5, "tags": 5, "notes": 5}

    notes = await queries.list_notes(store, USER0)
    assert len(notes) == 4
    assert all(isinstance(t, dict) for n in notes for t in n["tags"])

    cats = await queries.list_notes(store, USER0, search_term="cats")
    assert len(cats) == 3

    folders = await queries.list_folders(store, USER0)
    assert [f["name"] for f in folders] == ["Archive", "Drafts", "Personal", "Work"]


@pytest.mark.asyncio
async def test_seeded_users_can_log_in(store):
    await seed_database(store)
    user = await authenticate(store, "user0", "password")
    assert user is not None and user["id"] == USER0
    assert await authenticate(store, "user0", "wrong") is None


@pytest.mark.asyncio
async def test_seed_is_repeatable(store):
    await seed_database(store)
    await seed_database(store)
    assert len(await queries.list_notes(store, USER1)) == 1


@pytest.mark.asyncio
async def test_seed_hashes_passwords_off_the_event_loop(store, monkeypatch):
    loop_thread = threading.get_ident()
    hashed_on = []

    def fake_hash(password):
        hashed_on.append(threading.get_ident())
        return "hashed:" + password

    monkeypatch.setattr(seed, "hash_password", fake_hash)
    await seed.seed_database(store)
    assert len(hashed_on) == 2
    assert loop_thread not in hashed_on
