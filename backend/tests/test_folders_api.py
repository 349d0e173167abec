def test_duplicate_folder_name_per_owner(client, user_a, user_b):
    r = client.post("/folders", headers=user_a, json={"name": "Work"})
    assert r.status_code == 201
    assert r.headers["Location"] == f"/folders/{r.json()['id']}"

    r = client.post("/folders", headers=user_a, json={"name": "Work"})
    assert r.status_code == 400
    assert r.json()["detail"] == "The folder name already exists"

    # another owner may use the same name
    r = client.post("/folders", headers=user_b, json={"name": "Work"})
    assert r.status_code == 201


def test_folder_requires_name(client, user_a):
    r = client.post("/folders", headers=user_a, json={})
    assert r.status_code == 400
    assert r.json()["field"] == "name"


def test_list_folders_sorted_by_name_and_searchable(client, user_a, user_b):
    for name in ("Work", "Archive", "Personal"):
        client.post("/folders", headers=user_a, json={"name": name})
    client.post("/folders", headers=user_b, json={"name": "Drafts"})

    r = client.get("/folders", headers=user_a)
    assert r.status_code == 200
    assert [f["name"] for f in r.json()] == ["Archive", "Personal", "Work"]

    r = client.get("/folders", headers=user_a, params={"searchTerm": "ar"})
    assert [f["name"] for f in r.json()] == ["Archive"]


def test_rename_folder(client, user_a):
    folder_id = client.post("/folders", headers=user_a, json={"name": "Work"}).json()["id"]
    client.post("/folders", headers=user_a, json={"name": "Home"})

    r = client.put(f"/folders/{folder_id}", headers=user_a, json={"name": "Office"})
    assert r.status_code == 200
    assert r.json()["name"] == "Office"

    r = client.put(f"/folders/{folder_id}", headers=user_a, json={"name": "Office"})
    assert r.status_code == 200

    r = client.put(f"/folders/{folder_id}", headers=user_a, json={"name": "Home"})
    assert r.status_code == 400

    r = client.put("/folders/bad-id", headers=user_a, json={"name": "x"})
    assert r.status_code == 400


def test_delete_folder_detaches_notes(client, user_a):
    folder_id = client.post("/folders", headers=user_a, json={"name": "Work"}).json()["id"]
    note_id = client.post("/notes", headers=user_a, json={"title": "t", "folderId": folder_id}).json()["id"]

    r = client.delete(f"/folders/{folder_id}", headers=user_a)
    assert r.status_code == 204

    r = client.get(f"/notes/{note_id}", headers=user_a)
    assert r.status_code == 200
    assert "folderId" not in r.json()
    assert client.get(f"/folders/{folder_id}", headers=user_a).status_code == 404
