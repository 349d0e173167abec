import pytest

from noteful.storage.filters import Clause, Filter, Op, Sort, Update, eq, icontains, in_, where


def test_clause_rejects_operator_like_field_names():
    for bad in ("$where", "title.$regex", "", "a b"):
        with pytest.raises(ValueError):
            Clause(bad, Op.EQ, "x")


def test_clause_rejects_unknown_operator():
    with pytest.raises(ValueError):
        Clause("title", "$regex", "x")


def test_clause_value_shapes():
    for bad in ("abc", b"abc", (v for v in "abc")):
        with pytest.raises(ValueError):
            in_("id", bad)
    with pytest.raises(ValueError):
        icontains("title", {"$ne": None})
    with pytest.raises(ValueError):
        eq("title", {"$gt": ""})


def test_in_matches_whole_values_not_characters():
    clause = in_("id", {"abc", "def"})
    assert clause.value in (("abc", "def"), ("def", "abc"))
    assert clause.matches({"id": "abc"})
    assert not clause.matches({"id": "a"})
    assert clause.matches({"id": ["x", "def"]})


def test_eq_matches_array_membership():
    doc = {"tags": ["t1", "t2"], "title": "x"}
    assert eq("tags", "t1").matches(doc)
    assert not eq("tags", "t3").matches(doc)


def test_icontains_is_literal_and_case_insensitive():
    doc = {"title": "The best article about CATS ever!"}
    assert icontains("title", "cats").matches(doc)
    assert not icontains("title", "c.ts").matches(doc)
    assert not icontains("content", "cats").matches(doc)


def test_filter_all_and_any():
    flt = where(eq("ownerId", "u1")).or_(icontains("title", "cat"), icontains("content", "cat"))
    assert flt.matches({"ownerId": "u1", "title": "dog", "content": "a cat"})
    assert not flt.matches({"ownerId": "u2", "title": "cat"})
    assert not flt.matches({"ownerId": "u1", "title": "dog"})
    with pytest.raises(ValueError):
        flt.or_(eq("title", "x"))


def test_filter_rejects_non_clauses():
    with pytest.raises(ValueError):
        Filter(all_of=({"title": "x"},))


def test_sort():
    docs = [{"name": "b"}, {"name": "a"}, {"name": "c"}]
    assert [d["name"] for d in Sort("name").apply(docs)] == ["a", "b", "c"]
    assert [d["name"] for d in Sort("name", descending=True).apply(docs)] == ["c", "b", "a"]


def test_update_apply_and_managed_fields():
    doc = {"id": "1", "title": "x", "folderId": "f", "tags": ["a", "b"]}
    out = Update(set={"title": "y"}, unset=["folderId"], pull={"tags": "a"}).apply(doc)
    assert out == {"id": "1", "title": "y", "tags": ["b"]}
    assert doc["title"] == "x"
    for name in ("id", "ownerId", "createdAt", "updatedAt"):
        with pytest.raises(ValueError):
            Update(set={name: "x"})
