"""Tests for the tag registry."""
import random

import pytest

from eventlog.errors import DuplicateName, NotFound
from eventlog.models.tag import TAG_COLORS
from eventlog.services import tag_service
from tests.conftest import create_test_event, create_test_tag, register_user


class TestTagCRUD:

    def test_create_tag_with_color(self, client):
        tag = create_test_tag(client, name="work", color="#123ABC")
        assert tag["name"] == "work"
        assert tag["color"] == "#123ABC"

    def test_create_tag_without_color_gets_palette_color(self, client):
        tag = create_test_tag(client, name="personal")
        assert tag["color"] in TAG_COLORS

    def test_duplicate_name(self, client):
        create_test_tag(client, name="work")
        resp = client.post("/api/tags/", json={"name": "work"})
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "TAG_ALREADY_EXISTS"

    def test_names_are_case_sensitive(self, client):
        create_test_tag(client, name="work")
        assert client.post("/api/tags/", json={"name": "Work"}).status_code == 201

    @pytest.mark.parametrize("payload", [
        {"name": ""},
        {"name": "bad/char"},
        {"name": "x" * 51},
        {"name": "ok", "color": "red"},
        {"name": "ok", "color": "#12345"},
    ])
    def test_invalid_tag(self, client, payload):
        resp = client.post("/api/tags/", json=payload)
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_get_tag_not_found(self, client):
        resp = client.get("/api/tags/nope")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "TAG_NOT_FOUND"

    def test_list_tags_sorted(self, client):
        create_test_tag(client, name="zeta")
        create_test_tag(client, name="alpha")
        assert [t["name"] for t in client.get("/api/tags/").json()] == ["alpha", "zeta"]

    def test_update_tag(self, client):
        tag = create_test_tag(client, name="work")
        resp = client.put(f"/api/tags/{tag['tag_id']}", json={"name": "office", "color": "#000000"})
        assert resp.status_code == 200
        assert resp.json()["name"] == "office"
        assert resp.json()["color"] == "#000000"

    def test_rename_onto_existing_name(self, client):
        create_test_tag(client, name="work")
        other = create_test_tag(client, name="home")
        resp = client.put(f"/api/tags/{other['tag_id']}", json={"name": "work"})
        assert resp.status_code == 409

    def test_update_missing_tag(self, client):
        resp = client.put("/api/tags/missing", json={"name": "x"})
        assert resp.status_code == 404


class TestTagBatch:

    def test_batch_is_idempotent(self, client):
        first = client.post("/api/tags/batch", json={"names": ["a", "b", "c"]}).json()
        second = client.post("/api/tags/batch", json={"names": ["a", "b", "c"]}).json()
        assert [t["tag_id"] for t in first] == [t["tag_id"] for t in second]
        assert len(client.get("/api/tags/").json()) == 3

    def test_batch_reuses_existing(self, client):
        existing = create_test_tag(client, name="work", color="#111111")
        result = client.post("/api/tags/batch", json={"names": ["new", "work"]}).json()
        assert [t["name"] for t in result] == ["new", "work"]
        assert result[1]["tag_id"] == existing["tag_id"]
        assert result[1]["color"] == "#111111"

    def test_batch_rejects_invalid_name(self, client):
        resp = client.post("/api/tags/batch", json={"names": ["fine", "not/fine"]})
        assert resp.status_code == 400
        assert client.get("/api/tags/").json() == []

    def test_service_duplicates_within_one_call(self, db):
        tags = tag_service.create_multiple(db, ["x", "x", "y"])
        assert [t.name for t in tags] == ["x", "y"]
        assert len(tag_service.list_tags(db)) == 2

    def test_seeded_rng_picks_from_palette(self, db):
        rng = random.Random(7)
        expected = random.Random(7)
        tags = tag_service.create_multiple(db, ["one", "two", "three"], rng=rng)
        assert [t.color for t in tags] == [expected.choice(TAG_COLORS) for _ in range(3)]


class TestTagUsage:

    def test_delete_tag_keeps_events(self, client):
        user = register_user(client)
        tag = create_test_tag(client, name="work")
        event = create_test_event(client, user, tagIds=[tag["tag_id"]])

        assert client.delete(f"/api/tags/{tag['tag_id']}").status_code == 204

        resp = client.get(f"/api/events/{event['event_id']}")
        assert resp.status_code == 200
        assert resp.json()["tags"] == []

    def test_counts_and_popular_order(self, client):
        user = register_user(client)
        alpha = create_test_tag(client, name="alpha")
        beta = create_test_tag(client, name="beta")
        gamma = create_test_tag(client, name="gamma")
        create_test_tag(client, name="unused")
        create_test_event(client, user, tagIds=[gamma["tag_id"], beta["tag_id"]])
        create_test_event(client, user, tagIds=[gamma["tag_id"]])
        create_test_event(client, user, tagIds=[alpha["tag_id"]])

        counts = client.get("/api/tags/?with_count=true").json()
        assert [(t["name"], t["event_count"]) for t in counts] == [
            ("alpha", 1), ("beta", 1), ("gamma", 2), ("unused", 0),
        ]

        popular = client.get("/api/tags/?popular=true&limit=3").json()
        # ties on count fall back to name order
        assert [t["name"] for t in popular] == ["gamma", "alpha", "beta"]

    def test_delete_missing_tag(self, db):
        with pytest.raises(NotFound):
            tag_service.delete_tag(db, "missing")

    def test_service_create_duplicate(self, db):
        tag_service.create_tag(db, "dup")
        with pytest.raises(DuplicateName):
            tag_service.create_tag(db, "dup")
