import pytest
from fastapi.testclient import TestClient

from dartlink.hooks import create_app
from dartlink.store import MemoryStateStore


@pytest.fixture
def store():
    return MemoryStateStore()


@pytest.fixture
def client(store):
    return TestClient(create_app(store, instance="autodarts.0"))


def test_set_delivers_unacknowledged_write(client, store):
    seen = []
    store.subscribe("tools.RAW", lambda sid, st: seen.append((st.val, st.ack)))

    resp = client.get("/set/autodarts.0.tools.RAW", params={"value": "gameshot"})

    assert resp.status_code == 200
    assert resp.json() == {"ok": True}
    assert seen == [("gameshot", False)]


def test_set_accepts_ids_without_instance_prefix(client, store):
    resp = client.get("/set/config.triggerResetSec", params={"value": "2"})

    assert resp.status_code == 200
    assert store.get_state("config.triggerResetSec").val == "2"


def test_only_inbound_states_are_writable(client, store):
    resp = client.get("/set/autodarts.0.visit.score", params={"value": "180"})

    assert resp.status_code == 404
    assert store.get_state("visit.score") is None


def test_get(client, store):
    store.set_state("visit.score", 140)

    resp = client.get("/get/autodarts.0.visit.score")
    body = resp.json()

    assert resp.status_code == 200
    assert body["id"] == "visit.score"
    assert body["val"] == 140
    assert body["ack"] is True

    assert client.get("/get/autodarts.0.nothing").status_code == 404
