from dartlink.mqtt import base_topic, decode_value, state_id_from_set_topic, state_topic
from dartlink.store import MemoryStateStore


def test_subscribers_see_writes_in_order():
    store = MemoryStateStore()
    seen = []
    store.subscribe("visit.score", lambda sid, st: seen.append((sid, st.val, st.ack)))

    store.set_state("visit.score", 60)
    store.set_state("throw.current", 20)
    store.receive("visit.score", 0)

    assert seen == [("visit.score", 60, True), ("visit.score", 0, False)]
    assert store.get_state("throw.current").val == 20
    assert store.get_state("nope") is None


def test_failing_subscriber_does_not_break_others(caplog):
    store = MemoryStateStore()
    seen = []

    def boom(sid, st):
        raise ValueError("boom")

    store.subscribe("tools.RAW", boom)
    store.subscribe("tools.RAW", lambda sid, st: seen.append(st.val))
    store.set_state("tools.RAW", "busted")

    assert seen == ["busted"]
    assert "Handler for" in caplog.text


def test_foreign_states_are_separate():
    store = MemoryStateStore()
    seen = []
    store.subscribe_foreign("plug/board/power", lambda fid, st: seen.append(st.val))

    store.set_foreign_state("plug/board/power", True)
    assert seen == [True]
    assert store.get_foreign_state("plug/board/power").val is True
    assert store.get_state("plug/board/power") is None


def test_topics():
    base = base_topic("autodarts.0")
    assert base == "autodarts/0"
    assert state_topic(base, "visit.score") == "autodarts/0/visit/score"
    assert state_id_from_set_topic(base, "autodarts/0/config/tripleMinScore/set") == "config.tripleMinScore"
    assert state_id_from_set_topic(base, "autodarts/0/visit/score") is None
    assert state_id_from_set_topic(base, "autodarts/1/tools/RAW/set") is None
    assert state_id_from_set_topic(base, "autodarts/0/set") is None


def test_decode_value():
    assert decode_value(b"busted") == "busted"
    assert decode_value(b"180") == 180
    assert decode_value(b"true") is True
    assert decode_value(b'{"val": 2.5, "ack": false}') == 2.5
    assert decode_value(b'"gameon"') == "gameon"
    assert decode_value(b"[1, 2]") == "[1, 2]"
