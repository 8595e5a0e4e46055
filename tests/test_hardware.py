from dartlink import hardware
from dartlink.hardware import LIGHT_STATE, POWER_STATE, as_switch
from dartlink.settings import Settings


def test_as_switch():
    assert as_switch("ON") is True
    assert as_switch("false") is False
    assert as_switch(True) is True
    assert as_switch("dim") == "dim"


def test_write_is_forwarded_to_foreign_target(store):
    settings = Settings(light_target_id="shelly/board/light")
    hardware.handle_write(store, settings, LIGHT_STATE, "on")
    assert store.get_foreign_state("shelly/board/light").val is True


def test_write_without_target_only_warns(store, caplog):
    hardware.handle_write(store, Settings(), POWER_STATE, True)
    assert "no target id is configured" in caplog.text
    assert store.writes == []


def test_foreign_changes_are_mirrored(store):
    settings = Settings(light_target_id="shelly/board/light", power_target_id="plug/board/power")
    hardware.subscribe_foreign(store, settings)

    store.receive_foreign("plug/board/power", "off")
    store.receive_foreign("shelly/board/light", True)

    assert store.get_state(POWER_STATE).val is False
    assert store.get_state(POWER_STATE).ack
    assert store.val(LIGHT_STATE) is True
