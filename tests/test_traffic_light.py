from dartlink import traffic_light
from dartlink.traffic_light import COLOR_STATE, LABEL_STATE


def test_set_status_writes_color_and_label(store):
    traffic_light.set_status(store, "yellow")
    assert store.val(COLOR_STATE) == "#FFFF00"
    assert store.val(LABEL_STATE) == "yellow"


def test_unknown_status_falls_back_to_red(store, caplog):
    assert traffic_light.set_status(store, "purple") == "red"
    assert store.val(COLOR_STATE) == "#FF0000"
    assert "Unknown traffic light status" in caplog.text


def test_board_status_mapping():
    assert traffic_light.for_board_status("Throw") == "green"
    assert traffic_light.for_board_status("Takeout") == "yellow"
    assert traffic_light.for_board_status("Calibrating") is None
    assert traffic_light.for_board_status(None) is None
