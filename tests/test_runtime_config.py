import math

import pytest

from dartlink import runtime_config
from dartlink.context import Context, Thresholds
from dartlink.errors import OverrideValidationError
from dartlink.runtime_config import handle_write, validate
from dartlink.throws import Dart, classify


def test_init_echoes_seeded_values(store):
    ctx = Context(store=store, thresholds=Thresholds(triple_min_score=15, triple_max_score=20, trigger_reset_sec=2.5))
    runtime_config.init(ctx)

    assert store.val("config.tripleMinScore") == 15
    assert store.val("config.tripleMaxScore") == 20
    assert store.val("config.triggerResetSec") == 2.5
    assert all(ack for _, _, ack in store.writes)


def test_valid_override_updates_threshold_and_echoes(ctx, store):
    assert handle_write(ctx, "config.tripleMinScore", "17")

    assert ctx.thresholds.triple_min_score == 17
    assert store.get_state("config.tripleMinScore").val == 17
    assert store.get_state("config.tripleMinScore").ack


def test_override_applies_to_next_dart(ctx):
    t15 = Dart.from_json({"segment": {"name": "T15", "number": 15, "multiplier": 3}})
    assert classify(t15, ctx.thresholds).is_triple

    handle_write(ctx, "config.tripleMinScore", 16)
    assert not classify(t15, ctx.thresholds).is_triple


def test_reset_seconds_accepts_zero(ctx):
    ctx.thresholds.trigger_reset_sec = 3
    assert handle_write(ctx, "config.triggerResetSec", 0)
    assert ctx.thresholds.trigger_reset_sec == 0


@pytest.mark.parametrize(
    ("state_id", "raw"),
    [
        ("config.tripleMinScore", 0),
        ("config.tripleMaxScore", -3),
        ("config.tripleMaxScore", "abc"),
        ("config.tripleMinScore", math.inf),
        ("config.triggerResetSec", -1),
        ("config.triggerResetSec", math.nan),
        ("config.triggerResetSec", None),
        ("config.triggerResetSec", True),
    ],
)
def test_invalid_override_is_rejected_without_state_change(ctx, store, caplog, state_id, raw):
    before = Thresholds(**vars(ctx.thresholds))

    assert handle_write(ctx, state_id, raw) is False
    assert ctx.thresholds == before
    assert store.writes == []
    assert "Invalid" in caplog.text


def test_validate_raises():
    with pytest.raises(OverrideValidationError):
        validate("config.tripleMinScore", "0")
    assert validate("config.triggerResetSec", "1.5") == 1.5
