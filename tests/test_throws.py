import asyncio

import pytest

from dartlink.context import Thresholds
from dartlink.throws import (
    BULLSEYE_FLAG,
    DOUBLE_FLAG,
    MISS_FLAG,
    SCORE_STATE,
    TRIPLE_FLAG,
    Dart,
    classify,
    update_throw,
)


def dart(name, number, multiplier):
    return Dart.from_json({"segment": {"name": name, "number": number, "multiplier": multiplier}})


def test_triple_twenty_scores_sixty():
    result = classify(dart("T20", 20, 3), Thresholds(triple_min_score=1, triple_max_score=20))
    assert result.score == 60
    assert result.is_triple
    assert not result.is_double
    assert not result.is_bullseye
    assert not result.is_miss


@pytest.mark.parametrize(("number", "expected"), [(14, False), (15, True), (18, True), (20, True)])
def test_triple_respects_score_range(number, expected):
    thresholds = Thresholds(triple_min_score=15, triple_max_score=20)
    assert classify(dart(f"T{number}", number, 3), thresholds).is_triple is expected


def test_inverted_range_is_swapped():
    thresholds = Thresholds(triple_min_score=20, triple_max_score=15)
    assert classify(dart("T17", 17, 3), thresholds).is_triple
    assert not classify(dart("T5", 5, 3), thresholds).is_triple


def test_double_and_bullseye():
    result = classify(dart("Bullseye", 25, 2), Thresholds())
    assert result.score == 50
    assert result.is_double
    assert result.is_bullseye
    assert not result.is_triple


def test_outer_bull_detected_by_name():
    assert classify(dart("bull", 25, 1), Thresholds()).is_bullseye
    assert classify(dart("Bull", None, 1), Thresholds()).is_bullseye


def test_missing_segment_is_miss():
    missed = Dart.from_json({"segment": None})
    result = classify(missed, Thresholds())
    assert result.score == 0
    assert result.is_miss
    assert not (result.is_triple or result.is_double or result.is_bullseye)


def test_zero_score_segment_is_miss():
    result = classify(dart("Outside", 0, 1), Thresholds())
    assert result.is_miss


def test_malformed_throw_reads_as_miss():
    assert Dart.from_json("garbage").score == 0
    assert Dart.from_json({"segment": {"name": "S5", "number": "5", "multiplier": 1}}).score == 0


def test_classify_is_idempotent():
    d = dart("D16", 16, 2)
    thresholds = Thresholds()
    assert classify(d, thresholds) == classify(d, thresholds)


def test_update_throw_writes_score_and_flags(ctx, store):
    update_throw(ctx, dart("T20", 20, 3))

    assert store.val(SCORE_STATE) == 60
    assert store.val(TRIPLE_FLAG) is True
    assert store.val(DOUBLE_FLAG) is False
    assert store.val(BULLSEYE_FLAG) is False
    assert store.val(MISS_FLAG) is False
    assert all(ack for _, _, ack in store.writes)


def test_no_reset_timers_without_reset_time(ctx):
    update_throw(ctx, dart("T20", 20, 3))
    assert len(ctx.timers) == 0


async def test_set_flags_reset_after_delay(ctx, store):
    ctx.thresholds.trigger_reset_sec = 0.05
    update_throw(ctx, dart("Bullseye", 25, 2))

    assert TRIPLE_FLAG not in ctx.timers
    assert DOUBLE_FLAG in ctx.timers
    assert BULLSEYE_FLAG in ctx.timers

    await asyncio.sleep(0.15)
    assert store.val(DOUBLE_FLAG) is False
    assert store.val(BULLSEYE_FLAG) is False
    assert len(ctx.timers) == 0


async def test_new_throw_replaces_pending_reset(ctx, store):
    ctx.thresholds.trigger_reset_sec = 0.1
    update_throw(ctx, dart("T20", 20, 3))
    await asyncio.sleep(0.06)
    update_throw(ctx, dart("T19", 19, 3))

    # The first timer would have fired by now if it had not been replaced
    await asyncio.sleep(0.06)
    assert store.val(TRIPLE_FLAG) is True

    await asyncio.sleep(0.1)
    assert store.val(TRIPLE_FLAG) is False


async def test_next_throw_rewrites_every_flag(ctx, store):
    ctx.thresholds.trigger_reset_sec = 0.1
    update_throw(ctx, dart("T20", 20, 3))
    await asyncio.sleep(0.06)
    update_throw(ctx, Dart.from_json({"segment": None}))

    assert store.val(TRIPLE_FLAG) is False
    assert MISS_FLAG in ctx.timers
    await asyncio.sleep(0.15)
    assert store.val(MISS_FLAG) is False
