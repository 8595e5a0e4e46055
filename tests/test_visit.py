from dartlink.throws import Dart
from dartlink.visit import VISIT_STATE, update_visit


def darts(*scores):
    return [Dart.from_json({"segment": {"name": f"S{s}", "number": s, "multiplier": 1}}) for s in scores]


def test_visit_written_on_third_dart(ctx, store):
    count = update_visit(ctx, darts(20), 0)
    count = update_visit(ctx, darts(20, 20), count)
    assert store.writes_to(VISIT_STATE) == []

    count = update_visit(ctx, darts(20, 20, 20), count)
    assert count == 3
    assert store.writes_to(VISIT_STATE) == [60]


def test_visit_not_reemitted_while_count_stays_at_three(ctx, store):
    count = update_visit(ctx, darts(1, 2, 3), 2)
    count = update_visit(ctx, darts(1, 2, 3), count)
    assert store.writes_to(VISIT_STATE) == [6]


def test_equal_totals_are_written_again_for_a_new_visit(ctx, store):
    count = update_visit(ctx, darts(20, 20, 20), 0)
    count = update_visit(ctx, [], count)
    assert count == 0

    update_visit(ctx, darts(20, 20, 20), count)
    assert store.writes_to(VISIT_STATE) == [60, 60]


def test_misses_count_as_zero(ctx, store):
    visit = [*darts(20), Dart.from_json({"segment": None}), *darts(5)]
    update_visit(ctx, visit, 2)
    assert store.val(VISIT_STATE) == 25


def test_empty_visit_writes_nothing(ctx, store):
    assert update_visit(ctx, [], 3) == 0
    assert store.writes == []
