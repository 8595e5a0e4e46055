"""
Throw classification.

Turns the latest dart reported by the board into a score and four trigger
flags (triple, double, bullseye, miss). Flags are pulses: with a non-zero
reset time each set flag reverts to False on its own timer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Final

if TYPE_CHECKING:
    from .context import Context, Thresholds

log = logging.getLogger(__name__)

TRIPLE: Final = 3
DOUBLE: Final = 2
BULL_NUMBER: Final = 25

SCORE_STATE: Final = "throw.current"
TRIPLE_FLAG: Final = "trigger.isTriple"
DOUBLE_FLAG: Final = "trigger.isDouble"
BULLSEYE_FLAG: Final = "trigger.isBullseye"
MISS_FLAG: Final = "trigger.isMiss"


def _int_or_none(val: Any) -> int | None:  # noqa: ANN401
    if isinstance(val, bool):
        return None
    if isinstance(val, int):
        return val
    if isinstance(val, float) and val.is_integer():
        return int(val)
    return None


@dataclass(frozen=True, slots=True)
class Dart:
    """One dart as reported by ``/api/state`` (all fields None for a miss without segment)."""

    segment_name: str | None = None
    segment_number: int | None = None
    multiplier: int | None = None
    has_segment: bool = False

    @classmethod
    def from_json(cls, obj: Any) -> Dart:  # noqa: ANN401
        """Build a dart from a ``throws[]`` entry. Anything malformed reads as a miss."""

        segment = obj.get("segment") if isinstance(obj, dict) else None
        if not isinstance(segment, dict):
            return cls()

        name = segment.get("name")
        return cls(
            segment_name=name if isinstance(name, str) else None,
            segment_number=_int_or_none(segment.get("number")),
            multiplier=_int_or_none(segment.get("multiplier")),
            has_segment=True,
        )

    @property
    def score(self) -> int:
        """Points scored: number x multiplier, 0 without a segment."""

        if not self.has_segment:
            return 0
        return (self.segment_number or 0) * (self.multiplier or 0)


@dataclass(frozen=True, slots=True)
class ThrowResult:
    score: int
    is_triple: bool
    is_double: bool
    is_bullseye: bool
    is_miss: bool

    def flags(self) -> dict[str, bool]:
        """Return state id -> flag value, in write order."""
        return {
            TRIPLE_FLAG: self.is_triple,
            DOUBLE_FLAG: self.is_double,
            BULLSEYE_FLAG: self.is_bullseye,
            MISS_FLAG: self.is_miss,
        }


def classify(dart: Dart, thresholds: Thresholds) -> ThrowResult:
    """Classify a dart. Pure; the same dart and thresholds always give the same result.

    A triple only counts when the segment number lies within the configured
    score range (inclusive, inverted ranges are swapped).
    """

    lo, hi = thresholds.score_range()
    score = dart.score
    number = dart.segment_number or 0
    name = (dart.segment_name or "").upper()

    return ThrowResult(
        score=score,
        is_triple=dart.has_segment and dart.multiplier == TRIPLE and lo <= number <= hi,
        is_double=dart.has_segment and dart.multiplier == DOUBLE,
        is_bullseye=dart.has_segment and ("BULL" in name or dart.segment_number == BULL_NUMBER),
        is_miss=not dart.has_segment or score == 0,
    )


def update_throw(ctx: Context, dart: Dart) -> ThrowResult:
    """Classify `dart` and publish its score and trigger flags.

    Args:
        ctx: Bridge context (store, thresholds, pending resets)
        dart: Latest dart of the current visit

    Returns:
        The classification that was published
    """

    result = classify(dart, ctx.thresholds)
    log.debug("Dart %s -> %s", dart.segment_name or "miss", result)

    ctx.store.set_state(SCORE_STATE, result.score, ack=True)
    for state_id, active in result.flags().items():
        ctx.pulse(state_id, active)

    return result
