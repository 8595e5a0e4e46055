"""
Runtime overrides of the throw thresholds.

``config.tripleMinScore``, ``config.tripleMaxScore`` and ``config.triggerResetSec``
start out with the configured values and accept writes while running. A valid
write replaces the in-memory value (used from the next dart on) and is echoed
back acknowledged. An invalid write is logged and otherwise ignored.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Final, NamedTuple

from .errors import OverrideValidationError
from .misc import excerpt

if TYPE_CHECKING:
    from .context import Context
    from .types import StateValue

log = logging.getLogger(__name__)


class _Override(NamedTuple):
    attr: str
    allow_zero: bool
    unit: str = ""


OVERRIDES: Final[dict[str, _Override]] = {
    "config.tripleMinScore": _Override("triple_min_score", allow_zero=False),
    "config.tripleMaxScore": _Override("triple_max_score", allow_zero=False),
    "config.triggerResetSec": _Override("trigger_reset_sec", allow_zero=True, unit=" s"),
}


def _as_number(val: float) -> int | float:
    return int(val) if val.is_integer() else val


def validate(state_id: str, raw: StateValue) -> int | float:
    """Return `raw` as a number acceptable for `state_id`.

    Raises:
        OverrideValidationError: Not a finite number, or out of range
        KeyError: `state_id` is not an override
    """

    override = OVERRIDES[state_id]
    if raw is None or isinstance(raw, bool):
        msg = f"not a number: {raw!r}"
        raise OverrideValidationError(msg)

    try:
        val = float(raw)
    except (TypeError, ValueError) as e:
        msg = f"not a number: {raw!r}"
        raise OverrideValidationError(msg) from e

    if not math.isfinite(val):
        msg = f"not finite: {raw!r}"
        raise OverrideValidationError(msg)
    if val < 0 or (val == 0 and not override.allow_zero):
        msg = f"must be {'>= 0' if override.allow_zero else '> 0'}: {raw!r}"
        raise OverrideValidationError(msg)

    return _as_number(val)


def init(ctx: Context) -> None:
    """Publish the current (seeded) thresholds as acknowledged values."""

    for state_id, override in OVERRIDES.items():
        val = float(getattr(ctx.thresholds, override.attr))
        ctx.store.set_state(state_id, _as_number(val), ack=True)


def handle_write(ctx: Context, state_id: str, raw: StateValue) -> bool:
    """Apply a runtime override.

    Returns:
        True if the value was accepted
    """

    try:
        val = validate(state_id, raw)
    except OverrideValidationError as e:
        log.warning("Invalid %s value (%s)", state_id, excerpt(str(e)))
        return False

    override = OVERRIDES[state_id]
    setattr(ctx.thresholds, override.attr, val)
    log.info("Runtime %s updated to [bold]%s[/]%s", state_id.removeprefix("config."), val, override.unit)
    ctx.store.set_state(state_id, val, ack=True)
    return True
