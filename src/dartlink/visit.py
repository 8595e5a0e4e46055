from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .context import Context
    from .throws import Dart

log = logging.getLogger(__name__)

DARTS_PER_VISIT: Final = 3
VISIT_STATE: Final = "visit.score"


def update_visit(ctx: Context, darts: Sequence[Dart], last_count: int) -> int:
    """Publish the visit total when the third dart lands.

    The total is written only on the transition from fewer than three darts
    to exactly three, and always written then (even if equal to the previous
    total) so observers see a fresh change.

    Args:
        ctx: Bridge context (``visit.score`` goes to its store)
        darts: Darts of the current visit, in throw order
        last_count: Dart count returned by the previous call

    Returns:
        Current dart count, to pass back in on the next call
    """

    count = len(darts)
    if count == DARTS_PER_VISIT and last_count < DARTS_PER_VISIT:
        total = sum(d.score for d in darts[-DARTS_PER_VISIT:])
        log.info("Visit complete: [bold]%d[/]", total)
        ctx.store.set_state(VISIT_STATE, total, ack=True)

    return count
