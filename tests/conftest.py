from __future__ import annotations

import pytest

from dartlink.context import Context, Thresholds
from dartlink.store import MemoryStateStore, State


class RecordingStore(MemoryStateStore):
    """Memory store that remembers every write in order."""

    def __init__(self) -> None:
        super().__init__()
        self.writes: list[tuple[str, object, bool]] = []

    def set_state(self, state_id, val, *, ack=True) -> State:
        self.writes.append((state_id, val, ack))
        return super().set_state(state_id, val, ack=ack)

    def val(self, state_id: str) -> object:
        state = self.get_state(state_id)
        return None if state is None else state.val

    def writes_to(self, state_id: str) -> list[object]:
        return [val for sid, val, _ in self.writes if sid == state_id]

    def clear(self) -> None:
        self.writes.clear()


@pytest.fixture
def store() -> RecordingStore:
    return RecordingStore()


@pytest.fixture
def ctx(store: RecordingStore) -> Context:
    return Context(store=store, thresholds=Thresholds(triple_min_score=1, triple_max_score=20, trigger_reset_sec=0))
