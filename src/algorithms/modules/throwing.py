"""
Throwing/littering module.

Per track, the classifier's binary label (1 = throwing, 0 = normal) is
smoothed with the rounded mean of the last `smoothing_window` labels. A track
alerts exactly once when its run of smoothed-throwing frames reaches
`consecutive_threshold`; the run must drop back to 0 before it can fire again.
"""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Sequence, Tuple

from models.alert import ALERT_START, Alert
from models.config import MODULE_THROWING, ThrowingConfig
from models.detection import ThrowingView
from .base import ModuleStateMachine


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (value is non-negative here)."""
    return int(math.floor(value + 0.5))


@dataclass
class ThrowingTrackState:
    """Per-track throwing classifier state."""
    class_history: Deque[int]
    smoothed_class: int = 0
    consecutive_count: int = 0
    last_seen: float = 0.0


class ThrowingModule(ModuleStateMachine[ThrowingTrackState]):
    """Smoothed label run-length detector."""

    name = MODULE_THROWING

    def __init__(self, config: ThrowingConfig):
        super().__init__(config)

    def _new_state(self) -> ThrowingTrackState:
        return ThrowingTrackState(class_history=deque(maxlen=self._config.smoothing_window))

    def step(
        self,
        state: ThrowingTrackState,
        view: ThrowingView,
        timestamp: float,
    ) -> Tuple[ThrowingTrackState, List[Alert]]:
        state.class_history.append(view.label)
        state.last_seen = timestamp

        mean = sum(state.class_history) / len(state.class_history)
        state.smoothed_class = round_half_up(mean)
        state.consecutive_count = state.consecutive_count + 1 if state.smoothed_class == 1 else 0

        alerts: List[Alert] = []
        if state.consecutive_count == self._config.consecutive_threshold:
            alerts.append(Alert(
                module=self.name,
                state=ALERT_START,
                timestamp=timestamp,
                track_id=view.track_id,
            ))
        return state, alerts

    def process(self, inputs: Sequence[ThrowingView], timestamp: float) -> List[Alert]:
        alerts: List[Alert] = []
        for view in inputs:
            state = self._states.get(view.track_id)
            if state is None:
                state = self._new_state()
                self._states[view.track_id] = state
            _, emitted = self.step(state, view, timestamp)
            alerts.extend(emitted)
        return alerts

    def snapshot(self) -> Dict[str, Any]:
        return {
            "module": self.name,
            "consecutive_threshold": self._config.consecutive_threshold,
            "smoothing_window": self._config.smoothing_window,
            "tracks": {
                track_id: {
                    "class_history": list(st.class_history),
                    "smoothed_class": st.smoothed_class,
                    "consecutive_count": st.consecutive_count,
                }
                for track_id, st in self._states.items()
            },
        }
