"""
Perimeter intrusion module.

A single two-state machine (CLEAR=0, ALERT=1) for the whole ROI. Each frame
contributes one boolean: whether any person's bottom-center lies inside the
ROI polygon. Transitions use the count of True values in the rolling window:

- CLEAR -> ALERT when count >= threshold (emits a state 1 alert)
- ALERT -> CLEAR when count < threshold (emits a state 0 alert)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from models.alert import ALERT_END, ALERT_START, Alert
from models.config import IntrusionConfig, MODULE_INTRUSION
from models.detection import PersonView
from algorithms.buffers import PersistenceBuffer
from algorithms.geometry import point_in_polygon
from .base import ModuleStateMachine

STATE_CLEAR = 0
STATE_ALERT = 1


@dataclass
class IntrusionState:
    """
    Zone-wide intrusion state.

    Attributes:
        buffer: Rolling window of per-frame "person in ROI" flags.
        current_state: STATE_CLEAR or STATE_ALERT.
        last_state_change_time: Frame time of the last transition.
        last_seen: Frame time of the last update.
    """
    buffer: PersistenceBuffer
    current_state: int = STATE_CLEAR
    last_state_change_time: Optional[float] = None
    last_seen: float = 0.0


def any_person_in_roi(persons: Sequence[PersonView], roi: Sequence[Tuple[float, float]]) -> bool:
    for person in persons:
        if point_in_polygon(person.bottom_center, roi):
            return True
    return False


class IntrusionModule(ModuleStateMachine[IntrusionState]):
    """Debounced zone presence with hysteresis on the window count."""

    name = MODULE_INTRUSION
    ZONE_KEY = "zone"

    def __init__(self, config: IntrusionConfig):
        super().__init__(config)
        self._states[self.ZONE_KEY] = self._new_state()

    def _new_state(self) -> IntrusionState:
        return IntrusionState(buffer=PersistenceBuffer(self._config.buffer_size))

    @property
    def state(self) -> IntrusionState:
        return self._states[self.ZONE_KEY]

    def step(self, state: IntrusionState, in_roi: bool, timestamp: float) -> Tuple[IntrusionState, List[Alert]]:
        """Push one observation and apply the hysteresis transition."""
        state.buffer.push(in_roi)
        state.last_seen = timestamp
        count = state.buffer.count()

        alerts: List[Alert] = []
        if state.current_state == STATE_CLEAR and count >= self._config.threshold:
            state.current_state = STATE_ALERT
            state.last_state_change_time = timestamp
            alerts.append(Alert(module=self.name, state=ALERT_START, timestamp=timestamp))
        elif state.current_state == STATE_ALERT and count < self._config.threshold:
            state.current_state = STATE_CLEAR
            state.last_state_change_time = timestamp
            alerts.append(Alert(module=self.name, state=ALERT_END, timestamp=timestamp))
        return state, alerts

    def process(self, inputs: Sequence[PersonView], timestamp: float) -> List[Alert]:
        # Without a valid zone there is nothing to evaluate
        if len(self._config.roi) < 3:
            return []
        in_roi = any_person_in_roi(inputs, self._config.roi)
        _, alerts = self.step(self.state, in_roi, timestamp)
        return alerts

    def reset(self) -> None:
        super().reset()
        self._states[self.ZONE_KEY] = self._new_state()

    def prune(self, now: float, max_age: float) -> int:
        # The zone state is not per-track
        return 0

    def snapshot(self) -> Dict[str, Any]:
        st = self.state
        return {
            "module": self.name,
            "buffer": st.buffer.get_ordered_contents(),
            "count": st.buffer.count(),
            "current_state": st.current_state,
            "last_state_change_time": st.last_state_change_time,
            "buffer_size": self._config.buffer_size,
            "threshold": self._config.threshold,
        }
