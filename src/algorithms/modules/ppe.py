"""
PPE compliance module.

Counts consecutive frames in which a person track reports missing equipment.
Alerts exactly when the run reaches `ppe_persistence_frames`, then resets the
run and freezes the track for `ppe_cooldown_seconds`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from models.alert import ALERT_START, Alert
from models.config import MODULE_PPE, PPEConfig
from models.detection import PPEView
from algorithms.buffers import CooldownTracker
from .base import ModuleStateMachine


@dataclass
class PPETrackState:
    violation_frames: int = 0
    last_violations: Tuple[str, ...] = ()
    last_seen: float = 0.0


class PPEModule(ModuleStateMachine[PPETrackState]):
    """Persistent missing-equipment detector with a per-track cooldown."""

    name = MODULE_PPE

    def __init__(self, config: PPEConfig):
        super().__init__(config)
        self._cooldowns = CooldownTracker()

    @property
    def cooldowns(self) -> CooldownTracker:
        return self._cooldowns

    def step(self, state: PPETrackState, view: PPEView, timestamp: float) -> Tuple[PPETrackState, List[Alert]]:
        key = str(view.track_id)
        if self._cooldowns.is_on_cooldown(key, timestamp):
            return state, []

        state.last_seen = timestamp
        if view.missing:
            state.violation_frames += 1
            state.last_violations = tuple(view.missing)
        else:
            state.violation_frames = 0
            state.last_violations = ()

        alerts: List[Alert] = []
        if state.violation_frames == self._config.ppe_persistence_frames:
            alerts.append(Alert(
                module=self.name,
                state=ALERT_START,
                timestamp=timestamp,
                track_id=view.track_id,
                violations=state.last_violations,
            ))
            self._cooldowns.set_cooldown(key, timestamp, self._config.ppe_cooldown_seconds)
            state.violation_frames = 0
        return state, alerts

    def process(self, inputs: Sequence[PPEView], timestamp: float) -> List[Alert]:
        alerts: List[Alert] = []
        for view in inputs:
            state = self._states.get(view.track_id)
            if state is None:
                state = PPETrackState(last_seen=timestamp)
                self._states[view.track_id] = state
            _, emitted = self.step(state, view, timestamp)
            alerts.extend(emitted)
        return alerts

    def reset(self) -> None:
        super().reset()
        self._cooldowns.reset()

    def prune(self, now: float, max_age: float) -> int:
        self._cooldowns.clear_expired(now)
        return super().prune(now, max_age)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "module": self.name,
            "persistence_threshold": self._config.ppe_persistence_frames,
            "cooldown_seconds": self._config.ppe_cooldown_seconds,
            "tracks": {
                track_id: {
                    "violation_frames": st.violation_frames,
                    "last_violations": list(st.last_violations),
                    "cooldown_until": self._cooldowns.expiry(str(track_id)),
                }
                for track_id, st in self._states.items()
            },
        }
