"""
Human-vehicle collision risk module.

Every (person, vehicle) pair seen in a frame is evaluated. A pair alerts when
its proximity window is full and every entry is "closer than
collision_distance_px". Firing starts a cooldown and clears the window; while
the pair is on cooldown its state is frozen and no observation is recorded.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from models.alert import ALERT_START, Alert
from models.config import CollisionConfig, MODULE_COLLISION
from models.detection import PersonView, VehicleView
from algorithms.buffers import CooldownTracker, PersistenceBuffer
from algorithms.geometry import distance
from .base import ModuleStateMachine


def pair_key(human_id: int, vehicle_id: int) -> str:
    return f"{human_id}-{vehicle_id}"


@dataclass
class CollisionPairState:
    """Proximity window for one person/vehicle pair."""
    buffer: PersistenceBuffer
    last_seen: float = 0.0


class CollisionModule(ModuleStateMachine[CollisionPairState]):
    """Sustained-proximity detector over the person x vehicle cross product."""

    name = MODULE_COLLISION

    def __init__(self, config: CollisionConfig):
        super().__init__(config)
        self._cooldowns = CooldownTracker()

    @property
    def cooldowns(self) -> CooldownTracker:
        return self._cooldowns

    def step(
        self,
        state: CollisionPairState,
        human: PersonView,
        vehicle: VehicleView,
        timestamp: float,
    ) -> Tuple[CollisionPairState, List[Alert]]:
        key = pair_key(human.track_id, vehicle.track_id)
        if self._cooldowns.is_on_cooldown(key, timestamp):
            return state, []

        is_close = distance(human.bottom_center, vehicle.centroid) < self._config.collision_distance_px
        state.buffer.push(is_close)
        state.last_seen = timestamp

        alerts: List[Alert] = []
        if state.buffer.all_true():
            alerts.append(Alert(
                module=self.name,
                state=ALERT_START,
                timestamp=timestamp,
                human_id=human.track_id,
                piv_id=vehicle.track_id,
            ))
            self._cooldowns.set_cooldown(key, timestamp, self._config.collision_cooldown_seconds)
            state.buffer.reset()
        return state, alerts

    def process(
        self,
        inputs: Tuple[Sequence[PersonView], Sequence[VehicleView]],
        timestamp: float,
    ) -> List[Alert]:
        humans, vehicles = inputs
        alerts: List[Alert] = []
        for human in humans:
            for vehicle in vehicles:
                key = pair_key(human.track_id, vehicle.track_id)
                state = self._states.get(key)
                if state is None:
                    state = CollisionPairState(
                        buffer=PersistenceBuffer(self._config.collision_buffer_frames),
                        last_seen=timestamp,
                    )
                    self._states[key] = state
                _, emitted = self.step(state, human, vehicle, timestamp)
                alerts.extend(emitted)
        return alerts

    def reset(self) -> None:
        super().reset()
        self._cooldowns.reset()

    def prune(self, now: float, max_age: float) -> int:
        # Pairs still on cooldown keep their entry in the tracker
        self._cooldowns.clear_expired(now)
        return super().prune(now, max_age)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "module": self.name,
            "distance_threshold": self._config.collision_distance_px,
            "buffer_size": self._config.collision_buffer_frames,
            "cooldown_seconds": self._config.collision_cooldown_seconds,
            "pairs": {
                key: {
                    "buffer": st.buffer.get_ordered_contents(),
                    "cooldown_until": self._cooldowns.expiry(key),
                }
                for key, st in self._states.items()
            },
        }
