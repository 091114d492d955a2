"""
Vehicle overspeed module.

Each vehicle track gets a PositionKalman seeded at its first centroid. The
filter runs predict + update on every frame the track is seen (the first one
included). Speed comes from the detection's own `speed_kmh` when present,
otherwise from the filter velocity scaled by `meters_per_pixel`.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Sequence, Tuple

from models.alert import ALERT_START, Alert
from models.config import MODULE_VEHICLE, VehicleConfig
from models.detection import VehicleView
from algorithms.buffers import CooldownTracker
from algorithms.filters import PositionKalman
from .base import ModuleStateMachine

CENTROID_HISTORY_LEN = 30


@dataclass
class VehicleTrackState:
    """
    Per-vehicle motion state.

    Attributes:
        kalman: Position/velocity filter owned by this track.
        centroid_history: Recent raw centroids (newest last).
        current_plane: Ground plane hint of the latest detection.
        computed_speed: Latest speed in km/h.
        last_speed_time: Frame time of the latest speed.
        last_seen: Frame time of the latest update.
    """
    kalman: PositionKalman
    centroid_history: Deque[Tuple[float, float]] = field(
        default_factory=lambda: deque(maxlen=CENTROID_HISTORY_LEN)
    )
    current_plane: int = 0
    computed_speed: float = 0.0
    last_speed_time: float = 0.0
    last_seen: float = 0.0


class VehicleModule(ModuleStateMachine[VehicleTrackState]):
    """Overspeed detector with a per-vehicle cooldown."""

    name = MODULE_VEHICLE

    def __init__(self, config: VehicleConfig):
        super().__init__(config)
        self._cooldowns = CooldownTracker()

    @property
    def cooldowns(self) -> CooldownTracker:
        return self._cooldowns

    def _new_state(self, view: VehicleView, timestamp: float) -> VehicleTrackState:
        cx, cy = view.centroid
        dt = 1.0 / self._config.fps if self._config.fps > 0 else 0.0
        kalman = PositionKalman(
            cx, cy,
            q=self._config.process_noise,
            r=self._config.measurement_noise,
            dt=dt,
        )
        return VehicleTrackState(
            kalman=kalman,
            current_plane=view.plane_hint or 0,
            last_speed_time=timestamp,
            last_seen=timestamp,
        )

    def step(
        self,
        state: VehicleTrackState,
        view: VehicleView,
        timestamp: float,
    ) -> Tuple[VehicleTrackState, List[Alert]]:
        cx, cy = view.centroid
        state.kalman.predict()
        state.kalman.update(cx, cy)

        if view.speed_kmh is not None:
            speed = view.speed_kmh
        else:
            speed = state.kalman.speed_kmh(self._config.meters_per_pixel)

        state.computed_speed = speed
        state.last_speed_time = timestamp
        state.last_seen = timestamp
        state.centroid_history.append((cx, cy))
        if view.plane_hint is not None:
            state.current_plane = view.plane_hint

        alerts: List[Alert] = []
        key = str(view.track_id)
        if speed > self._config.speed_threshold_kmh and not self._cooldowns.is_on_cooldown(key, timestamp):
            alerts.append(Alert(
                module=self.name,
                state=ALERT_START,
                timestamp=timestamp,
                vehicle_id=view.track_id,
                speed=round(speed, 1),
            ))
            self._cooldowns.set_cooldown(key, timestamp, self._config.cooldown_seconds)
        return state, alerts

    def process(self, inputs: Sequence[VehicleView], timestamp: float) -> List[Alert]:
        alerts: List[Alert] = []
        for view in inputs:
            state = self._states.get(view.track_id)
            if state is None:
                state = self._new_state(view, timestamp)
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
        tracks: Dict[int, Any] = {}
        for track_id, st in self._states.items():
            x, y = st.kalman.position
            vx, vy = st.kalman.velocity
            tracks[track_id] = {
                "kalman_state": {"x": x, "y": y, "vx": vx, "vy": vy},
                "computed_speed": st.computed_speed,
                "current_plane": st.current_plane,
                "centroid_history": list(st.centroid_history),
            }
        return {
            "module": self.name,
            "speed_threshold_kmh": self._config.speed_threshold_kmh,
            "tracks": tracks,
            "alert_cooldown": {
                track_id: self._cooldowns.expiry(str(track_id))
                for track_id in self._states
                if str(track_id) in self._cooldowns
            },
        }
