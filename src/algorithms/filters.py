"""
Recursive motion filters for per-track smoothing.

- ScalarKalman: 1-D random-walk Kalman smoother for noisy scalar readings.
- PositionKalman: simplified 2-D position filter with a heuristic velocity.
- EMAFilter: exponential moving average.
"""

from __future__ import annotations

import math
from typing import Tuple

import numpy as np

MS_TO_KMH = 3.6
VELOCITY_MEMORY = 0.9


class ScalarKalman:
    """
    1-D Kalman filter with a constant-state model.

    Args:
        q: Process noise (how much the value is expected to drift per step).
        r: Measurement noise.
        initial_value: Initial state estimate.
    """

    def __init__(self, q: float = 0.1, r: float = 1.0, initial_value: float = 0.0):
        self.q = q
        self.r = r
        self._x = initial_value
        self._p = 1.0

    def update(self, measurement: float) -> float:
        """Fold in one measurement and return the new estimate."""
        p_pred = self._p + self.q
        k = p_pred / (p_pred + self.r)
        self._x = self._x + k * (measurement - self._x)
        self._p = (1 - k) * p_pred
        return self._x

    @property
    def value(self) -> float:
        return self._x

    @property
    def covariance(self) -> float:
        return self._p

    def set_process_noise(self, q: float) -> None:
        self.q = q

    def set_measurement_noise(self, r: float) -> None:
        self.r = r

    def reset(self, value: float = 0.0) -> None:
        self._x = value
        self._p = 1.0


class PositionKalman:
    """
    Simplified 2-D position filter over the state [x, y, vx, vy].

    Only the diagonal of the covariance is ever touched, and x/y gains are
    computed independently. Velocity is not part of the filter's state
    transition: after each correction it is blended 0.9/0.1 with the
    finite-difference velocity implied by the innovation.

    Args:
        x: Initial x position (pixels).
        y: Initial y position (pixels).
        q: Process noise added to each diagonal covariance entry per predict().
        r: Measurement noise.
        dt: Time step in seconds (1 / fps).
    """

    def __init__(
        self,
        x: float = 0.0,
        y: float = 0.0,
        q: float = 0.1,
        r: float = 1.0,
        dt: float = 0.04,
    ):
        self.q = q
        self.r = r
        self.dt = dt
        self._state = np.array([x, y, 0.0, 0.0], dtype=float)
        self._cov = np.eye(4, dtype=float)

    def predict(self) -> None:
        """Advance position by velocity * dt and inflate the covariance."""
        self._state[0] += self._state[2] * self.dt
        self._state[1] += self._state[3] * self.dt
        for i in range(4):
            self._cov[i, i] += self.q

    def update(self, mx: float, my: float) -> None:
        """Correct with a measured position."""
        kx = self._cov[0, 0] / (self._cov[0, 0] + self.r)
        ky = self._cov[1, 1] / (self._cov[1, 1] + self.r)

        dx = mx - self._state[0]
        dy = my - self._state[1]

        self._state[0] += kx * dx
        self._state[1] += ky * dy

        if self.dt != 0:
            blend = 1.0 - VELOCITY_MEMORY
            self._state[2] = self._state[2] * VELOCITY_MEMORY + dx / self.dt * blend
            self._state[3] = self._state[3] * VELOCITY_MEMORY + dy / self.dt * blend

        self._cov[0, 0] = (1 - kx) * self._cov[0, 0]
        self._cov[1, 1] = (1 - ky) * self._cov[1, 1]

    @property
    def position(self) -> Tuple[float, float]:
        return (float(self._state[0]), float(self._state[1]))

    @property
    def velocity(self) -> Tuple[float, float]:
        return (float(self._state[2]), float(self._state[3]))

    @property
    def covariance_diagonal(self) -> Tuple[float, ...]:
        return tuple(float(v) for v in np.diag(self._cov))

    def speed(self) -> float:
        """Speed in pixels per second."""
        return float(math.hypot(self._state[2], self._state[3]))

    def speed_kmh(self, meters_per_pixel: float = 0.05) -> float:
        """Speed converted to km/h using a ground scale; 0 if not finite."""
        kmh = self.speed() * meters_per_pixel * MS_TO_KMH
        return kmh if math.isfinite(kmh) else 0.0

    def reset(self, x: float = 0.0, y: float = 0.0) -> None:
        self._state = np.array([x, y, 0.0, 0.0], dtype=float)
        self._cov = np.eye(4, dtype=float)


class EMAFilter:
    """
    Exponential moving average. The first update seeds the value unsmoothed.

    Args:
        alpha: Weight of the newest sample (0-1). Lower means smoother.
    """

    def __init__(self, alpha: float = 0.3):
        self.alpha = alpha
        self._value = 0.0
        self._initialized = False

    def update(self, sample: float) -> float:
        if not self._initialized:
            self._value = sample
            self._initialized = True
        else:
            self._value = self.alpha * sample + (1 - self.alpha) * self._value
        return self._value

    @property
    def value(self) -> float:
        return self._value

    @property
    def initialized(self) -> bool:
        return self._initialized

    def reset(self) -> None:
        self._value = 0.0
        self._initialized = False
