"""
Alert sinks.

The dispatcher hands every emitted Alert to each registered sink. Ownership of
the alert passes to the sink; persistence, processed-flag bookkeeping and
retention are the sink's concern, not the core's.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional

from models.alert import Alert


class AlertSink(ABC):
    """Receiver for alerts produced by the frame dispatcher."""

    @abstractmethod
    def emit(self, alert: Alert) -> None:
        """
        Accept one alert. Must return promptly; the dispatcher does not wait
        on downstream delivery.
        """
        pass


class CallbackSink(AlertSink):
    """Adapts a plain callable into a sink."""

    def __init__(self, callback: Callable[[Alert], None]):
        self._callback = callback

    def emit(self, alert: Alert) -> None:
        self._callback(alert)


class AlertRecorder(AlertSink):
    """
    In-memory sink that keeps every alert in arrival order.

    Useful for tests, replays and the inspection panel.
    """

    def __init__(self, max_alerts: Optional[int] = None):
        self._alerts: List[Alert] = []
        self._max_alerts = max_alerts

    def emit(self, alert: Alert) -> None:
        self._alerts.append(alert)
        if self._max_alerts is not None and len(self._alerts) > self._max_alerts:
            del self._alerts[0]

    @property
    def alerts(self) -> List[Alert]:
        return list(self._alerts)

    def by_module(self, module: str) -> List[Alert]:
        return [a for a in self._alerts if a.module == module]

    def counts_by_module(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for a in self._alerts:
            counts[a.module] = counts.get(a.module, 0) + 1
        return counts

    def clear(self) -> None:
        self._alerts.clear()

    def __len__(self) -> int:
        return len(self._alerts)


class LoggingSink(AlertSink):
    """Writes one log line per alert."""

    def __init__(self, level: int = logging.INFO):
        self._level = level

    def emit(self, alert: Alert) -> None:
        transition = "started" if alert.is_start else "ended"
        details = {k: v for k, v in alert.to_dict().items()
                   if k in ("track_id", "vehicle_id", "speed", "human_id", "piv_id", "violations")}
        logging.log(
            self._level,
            f"[ALERT] camera={alert.camera_id} module={alert.module} {transition} "
            f"t={alert.timestamp:.2f} {details}",
        )
