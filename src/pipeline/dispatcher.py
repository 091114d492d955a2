"""
Frame dispatcher for the Argus monitor core.

The dispatcher is the only entry point the surrounding application calls once
per frame. It:
- drops re-delivered and out-of-order frames
- projects detections into the active module's views
- runs the active module's state machine
- stamps alerts and forwards them to every sink

Switching the active module is a cancellation point: the previous module's
state (buffers, filters, cooldowns) is discarded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Union

from models.alert import Alert
from models.config import (
    Config,
    MODULE_COLLISION,
    MODULE_INTRUSION,
    MODULE_PPE,
    MODULE_THROWING,
    MODULE_VEHICLE,
    MODULES,
    module_config_from_dict,
)
from models.detection import Detection, as_person, as_ppe, as_throwing, as_vehicle
from models.frame import Frame
from algorithms.modules import ModuleStateMachine, create_module
from .sinks import AlertSink, CallbackSink


@dataclass
class DispatcherStats:
    """Runtime statistics for the dispatcher."""
    frames_received: int = 0
    frames_processed: int = 0
    frames_duplicate: int = 0
    frames_out_of_order: int = 0
    alert_count: int = 0
    alerts_by_module: Dict[str, int] = field(default_factory=dict)
    tracks_evicted: int = 0
    sink_errors: int = 0


def _select(detections: Sequence[Detection], project) -> List[Any]:
    views = []
    for det in detections:
        view = project(det)
        if view is not None:
            views.append(view)
    return views


def project_inputs(module: str, config: Any, detections: Sequence[Detection]) -> Any:
    """
    Build the per-module inputs from a frame's detections.

    Detections lacking the class or derived field a module needs are skipped.

    Args:
        module: Module name.
        config: The module's typed config.
        detections: Frame detections in delivery order.
    """
    if module == MODULE_INTRUSION:
        return _select(detections, as_person)
    if module == MODULE_THROWING:
        return _select(detections, as_throwing)
    if module == MODULE_VEHICLE:
        return _select(detections, lambda d: as_vehicle(d, config.classes))
    if module == MODULE_COLLISION:
        humans = _select(detections, as_person)
        vehicles = _select(detections, lambda d: as_vehicle(d, config.vehicle_classes))
        return (humans, vehicles)
    if module == MODULE_PPE:
        return _select(detections, as_ppe)
    raise ValueError(f"Unknown module: {module!r} (expected one of {', '.join(MODULES)})")


class FrameDispatcher:
    """
    Routes frames to the active module and forwards alerts to sinks.

    Example:
        recorder = AlertRecorder()
        dispatcher = FrameDispatcher(Config.from_dict(cfg), sinks=[recorder])
        for frame in frames:
            dispatcher.process_frame(frame)
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        sinks: Optional[Sequence[AlertSink]] = None,
    ):
        self.config = config or Config()
        self.stats = DispatcherStats()
        self._sinks: List[AlertSink] = list(sinks or [])
        self._module: Optional[ModuleStateMachine] = None
        self._active_module: Optional[str] = None
        self._last_timestamp: Optional[float] = None
        self.activate(self.config.active_module)

    @property
    def active_module(self) -> Optional[str]:
        return self._active_module

    @property
    def module(self) -> Optional[ModuleStateMachine]:
        """The active module's state machine."""
        return self._module

    @property
    def last_timestamp(self) -> Optional[float]:
        return self._last_timestamp

    def add_sink(self, sink: Union[AlertSink, Any]) -> None:
        """
        Register an alert sink.

        Args:
            sink: An AlertSink, or a callable taking an Alert.
        """
        if not isinstance(sink, AlertSink):
            sink = CallbackSink(sink)
        self._sinks.append(sink)

    def activate(self, module: str, module_config: Any = None) -> ModuleStateMachine:
        """
        Make `module` the active module with fresh state.

        All state of the previously active module is discarded, including its
        per-track motion filters and cooldowns.

        Args:
            module: Module name.
            module_config: Typed config (or thresholds dict) for this
                activation. Defaults to the module's section of the
                dispatcher config.
        """
        if module not in MODULES:
            raise ValueError(f"Unknown module: {module!r} (expected one of {', '.join(MODULES)})")

        if self._module is not None:
            self._module.reset()
        if module_config is None:
            cfg = self.config.module_config(module)
        elif isinstance(module_config, dict):
            cfg = module_config_from_dict(module, module_config)
        else:
            cfg = module_config
        self._module = create_module(module, cfg)
        self._active_module = module
        self._last_timestamp = None
        logging.info(f"Dispatcher activated module={module} config={cfg}")
        return self._module

    def process_frame(self, frame: Union[Frame, Dict[str, Any]]) -> List[Alert]:
        """
        Process one frame through the active module.

        Args:
            frame: A Frame, or the external `{t, detections}` dict.

        Returns:
            Alerts emitted for this frame (already forwarded to sinks).
        """
        if isinstance(frame, dict):
            frame = Frame.from_dict(frame)
        self.stats.frames_received += 1

        if not self._accept(frame.timestamp):
            return []
        self._last_timestamp = frame.timestamp
        self.stats.frames_processed += 1

        inputs = project_inputs(self._active_module, self._module.config, frame.detections)
        alerts = self._module.process(inputs, frame.timestamp)

        stale_after = self.config.dispatcher.stale_track_seconds
        if stale_after is not None:
            evicted = self._module.prune(frame.timestamp, stale_after)
            if evicted:
                self.stats.tracks_evicted += evicted
                logging.debug(f"Evicted {evicted} stale {self._active_module} state(s) at t={frame.timestamp:.2f}")

        detected_time = datetime.now(timezone.utc).isoformat()
        stamped = [a.stamped(self.config.camera_id, detected_time) for a in alerts]
        for alert in stamped:
            self._record(alert)
            self._emit(alert)

        interval = self.config.dispatcher.stats_log_interval
        if interval and self.stats.frames_processed % interval == 0:
            logging.info(
                f"Dispatcher stats: frames={self.stats.frames_processed}, "
                f"dropped={self.stats.frames_duplicate + self.stats.frames_out_of_order}, "
                f"alerts={self.stats.alerts_by_module}"
            )
        return stamped

    def process_frames(self, frames) -> List[Alert]:
        """Process an iterable of frames in order and return all alerts."""
        alerts: List[Alert] = []
        for frame in frames:
            alerts.extend(self.process_frame(frame))
        return alerts

    def snapshot(self) -> Dict[str, Any]:
        """Inspection view of the active module's state."""
        return self._module.snapshot()

    def _accept(self, timestamp: float) -> bool:
        """Dedup and ordering gate; True when the frame should be processed."""
        last = self._last_timestamp
        if last is None:
            return True
        if abs(timestamp - last) < self.config.dispatcher.dedup_epsilon:
            self.stats.frames_duplicate += 1
            return False
        if timestamp < last:
            self.stats.frames_out_of_order += 1
            logging.warning(f"Dropping out-of-order frame t={timestamp:.3f} (last={last:.3f})")
            return False
        return True

    def _record(self, alert: Alert) -> None:
        self.stats.alert_count += 1
        self.stats.alerts_by_module[alert.module] = self.stats.alerts_by_module.get(alert.module, 0) + 1

    def _emit(self, alert: Alert) -> None:
        for sink in self._sinks:
            try:
                sink.emit(alert)
            except Exception as e:
                self.stats.sink_errors += 1
                logging.warning(f"Alert sink error: {e}")


def create_dispatcher_from_config(
    config: Dict[str, Any],
    sinks: Optional[Sequence[AlertSink]] = None,
) -> FrameDispatcher:
    """
    Factory function to create a FrameDispatcher from a config dict.

    Args:
        config: Full application config dict (e.g. from load_config).
        sinks: Alert sinks to register.
    """
    return FrameDispatcher(Config.from_dict(config), sinks=sinks)
