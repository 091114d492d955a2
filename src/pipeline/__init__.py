"""
Pipeline module for the Argus monitor core.

The pipeline turns incoming frames into alerts:
- Frame dedup and ordering
- Per-module projection of detections
- Module state machine updates
- Alert forwarding to sinks
"""

from .dispatcher import (
    DispatcherStats,
    FrameDispatcher,
    create_dispatcher_from_config,
    project_inputs,
)
from .sinks import AlertRecorder, AlertSink, CallbackSink, LoggingSink

__all__ = [
    "DispatcherStats",
    "FrameDispatcher",
    "create_dispatcher_from_config",
    "project_inputs",
    "AlertRecorder",
    "AlertSink",
    "CallbackSink",
    "LoggingSink",
]
