"""
State machine interface for surveillance modules.

Every module (intrusion, throwing, vehicle, collision, ppe) implements this
interface. A module consumes the per-frame inputs the dispatcher projected for
it, updates the per-key state it owns, and returns Alerts.

Modules never share state objects: each instance owns its key -> state map,
and the dispatcher owns the active instance.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, Hashable, List, TypeVar

from models.alert import Alert

S = TypeVar("S")


class ModuleStateMachine(ABC, Generic[S]):
    """
    Abstract base class for module state machines.

    Subclasses keep one state record per key (a track id, or a pair key for
    collision) in `self._states`. Each record carries a `last_seen` timestamp
    so abandoned keys can be evicted with prune().
    """

    name: str = ""

    def __init__(self, config: Any):
        self._config = config
        self._states: Dict[Hashable, S] = {}

    @property
    def config(self) -> Any:
        return self._config

    def get_state(self, key: Hashable):
        """Return the state for a key, or None if it has never been seen."""
        return self._states.get(key)

    def keys(self) -> List[Hashable]:
        return list(self._states.keys())

    def __len__(self) -> int:
        return len(self._states)

    def reset(self) -> None:
        """Discard all per-key state."""
        self._states.clear()

    def prune(self, now: float, max_age: float) -> int:
        """
        Evict state for keys not updated within `max_age` seconds.

        Returns:
            Number of evicted keys.
        """
        stale = [key for key, st in self._states.items() if now - st.last_seen > max_age]
        for key in stale:
            del self._states[key]
        return len(stale)

    @abstractmethod
    def process(self, inputs: Any, timestamp: float) -> List[Alert]:
        """
        Consume one frame's projected inputs.

        Args:
            inputs: Module-specific detection views for this frame.
            timestamp: Frame time in seconds.

        Returns:
            Alerts emitted by this frame, in detection order.
        """
        pass

    @abstractmethod
    def snapshot(self) -> Dict[str, Any]:
        """Plain-dict view of the current state for inspection and logging."""
        pass
