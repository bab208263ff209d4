"""
Recorded-state persistence.

The hosting orchestrator normally owns state; these stores cover embedding
and tests. A store only ever holds one :class:`RecordedState`.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from .config import RecordedState
from .exceptions import StateError


class StateStore(ABC):
    """Load and save the recorded state of a single role."""

    @abstractmethod
    def load(self) -> RecordedState:
        """Return the recorded state (empty if nothing was saved)."""

    @abstractmethod
    def save(self, state: RecordedState) -> None:
        """Persist *state*, replacing whatever was stored."""


class MemoryStateStore(StateStore):
    """In-process store backed by a dict."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self.data: dict[str, Any] = dict(initial or {})

    def load(self) -> RecordedState:
        return RecordedState(**self.data)

    def save(self, state: RecordedState) -> None:
        self.data = state.dump()


class JSONFileStateStore(StateStore):
    """Store state as a JSON object in a file.

    A missing file loads as empty state.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> RecordedState:
        if not self.path.exists():
            return RecordedState()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            raise StateError(f"Failed to read state from '{self.path}'") from e
        if not isinstance(data, dict):
            raise StateError(f"State file '{self.path}' does not hold a JSON object")
        return RecordedState(**data)

    def save(self, state: RecordedState) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(state.dump(), indent=2), encoding="utf-8")
        except OSError as e:
            raise StateError(f"Failed to write state to '{self.path}'") from e
