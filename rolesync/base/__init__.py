"""Abstract client blueprint, models and core utilities.

Import them to type-hint your own code or to plug in a custom remote
client or state store.
"""

from .config import AWSConfig, DesiredConfig, RecordedState, ResolvedInputs
from .iam import IAMBlueprint, RemoteRole
from .state import JSONFileStateStore, MemoryStateStore, StateStore


__all__ = [
    "AWSConfig",
    "DesiredConfig",
    "RecordedState",
    "ResolvedInputs",
    "IAMBlueprint",
    "RemoteRole",
    "JSONFileStateStore",
    "MemoryStateStore",
    "StateStore",
]
