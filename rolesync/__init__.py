"""Rolesync: reconcile a single cloud IAM role against a desired state.

Entry point for the library::

    from rolesync import ComponentContext, JSONFileStateStore, reconcile

    ctx = ComponentContext(state=JSONFileStateStore(".state/role.json"))
    outputs = reconcile({"service": "lambda.amazonaws.com"}, ctx)
"""

from .base import (
    AWSConfig,
    DesiredConfig,
    IAMBlueprint,
    JSONFileStateStore,
    MemoryStateStore,
    RecordedState,
    RemoteRole,
    StateStore,
)
from .context import ComponentContext
from .reconciler import RoleComponent, reconcile, remove

__all__ = [
    "AWSConfig",
    "DesiredConfig",
    "IAMBlueprint",
    "JSONFileStateStore",
    "MemoryStateStore",
    "RecordedState",
    "RemoteRole",
    "StateStore",
    "ComponentContext",
    "RoleComponent",
    "reconcile",
    "remove",
]
