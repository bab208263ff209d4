"""Per-invocation dependencies handed to :func:`rolesync.reconcile`."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from rolesync.base.config import AWSConfig
from rolesync.base.iam import IAMBlueprint
from rolesync.base.logger import ComponentLogger
from rolesync.base.state import MemoryStateStore, StateStore


def aws_client_factory(config: AWSConfig) -> IAMBlueprint:
    """Build the boto3-backed IAM client."""
    # Lazy-import to keep boto3 off the import path of the base package
    from rolesync.aws.iam import IAM

    return IAM(config)


@dataclass
class ComponentContext:
    """Capabilities a reconcile or remove needs from its host.

    Attributes:
        state: Store holding the last recorded state of the role.
        credentials: Provider credentials; the region is filled in per call.
        logger: Status and debug sink.
        client_factory: Builds a remote client from region-pinned credentials.
    """

    state: StateStore = field(default_factory=MemoryStateStore)
    credentials: AWSConfig = field(default_factory=AWSConfig)
    logger: ComponentLogger = field(default_factory=ComponentLogger)
    client_factory: Callable[[AWSConfig], IAMBlueprint] = aws_client_factory

    def client(self, region: str) -> IAMBlueprint:
        """Return a remote client for *region*."""
        return self.client_factory(self.credentials.for_region(region))
