"""IAM role client blueprint."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel


class RemoteRole(BaseModel):
    """Snapshot of a role as it currently exists at the provider."""

    name: str
    arn: str
    service: str | list[str] | None = None
    policy: dict[str, Any]
    policy_name: str | None = None


class IAMBlueprint(ABC):
    """Abstract interface for the remote role operations a reconcile needs.

    ``policy`` arguments are either a managed reference (``{"arn": ...}``)
    or an inline document (``{"Version": ..., "Statement": [...]}``);
    implementations dispatch on that shape when attaching and detaching.
    """

    @abstractmethod
    def get_role(self, name: str) -> RemoteRole | None:
        """Fetch a role, or ``None`` if it does not exist."""

    @abstractmethod
    def create_role(
        self,
        name: str,
        service: str | list[str],
        policy: dict[str, Any],
    ) -> str:
        """Create a role trusted by *service* with *policy* attached.

        Returns:
            Role identifier (ARN).
        """

    @abstractmethod
    def delete_role(self, name: str, policy: dict[str, Any]) -> None:
        """Delete a role after detaching *policy*.

        A role that is already gone is not an error.
        """

    @abstractmethod
    def update_assume_role_policy(self, name: str, service: str | list[str]) -> None:
        """Replace the role's trust policy so *service* may assume it."""

    @abstractmethod
    def add_role_policy(self, name: str, policy: dict[str, Any]) -> None:
        """Attach *policy* (inline or managed) to the role."""

    @abstractmethod
    def remove_role_policy(
        self,
        name: str,
        policy: dict[str, Any],
        policy_name: str | None = None,
    ) -> None:
        """Detach *policy* (inline or managed) from the role.

        *policy_name* names the inline document to delete when it was not
        written under the default name.
        """
