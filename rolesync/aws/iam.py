"""AWS IAM implementation of the IAM blueprint."""

from __future__ import annotations

import json
from typing import Any, NoReturn

import boto3
from botocore.exceptions import ClientError, WaiterError

from rolesync.base.config import AWSConfig
from rolesync.base.exceptions import (
    AccessDeniedError,
    IAMError,
    MalformedPolicyError,
    RoleAlreadyExistsError,
    RoleNotFoundError,
)
from rolesync.base.iam import IAMBlueprint, RemoteRole
from rolesync.base.policy import (
    default_policy_name,
    is_inline_policy,
    is_managed_policy,
    load_document,
    service_from_trust_policy,
    trust_policy_document,
)

_ERROR_MAP: dict[str, type[IAMError]] = {
    "NoSuchEntity": RoleNotFoundError,
    "EntityAlreadyExists": RoleAlreadyExistsError,
    "MalformedPolicyDocument": MalformedPolicyError,
    "AccessDenied": AccessDeniedError,
    "DeleteConflict": IAMError,
}


def _code(e: ClientError) -> str:
    return e.response.get("Error", {}).get("Code", "")


def _handle(e: ClientError, msg: str) -> NoReturn:
    code = _code(e)
    exc = _ERROR_MAP.get(code)
    raise (exc or IAMError)(msg, code=code or None) from e


class IAM(IAMBlueprint):
    """AWS IAM role client.

    Attributes:
        client: boto3 IAM client.
    """

    def __init__(self, config: AWSConfig) -> None:
        """Initialize the IAM client.

        Args:
            config: AWS configuration object containing credentials and region.
        """
        self.client = boto3.client(
            "iam",
            aws_access_key_id=config.aws_access_key_id,
            aws_secret_access_key=config.aws_secret_access_key,
            aws_session_token=config.aws_session_token,
            region_name=config.region_name,
        )

    # --- Role management ---

    def get_role(self, name: str) -> RemoteRole | None:
        """Fetch a role together with its trust principal and policy.

        Returns:
            The live role, or ``None`` if it does not exist.

        Raises:
            IAMError: On any other IAM API failure.
        """
        try:
            role = self.client.get_role(RoleName=name)["Role"]
        except ClientError as e:
            if _code(e) == "NoSuchEntity":
                return None
            _handle(e, f"Failed to get role '{name}'")
        policy, policy_name = self._current_policy(name)
        return RemoteRole(
            name=role["RoleName"],
            arn=role["Arn"],
            service=service_from_trust_policy(role.get("AssumeRolePolicyDocument")),
            policy=policy,
            policy_name=policy_name,
        )

    def _current_policy(self, name: str) -> tuple[dict[str, Any], str | None]:
        """Return the policy attached to a role and its inline policy name.

        A managed attachment wins over an inline policy. The inline policy
        written by :meth:`add_role_policy` is preferred when several exist.
        """
        try:
            attached = self.client.list_attached_role_policies(RoleName=name)
            if attached.get("AttachedPolicies"):
                return {"arn": attached["AttachedPolicies"][0]["PolicyArn"]}, None

            names = self.client.list_role_policies(RoleName=name).get("PolicyNames", [])
            if not names:
                return {"arn": None}, None
            policy_name = default_policy_name(name)
            if policy_name not in names:
                policy_name = names[0]
            resp = self.client.get_role_policy(RoleName=name, PolicyName=policy_name)
            return load_document(resp["PolicyDocument"]), policy_name
        except ClientError as e:
            _handle(e, f"Failed to read policies of role '{name}'")

    def create_role(
        self,
        name: str,
        service: str | list[str],
        policy: dict[str, Any],
    ) -> str:
        """Create an IAM role and attach its policy.

        Waits until the role is visible before attaching the policy.

        Returns:
            Role ARN.

        Raises:
            RoleAlreadyExistsError: If a role with this name exists.
            IAMError: On any other IAM API failure.
        """
        try:
            resp = self.client.create_role(
                RoleName=name,
                AssumeRolePolicyDocument=json.dumps(trust_policy_document(service)),
            )
            self.client.get_waiter("role_exists").wait(RoleName=name)
        except ClientError as e:
            _handle(e, f"Failed to create role '{name}'")
        except WaiterError as e:
            raise IAMError(f"Role '{name}' did not become available") from e
        self.add_role_policy(name, policy)
        return resp["Role"]["Arn"]  # type: ignore[no-any-return]

    def delete_role(self, name: str, policy: dict[str, Any]) -> None:
        """Detach *policy* and delete the role.

        A role that no longer exists counts as deleted.

        Raises:
            IAMError: On any other IAM API failure (e.g. ``DeleteConflict``
                when other policies are still attached).
        """
        self.remove_role_policy(name, policy)
        try:
            self.client.delete_role(RoleName=name)
        except ClientError as e:
            if _code(e) == "NoSuchEntity":
                return
            _handle(e, f"Failed to delete role '{name}'")

    def update_assume_role_policy(self, name: str, service: str | list[str]) -> None:
        """Point the role's trust policy at *service*."""
        try:
            self.client.update_assume_role_policy(
                RoleName=name,
                PolicyDocument=json.dumps(trust_policy_document(service)),
            )
        except ClientError as e:
            _handle(e, f"Failed to update trust policy of role '{name}'")

    # --- Policy management ---

    def add_role_policy(self, name: str, policy: dict[str, Any]) -> None:
        """Attach a managed policy or put an inline policy document.

        An empty reference (``{"arn": None}``) attaches nothing.
        """
        try:
            if is_inline_policy(policy):
                self.client.put_role_policy(
                    RoleName=name,
                    PolicyName=default_policy_name(name),
                    PolicyDocument=json.dumps(policy),
                )
            elif is_managed_policy(policy):
                self.client.attach_role_policy(RoleName=name, PolicyArn=policy["arn"])
        except ClientError as e:
            _handle(e, f"Failed to attach policy to role '{name}'")

    def remove_role_policy(
        self,
        name: str,
        policy: dict[str, Any],
        policy_name: str | None = None,
    ) -> None:
        """Detach a managed policy or delete the inline policy document.

        The inline document is deleted under *policy_name* (as reported by
        :meth:`get_role`), defaulting to ``<role>-policy``. Detaching
        something that is not attached is ignored.
        """
        try:
            if is_inline_policy(policy):
                self.client.delete_role_policy(
                    RoleName=name, PolicyName=policy_name or default_policy_name(name)
                )
            elif is_managed_policy(policy):
                self.client.detach_role_policy(RoleName=name, PolicyArn=policy["arn"])
        except ClientError as e:
            if _code(e) == "NoSuchEntity":
                return
            _handle(e, f"Failed to detach policy from role '{name}'")
