"""
Pydantic configuration models.

Covers the provider credentials (:class:`AWSConfig`), the caller's desired
role configuration (:class:`DesiredConfig`), the last applied configuration
(:class:`RecordedState`) and the explicit precedence rules that combine them
(:func:`resolve_inputs`).
"""

from __future__ import annotations

import os
import secrets
import string
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .policy import is_inline_policy, normalize_policy

DEFAULT_SERVICE = "lambda.amazonaws.com"
DEFAULT_REGION = "us-east-1"
NAME_LENGTH = 8

Principal = Union[str, list[str]]


def default_policy() -> dict[str, Any]:
    """Return the empty managed-policy reference."""
    return {"arn": None}


def generate_name() -> str:
    """Return a short random role name token."""
    alphabet = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(NAME_LENGTH))


class AWSConfig(BaseModel):
    """Configuration for the AWS IAM client.

    Credentials are resolved in order:
    1. Explicit values passed in the config dict.
    2. Environment variables (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY,
       AWS_SESSION_TOKEN, AWS_DEFAULT_REGION).
    3. If neither is set, fields are left as None so boto3 can fall back to its
       own credential chain (instance metadata, ~/.aws/credentials, etc.).
    """

    model_config = ConfigDict(extra="forbid")

    aws_access_key_id: str | None = Field(default=None, description="AWS access key ID")
    aws_secret_access_key: str | None = Field(default=None, description="AWS secret access key")
    aws_session_token: str | None = Field(default=None, description="AWS session token")
    region_name: str | None = Field(default=None, description="AWS region (e.g. 'us-east-1')")

    @model_validator(mode="before")
    @classmethod
    def resolve_from_env(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Fall back to environment variables for missing credentials."""
        env_map = {
            "aws_access_key_id": "AWS_ACCESS_KEY_ID",
            "aws_secret_access_key": "AWS_SECRET_ACCESS_KEY",
            "aws_session_token": "AWS_SESSION_TOKEN",
            "region_name": "AWS_DEFAULT_REGION",
        }
        values = dict(values)
        for field, env_var in env_map.items():
            if not values.get(field):
                values[field] = os.environ.get(env_var)
        return values

    def for_region(self, region: str) -> AWSConfig:
        """Return a copy of this config pinned to *region*."""
        return self.model_copy(update={"region_name": region})


def _check_policy(policy: dict[str, Any] | None) -> dict[str, Any] | None:
    if policy is None:
        return None
    if "arn" not in policy and not is_inline_policy(policy):
        raise ValueError(
            "policy must be a managed reference {'arn': ...} "
            "or an inline document {'Version': ..., 'Statement': [...]}"
        )
    return policy


class DesiredConfig(BaseModel):
    """Desired role configuration supplied by the caller.

    Every field is optional; omitted fields are filled in by
    :func:`resolve_inputs`.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, description="Role name; generated if omitted")
    service: Principal | None = Field(default=None, description="Trusted service principal")
    policy: dict[str, Any] | None = Field(
        default=None, description="{'arn': ...} or {'Version': ..., 'Statement': [...]}"
    )
    region: str | None = Field(default=None, description="Provider region")

    @field_validator("policy")
    @classmethod
    def validate_policy(cls, policy: dict[str, Any] | None) -> dict[str, Any] | None:
        return _check_policy(policy)


class RecordedState(BaseModel):
    """Last successfully applied configuration.

    An empty instance dumps to ``{}``, the layout persisted after removal.
    """

    name: str | None = None
    arn: str | None = None
    service: Principal | None = None
    policy: dict[str, Any] | None = None
    region: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.name

    def dump(self) -> dict[str, Any]:
        """Serialize to the persisted layout, omitting unset fields."""
        return {k: v for k, v in self.model_dump().items() if v is not None}

    def outputs(self) -> dict[str, Any]:
        """Return the public outputs snapshot (region excluded)."""
        return {
            "name": self.name,
            "arn": self.arn,
            "service": self.service,
            "policy": self.policy,
        }


class ResolvedInputs(BaseModel):
    """Fully resolved configuration for one reconcile run."""

    name: str
    service: Principal
    policy: dict[str, Any]
    region: str


def resolve_inputs(desired: DesiredConfig, recorded: RecordedState) -> ResolvedInputs:
    """Combine caller input, recorded state and defaults.

    Each field resolves independently as: caller value > recorded value >
    built-in default. ``name`` has no default and is generated when
    neither side supplies one. The chosen policy is merged over the empty
    ``{"arn": None}`` reference and normalized, so an inline document never
    carries an ``arn``.

    Args:
        desired: Caller-supplied configuration.
        recorded: Previously recorded state (may be empty).

    Returns:
        The resolved inputs.
    """
    name = desired.name or recorded.name or generate_name()
    service = desired.service or recorded.service or DEFAULT_SERVICE
    region = desired.region or recorded.region or DEFAULT_REGION

    chosen = desired.policy if desired.policy is not None else recorded.policy
    policy = {**default_policy(), **(chosen or {})}

    return ResolvedInputs(
        name=name,
        service=service,
        policy=normalize_policy(policy),
        region=region,
    )


__all__ = [
    "AWSConfig",
    "DesiredConfig",
    "RecordedState",
    "ResolvedInputs",
    "DEFAULT_SERVICE",
    "DEFAULT_REGION",
    "default_policy",
    "generate_name",
    "resolve_inputs",
]
