"""Policy shape helpers and structural comparison.

A policy is either a managed-policy reference (``{"arn": ...}``) or an
inline document (``{"Version": ..., "Statement": [...]}``). The two forms
are exclusive.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import unquote

POLICY_VERSION = "2012-10-17"


def default_policy_name(role_name: str) -> str:
    """Name under which a role's inline policy document is stored."""
    return f"{role_name}-policy"


def is_inline_policy(policy: Any) -> bool:
    """Return ``True`` for a structured document with ``Version`` and ``Statement``."""
    return (
        isinstance(policy, Mapping)
        and bool(policy.get("Version"))
        and isinstance(policy.get("Statement"), list)
    )


def is_managed_policy(policy: Any) -> bool:
    """Return ``True`` for a non-empty ``{"arn": ...}`` reference."""
    return (
        isinstance(policy, Mapping)
        and not is_inline_policy(policy)
        and bool(policy.get("arn"))
    )


def normalize_policy(policy: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of *policy* with ``arn`` dropped from inline documents."""
    normalized = dict(policy)
    if is_inline_policy(normalized):
        normalized.pop("arn", None)
    return normalized


def _canonical(value: Any) -> Any:
    if isinstance(value, Mapping):
        return ("map", tuple(sorted((str(k), _canonical(v)) for k, v in value.items())))
    if isinstance(value, (list, tuple)):
        # Lists are unordered (IAM statements, action lists): sort canonical items.
        return ("list", tuple(sorted((_canonical(v) for v in value), key=repr)))
    return ("scalar", value)


def policies_equal(a: Any, b: Any) -> bool:
    """Order-insensitive recursive equality.

    Mappings compare by key set and value, lists compare as multisets and
    scalars compare with ``==``.

    Args:
        a: First value (policy, principal, or any JSON-like value).
        b: Second value.

    Returns:
        ``True`` if both values are structurally equal.
    """
    return _canonical(a) == _canonical(b)


def trust_policy_document(service: str | list[str]) -> dict[str, Any]:
    """Build the assume-role document letting *service* assume the role."""
    return {
        "Version": POLICY_VERSION,
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"Service": service},
                "Action": "sts:AssumeRole",
            }
        ],
    }


def load_document(document: Mapping[str, Any] | str) -> dict[str, Any]:
    """Return *document* as a dict, decoding (URL-encoded) JSON strings."""
    if isinstance(document, str):
        return json.loads(unquote(document))
    return dict(document)


def service_from_trust_policy(document: Mapping[str, Any] | str | None) -> Any:
    """Extract the service principal from an assume-role document.

    Args:
        document: Trust policy as a dict, or as the (possibly URL-encoded)
            JSON string some API responses return.

    Returns:
        The first statement's ``Principal.Service`` (string or list), or
        ``None`` if the document names no service principal.
    """
    if document is None:
        return None
    document = load_document(document)
    statements = document.get("Statement") or []
    if isinstance(statements, Mapping):
        statements = [statements]
    if not statements:
        return None
    principal = statements[0].get("Principal") or {}
    if not isinstance(principal, Mapping):
        return None
    return principal.get("Service")
