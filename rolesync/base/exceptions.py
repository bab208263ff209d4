"""
Rolesync exception hierarchy.

Every provider failure surfaces as an :class:`IAMError` (or one of its
sub-exceptions for common failure modes), all rooted at
:class:`RolesyncError`.
"""

from __future__ import annotations


# ── Base ──────────────────────────────────────────────────────────────
class RolesyncError(Exception):
    """Root exception for all Rolesync errors."""


# ── IAM / Auth ────────────────────────────────────────────────────────
class IAMError(RolesyncError):
    """Base exception for IAM operations.

    Attributes:
        code: Provider error code (e.g. ``NoSuchEntity``), if known.
    """

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class RoleNotFoundError(IAMError):
    """IAM role not found."""


class RoleAlreadyExistsError(IAMError):
    """IAM role already exists."""


class MalformedPolicyError(IAMError):
    """Policy document rejected by the provider."""


class AccessDeniedError(IAMError):
    """Caller is not authorized for the operation."""


# ── State ─────────────────────────────────────────────────────────────
class StateError(RolesyncError):
    """Recorded state could not be read or written."""
