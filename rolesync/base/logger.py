"""
Structured logging for Rolesync.

Emits JSON-structured log records carrying the reconcile context (role,
region, operation, request id) and exposes the ``status``/``debug`` sink a
hosting orchestrator expects from a component.
"""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any

_CONTEXT_FIELDS = ("request_id", "role", "region", "operation")


class StructuredFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry: dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in _CONTEXT_FIELDS:
            val = getattr(record, key, None)
            if val is not None:
                log_entry[key] = val
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = str(record.exc_info[1])
        return json.dumps(log_entry)


class ComponentLogger:
    """Status and debug reporting for one component invocation.

    All records emitted through one instance share a ``request_id`` so a
    whole deploy or remove can be followed in a log aggregator.
    """

    def __init__(self, name: str = "rolesync", request_id: str | None = None) -> None:
        self.logger = logging.getLogger(name)
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(handler)
            self.logger.setLevel(logging.INFO)
        self.request_id = request_id or uuid.uuid4().hex[:12]
        self.role: str | None = None
        self.region: str | None = None

    def begin(self) -> None:
        """Start a new invocation: fresh request id, no bound role or region."""
        self.request_id = uuid.uuid4().hex[:12]
        self.role = None
        self.region = None

    def bind(self, role: str | None = None, region: str | None = None) -> None:
        """Attach the role name and region to subsequent records."""
        if role is not None:
            self.role = role
        if region is not None:
            self.region = region

    def log_operation(
        self,
        level: int,
        message: str,
        *,
        operation: str | None = None,
        exc_info: bool = False,
    ) -> None:
        extra = {
            "request_id": self.request_id,
            "role": self.role,
            "region": self.region,
            "operation": operation,
        }
        self.logger.log(level, message, extra=extra, exc_info=exc_info)

    def status(self, message: str) -> None:
        """Report a coarse lifecycle status (``Deploying``, ``Creating``...)."""
        self.log_operation(logging.INFO, message, operation="status")

    def debug(self, message: str) -> None:
        self.log_operation(logging.DEBUG, message, operation="debug")

    def error(self, message: str, exc_info: bool = True) -> None:
        self.log_operation(logging.ERROR, message, operation="error", exc_info=exc_info)
