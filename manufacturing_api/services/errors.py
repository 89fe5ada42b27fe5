"""
Service errors.

Raised by the service layer and turned into HTTP responses by the
handlers registered in main.py. Anything else propagates as a 500.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 400
    default_code = "SERVICE_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}


class NotFoundError(ServiceError):
    """Referenced BOM, item, workstation or version does not exist."""

    status_code = 404
    default_code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: Any):
        super().__init__(
            message=f"{entity_type} with id '{entity_id}' not found",
            details={"entity_type": entity_type, "entity_id": str(entity_id)},
        )


class ConflictError(ServiceError):
    """Uniqueness violation (bom_no + company, version, item code, workstation name)."""

    status_code = 409
    default_code = "CONFLICT"


_UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """
    True when the IntegrityError comes from a unique constraint.

    Foreign-key / not-null failures are programming or data errors and must
    not be reported as a conflict.
    """
    orig = getattr(exc, "orig", None)
    if getattr(orig, "sqlstate", None) == _UNIQUE_VIOLATION_SQLSTATE:
        return True
    if getattr(orig, "pgcode", None) == _UNIQUE_VIOLATION_SQLSTATE:
        return True
    message = str(orig if orig is not None else exc).lower()
    # sqlite: "UNIQUE constraint failed", postgres: "duplicate key value"
    return "unique constraint" in message or "duplicate key" in message
