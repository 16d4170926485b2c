"""Refusals raised by the workflow engines and the hiring service.

Every error carries the HTTP status an outer request handler should answer
with, and serializes to a JSON-friendly mapping.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError


class HiringError(Exception):
    """Base class for all structured refusals."""

    code = "hiring_error"
    status_code = 500

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class InvalidTransition(HiringError):
    """Stage precondition not met."""

    code = "invalid_transition"
    status_code = 400

    def __init__(
        self,
        operation: str,
        current: str,
        *,
        expected: list[str] | None = None,
        reason: str | None = None,
    ) -> None:
        message = reason or f"Cannot {operation.replace('_', ' ')} from stage {current}"
        details: dict[str, Any] = {"operation": operation, "current": current}
        if expected:
            details["expected"] = expected
        super().__init__(message, details=details)
        self.operation = operation
        self.current = current


class InvalidInput(HiringError):
    """Missing or malformed required field."""

    code = "invalid_input"
    status_code = 400

    @classmethod
    def from_validation(cls, exc: ValidationError) -> "InvalidInput":
        """Wrap a pydantic failure, one entry per offending field."""
        errors = [
            {
                "field": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
                "type": error["type"],
            }
            for error in exc.errors()
        ]
        fields = ", ".join(error["field"] for error in errors)
        return cls(f"Malformed field(s): {fields}", details={"errors": errors})


class InvalidRecommendation(InvalidInput):
    """Dean decision outside the allowed values."""

    code = "invalid_recommendation"


class NotFound(HiringError):
    """Referenced entity absent."""

    code = "not_found"
    status_code = 404

    def __init__(self, entity: str, entity_id: str) -> None:
        super().__init__(
            f"{entity} {entity_id!r} not found",
            details={"entity": entity, "id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


class Forbidden(HiringError):
    """Caller role may not perform the operation."""

    code = "forbidden"
    status_code = 403


class Conflict(HiringError):
    """Concurrent write detected by the persistence layer."""

    code = "conflict"
    status_code = 409


class InternalError(HiringError):
    """Unexpected persistence failure."""

    code = "internal_error"
    status_code = 500


__all__ = [
    "HiringError",
    "InvalidTransition",
    "InvalidInput",
    "InvalidRecommendation",
    "NotFound",
    "Forbidden",
    "Conflict",
    "InternalError",
]
