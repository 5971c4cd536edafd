"""
SubmissionResult and HealthStatus models returned by the service layer.
"""

from typing import Literal

from pydantic import BaseModel


ErrorType = Literal[
    "missing_field",
    "invalid_field",
    "duplicate_email",
    "constraint_violation",
    "store_unavailable",
]


class SubmissionResult(BaseModel):
    """
    Outcome of submitting one survey.

    ``status_code`` follows HTTP semantics so a transport layer can reuse it
    as-is: 200 accepted, 400 validation, 409 duplicate email, 500 storage
    constraint, 503 store unavailable.
    """

    accepted: bool
    status_code: int
    message: str
    record_id: int | None = None
    error_type: ErrorType | None = None
    field_name: str | None = None

    @property
    def retryable(self) -> bool:
        return self.error_type == "store_unavailable"


class HealthStatus(BaseModel):
    """Liveness of the record store."""

    status: Literal["healthy", "unhealthy"]
    database: Literal["connected", "disconnected"]
    error: str | None = None

    @property
    def healthy(self) -> bool:
        return self.status == "healthy"
