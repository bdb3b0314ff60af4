"""
Result types produced by the trip eligibility evaluator.

These are plain values: the evaluator returns them instead of raising, so
callers can branch on the outcome and render it directly.
"""

from datetime import date
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, SerializeAsAny

from models.resource import FleetResource


class ExpiryStatus(str, Enum):
    EXPIRED = "expired"
    EXPIRING_SOON = "expiring-soon"
    VALID = "valid"


class DocumentStatus(BaseModel):
    """Expiry annotation for one required document of a resource"""
    kind: str
    label: str
    expiry: Optional[date] = None
    days: Optional[int] = None
    status: Optional[ExpiryStatus] = None
    badge: str = ""


class EligibilityReport(BaseModel):
    """Errors block trip submission; warnings are informational only."""
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @property
    def blocks_submission(self) -> bool:
        return bool(self.errors)


class BlockedResource(BaseModel):
    resource: SerializeAsAny[FleetResource]
    reason: str


class PartitionResult(BaseModel):
    """Resources split into usable and blocked-with-reason, input order kept"""
    usable: List[SerializeAsAny[FleetResource]] = Field(default_factory=list)
    blocked: List[BlockedResource] = Field(default_factory=list)


class SubmissionErrorKind(str, Enum):
    IMMUTABLE = "immutable"
    INVALID_FIELD = "invalid_field"
    DOCUMENTATION_EXPIRED = "documentation_expired"


class SubmissionError(BaseModel):
    kind: SubmissionErrorKind
    message: str
    field: Optional[str] = None
    errors: List[str] = Field(default_factory=list)

    @classmethod
    def immutable(cls) -> "SubmissionError":
        return cls(
            kind=SubmissionErrorKind.IMMUTABLE,
            message="Finalized trips cannot be modified"
        )

    @classmethod
    def invalid_field(cls, name: str) -> "SubmissionError":
        return cls(
            kind=SubmissionErrorKind.INVALID_FIELD,
            message=f"Field '{name}' is required",
            field=name
        )

    @classmethod
    def unknown_destination(cls, index: int, destination_id: int) -> "SubmissionError":
        return cls(
            kind=SubmissionErrorKind.INVALID_FIELD,
            message=f"Destination {destination_id} does not belong to this trip",
            field=f"destinations[{index}].id"
        )

    @classmethod
    def documentation_expired(cls, errors: List[str]) -> "SubmissionError":
        return cls(
            kind=SubmissionErrorKind.DOCUMENTATION_EXPIRED,
            message="Trip cannot be created: documentation expired on the departure date",
            errors=list(errors)
        )


class SubmissionResult(BaseModel):
    """Either the persisted trip or the reason submission was refused"""
    trip: Optional[Dict] = None
    error: Optional[SubmissionError] = None
    warnings: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None
