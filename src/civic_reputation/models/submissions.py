"""Submission payloads and operation results.

Payload models check shape only (types, ranges, formats). Policy
preconditions that need stored state, such as contract status, are checked
by the services.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator, model_validator

from civic_reputation.core.validation import is_valid_email, is_valid_gps, sanitize_text
from civic_reputation.scoring.classifier import ComplaintType
from civic_reputation.scoring.flags import ComplaintFlag
from civic_reputation.scoring.policies import IssueCategory

# ==================== Complaints ====================


class ComplaintSubmission(BaseModel):
    """A complaint about a contractor, optionally with a geotagged photo."""

    text: str = ""
    email: str
    contractor_id: str = Field(min_length=1)
    contract_id: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    image: bytes | None = Field(default=None, exclude=True)
    image_url: str | None = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not is_valid_email(v):
            raise ValueError("Invalid email address")
        return v

    @field_validator("text")
    @classmethod
    def clean_text(cls, v: str) -> str:
        return sanitize_text(v)

    @model_validator(mode="after")
    def validate_coordinate(self) -> ComplaintSubmission:
        if self.has_coordinates and not is_valid_gps(self.latitude, self.longitude):
            msg = f"Invalid GPS coordinate ({self.latitude}, {self.longitude})"
            raise ValueError(msg)
        return self

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class ComplaintResult(BaseModel):
    """Everything computed for a complaint, so the audit trail explains itself."""

    complaint_id: str
    contractor_id: str
    sentiment: float
    type: ComplaintType
    confidence: float
    old_rating: float
    rating: float
    rating_applied: bool
    has_gps: bool
    distance: float | None
    location_verified: bool
    flag: ComplaintFlag
    flag_reason: str


class AIRatingResult(BaseModel):
    contractor_id: str
    current_rating: float
    new_rating: float


# ==================== Citizen ratings ====================


class CitizenRatingSubmission(BaseModel):
    """A citizen's 0-5 rating of a completed contract."""

    contract_id: str = Field(min_length=1)
    contractor_id: str = Field(min_length=1)
    citizen_id: str = Field(min_length=1)
    rating: float = Field(ge=0, le=5)
    quality_rating: float | None = Field(default=None, ge=0, le=5)
    durability_rating: float | None = Field(default=None, ge=0, le=5)
    timeliness_rating: float | None = Field(default=None, ge=0, le=5)
    proof_url: str | None = None
    proof_description: str | None = None
    comment: str | None = None


class CitizenRatingResult(BaseModel):
    citizen_rating_id: str
    contractor_id: str
    previous_rating: float
    new_rating: float
    points_gained: float
    points_lost: float
    is_suspended: bool


# ==================== Issue reports ====================


class IssueReportSubmission(BaseModel):
    """A citizen-filed issue against a contract."""

    contract_id: str = Field(min_length=1)
    contractor_id: str = Field(min_length=1)
    citizen_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    category: IssueCategory
    issue_date: datetime
    severity: str | None = None
    description: str | None = None
    issue_type: str | None = None
    location: str | None = None
    photos: list[str] = Field(default_factory=list)

    @field_validator("severity")
    @classmethod
    def normalize_severity(cls, v: str | None) -> str | None:
        return v.strip().upper() if v else v


class IssueReportResult(BaseModel):
    issue_id: str
    contractor_id: str
    category: IssueCategory
    status: str
    penalty: float
    new_rating: float | None
    message: str


class ForgivenessDecision(BaseModel):
    """A government decision on a natural-disaster forgiveness request."""

    issue_id: str = Field(min_length=1)
    forgive: bool
    reviewed_by: str | None = None


class ForgivenessResult(BaseModel):
    issue_id: str
    status: str
    penalty: float
    new_rating: float | None
    message: str


# ==================== Qualification ====================


class QualificationSubmission(BaseModel):
    """Certificate, skills and experience a contractor submits once."""

    contractor_id: str = Field(min_length=1)
    certificate_url: str | None = None
    certificate_number: str | None = None
    issuing_authority: str | None = None
    issued_date: datetime | None = None
    expiry_date: datetime | None = None
    skills: list[str] = Field(default_factory=list)
    experience_years: float = Field(default=0.0, ge=0)
    experience_details: str | None = None

    @property
    def has_certificate(self) -> bool:
        return bool(self.certificate_url and self.certificate_number)


class QualificationResult(BaseModel):
    qualification_id: str
    contractor_id: str
    initial_rating: float
    status: str
