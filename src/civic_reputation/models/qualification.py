import uuid
from datetime import UTC, datetime

from sqlalchemy import Column
from sqlmodel import JSON, Field, SQLModel

QUALIFICATION_UNDER_REVIEW = "UNDER_REVIEW"


class ContractorQualification(SQLModel, table=True):
    """Certificate, skills and experience submitted by a contractor."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    contractor_id: str = Field(index=True)
    certificate_url: str | None = None
    certificate_number: str | None = None
    issuing_authority: str | None = None
    issued_date: datetime | None = None
    expiry_date: datetime | None = None
    skills: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    experience_years: float = 0.0
    experience_details: str | None = None
    initial_rating: float
    status: str = QUALIFICATION_UNDER_REVIEW
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
