import enum
import uuid
from datetime import UTC, datetime

from sqlalchemy import Column
from sqlmodel import JSON, Field, SQLModel


class IssueStatus(str, enum.Enum):
    PENDING = "PENDING"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class IssueReport(SQLModel, table=True):
    """A citizen-filed defect report against a contract."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    contract_id: str = Field(index=True)
    contractor_id: str = Field(index=True)
    citizen_id: str = Field(index=True)
    title: str
    description: str | None = None
    category: str = Field(index=True)  # IssueCategory value
    severity: str | None = None
    issue_type: str | None = None
    location: str | None = None
    photos: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    issue_date: datetime
    penalty_applied: float = 0.0
    is_forgiveness_request: bool = False
    forgiveness_approved: bool | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    status: str = IssueStatus.PENDING.value
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
