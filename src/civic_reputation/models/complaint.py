import uuid
from datetime import UTC, datetime

from sqlalchemy import Column
from sqlmodel import JSON, Field, SQLModel


class Complaint(SQLModel, table=True):
    """Audit record of one complaint submission. Never updated."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    contractor_id: str = Field(index=True)
    contract_id: str | None = Field(default=None, index=True)
    text: str
    email: str
    image_url: str | None = None
    sentiment_score: float
    complaint_type: str
    confidence: float
    gps_latitude: float | None = None
    gps_longitude: float | None = None
    location_verified: bool = False
    distance_meters: float | None = None
    old_rating: float
    new_rating: float
    status: str  # ComplaintFlag value
    flag_reasons: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
