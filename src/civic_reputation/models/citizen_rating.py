import enum
import uuid
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class RatingStatus(str, enum.Enum):
    PENDING = "PENDING"


class CitizenRating(SQLModel, table=True):
    """A citizen's star rating of a completed contract."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    contract_id: str = Field(index=True)
    contractor_id: str = Field(index=True)
    citizen_id: str = Field(index=True)
    rating: float
    comment: str | None = None
    quality_rating: float | None = None
    durability_rating: float | None = None
    timeliness_rating: float | None = None
    proof_url: str | None = None
    proof_description: str | None = None
    time_since_completion_days: int | None = None
    previous_overall_rating: float
    new_overall_rating: float
    points_gained: float = 0.0
    points_lost: float = 0.0
    status: str = RatingStatus.PENDING.value
    reported_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
