"""Per-contractor rating and derived bid eligibility."""

import uuid
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class ContractorRating(SQLModel, table=True):
    """Live reputation of one contractor.

    ``overall_rating``, ``points_gained``, ``points_lost`` and
    ``is_below_minimum`` are written only by the rating policies.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    contractor_id: str = Field(index=True)
    overall_rating: float = 0.0
    plan_rating: float = 0.0
    report_quality: float = 0.0
    payment_history: float = 0.0
    worker_management: float = 0.0
    quality_of_work: float = 0.0
    durability_score: float = 0.0
    points_gained: float = 0.0
    points_lost: float = 0.0
    is_below_minimum: bool = True
    forgiveness_count: int = 0
    version: int = 0
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))


class ContractorProgress(SQLModel, table=True):
    """Cached bid eligibility, rewritten after every rating change."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    contractor_id: str = Field(index=True)
    current_rating: float = 0.0
    can_bid_small: bool = True
    can_bid_medium: bool = False
    can_bid_large: bool = False
    is_suspended: bool = False
    suspended_reason: str | None = None
    suspended_at: datetime | None = None
    last_updated: datetime = Field(default_factory=lambda: datetime.now(UTC))
