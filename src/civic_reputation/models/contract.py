import enum
import uuid
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class ContractStatus(str, enum.Enum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class Contract(SQLModel, table=True):
    """A public works contract awarded to a contractor."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    title: str
    contractor_id: str = Field(index=True)
    status: str = ContractStatus.ACTIVE.value
    # Actual completion date; the expected lifespan is measured from here.
    completed_at: datetime | None = None
    expected_lifespan_years: float | None = None
    project_latitude: float | None = None
    project_longitude: float | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def is_completed(self) -> bool:
        return self.status.upper() == ContractStatus.COMPLETED.value
