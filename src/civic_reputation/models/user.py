import enum
import uuid
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class UserRole(str, enum.Enum):
    CITIZEN = "CITIZEN"
    CONTRACTOR = "CONTRACTOR"
    LOCAL_GOVERNMENT = "LOCAL_GOVERNMENT"
    PROVINCIAL_GOVERNMENT = "PROVINCIAL_GOVERNMENT"
    CENTRAL_GOVERNMENT = "CENTRAL_GOVERNMENT"


class User(SQLModel, table=True):
    """A platform participant: citizen, contractor or government office."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str
    email: str = Field(index=True)
    role: str = Field(index=True)  # UserRole value
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
