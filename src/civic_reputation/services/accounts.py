"""Users and contracts the scoring services read from."""

from __future__ import annotations

from datetime import UTC, datetime

import structlog

from civic_reputation.core.errors import MissingFieldError, NotFoundError, ValidationError
from civic_reputation.core.validation import is_valid_email, is_valid_gps
from civic_reputation.models import Contract, ContractStatus, User, UserRole
from civic_reputation.services.storage import ReputationStore

logger = structlog.get_logger()


async def require_user(store: ReputationStore, user_id: str, role: UserRole) -> User:
    """Fetch a user with the given role or raise NotFoundError."""
    user = await store.users.get_user(user_id, role=role.value)
    if user is None:
        raise NotFoundError(role.value.replace("_", " ").title(), user_id)
    return user


async def require_contract(store: ReputationStore, contract_id: str) -> Contract:
    contract = await store.users.get_contract(contract_id)
    if contract is None:
        raise NotFoundError("Contract", contract_id)
    return contract


class AccountService:
    """Register users and manage the contracts that ratings refer to."""

    def __init__(self, store: ReputationStore) -> None:
        self.store = store

    async def register_user(self, name: str, email: str, role: UserRole | str) -> User:
        """Create a user.

        Raises:
            MissingFieldError: If the name is empty.
            ValidationError: If the email is malformed.
        """
        if not name or not name.strip():
            raise MissingFieldError("name")
        if not is_valid_email(email):
            raise ValidationError(f"Invalid email address: {email}")
        user = User(name=name.strip(), email=email, role=UserRole(role).value)
        user = await self.store.users.add(user)
        logger.info("user_registered", user_id=user.id, role=user.role)
        return user

    async def create_contract(
        self,
        title: str,
        contractor_id: str,
        expected_lifespan_years: float | None = None,
        project_latitude: float | None = None,
        project_longitude: float | None = None,
        status: ContractStatus = ContractStatus.ACTIVE,
    ) -> Contract:
        """Create a contract awarded to an existing contractor."""
        await require_user(self.store, contractor_id, UserRole.CONTRACTOR)
        has_location = project_latitude is not None and project_longitude is not None
        if has_location and not is_valid_gps(project_latitude, project_longitude):
            raise ValidationError(
                f"Invalid project location ({project_latitude}, {project_longitude})"
            )
        contract = Contract(
            title=title,
            contractor_id=contractor_id,
            status=status.value,
            expected_lifespan_years=expected_lifespan_years,
            project_latitude=project_latitude,
            project_longitude=project_longitude,
        )
        contract = await self.store.users.add(contract)
        logger.info("contract_created", contract_id=contract.id, contractor_id=contractor_id)
        return contract

    async def complete_contract(
        self, contract_id: str, completed_at: datetime | None = None
    ) -> Contract:
        """Mark a contract completed; its expected lifespan starts at ``completed_at``."""
        contract = await self.store.users.update_contract(
            contract_id,
            status=ContractStatus.COMPLETED.value,
            completed_at=completed_at or datetime.now(UTC),
        )
        if contract is None:
            raise NotFoundError("Contract", contract_id)
        logger.info("contract_completed", contract_id=contract_id)
        return contract
