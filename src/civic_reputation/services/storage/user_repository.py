"""Database persistence for users and contracts."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlmodel import Session

from civic_reputation.models import Contract, User

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine


class UserRepository(AsyncRepository):
    """Persist and query users and their contracts."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def add(self, record: Any) -> Any:
        """Insert a new User or Contract row and return it."""

        def _add(session: Session) -> Any:
            session.add(record)
            session.commit()
            return record

        return await self._run_session(_add)

    async def get_user(self, user_id: str, role: str | None = None) -> User | None:
        """Get a user by id, optionally requiring a role."""

        def _get(session: Session) -> User | None:
            user = session.get(User, user_id)
            if user is not None and role is not None and user.role != role:
                return None
            return user

        return await self._run_session(_get)

    async def get_contract(self, contract_id: str) -> Contract | None:
        def _get(session: Session) -> Contract | None:
            return session.get(Contract, contract_id)

        return await self._run_session(_get)

    async def update_contract(self, contract_id: str, **changes: Any) -> Contract | None:
        """Apply field changes to a contract. Returns None if it doesn't exist."""

        def _update(session: Session) -> Contract | None:
            contract = session.get(Contract, contract_id)
            if contract is None:
                return None
            for key, value in changes.items():
                setattr(contract, key, value)
            session.add(contract)
            session.commit()
            return contract

        return await self._run_session(_update)
