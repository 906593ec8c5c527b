"""Shared fixtures: a fresh DuckDB-backed service per test."""

import pytest

from civic_reputation.core.config import DB_PATH_ENV, ReputationConfig
from civic_reputation.models import UserRole
from civic_reputation.services import ReputationService

SITE = (27.7172, 85.3240)


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Configuration pointing at a temporary database."""
    monkeypatch.delenv(DB_PATH_ENV, raising=False)
    return ReputationConfig(database_path=str(tmp_path / "reputation.duckdb"))


@pytest.fixture
async def service(config):
    service = ReputationService(config)
    yield service
    service.store.close_sync()


@pytest.fixture
async def contractor(service):
    return await service.accounts.register_user(
        "Road Co", "roads@example.com", UserRole.CONTRACTOR
    )


@pytest.fixture
async def citizen(service):
    return await service.accounts.register_user("Asha", "asha@example.com", UserRole.CITIZEN)


@pytest.fixture
async def active_contract(service, contractor):
    """An active contract with a site at the default Kathmandu anchor."""
    return await service.accounts.create_contract(
        "Ring road resurfacing",
        contractor.id,
        expected_lifespan_years=10,
        project_latitude=SITE[0],
        project_longitude=SITE[1],
    )


@pytest.fixture
async def completed_contract(service, active_contract):
    return await service.accounts.complete_contract(active_contract.id)
