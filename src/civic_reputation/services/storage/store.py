"""Unified persistence layer for reputation data."""

from __future__ import annotations

import gc
from pathlib import Path

import structlog
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, create_engine

from civic_reputation.core.config import ReputationConfig

from .audit_log import AuditLog
from .contractor_repository import ContractorRepository
from .record_repository import RecordRepository
from .user_repository import UserRepository

logger = structlog.get_logger()

AUDIT_LOG_NAME = "submissions.jsonl"


class ReputationStore:
    """Own the database engine and expose one repository per concern.

    - ``users``: users and contracts
    - ``contractors``: rating and progress rows, and the rating transaction
    - ``records``: complaint, citizen rating, issue and qualification history
    - ``audit``: JSONL backup of processed submissions
    """

    def __init__(self, config: ReputationConfig) -> None:
        """Initialize the store and create tables.

        Args:
            config: Application configuration.
        """
        self.config = config
        self._db_path = config.get_database_path()
        self.base_dir = self._db_path.parent
        self._engine = None
        self._init_db()

        self.users = UserRepository(self._engine)
        self.contractors = ContractorRepository(self._engine)
        self.records = RecordRepository(self._engine)
        self.audit = AuditLog(self.base_dir / AUDIT_LOG_NAME)

    def _init_db(self) -> None:
        """Initialize DuckDB database and create tables."""
        self.base_dir.mkdir(parents=True, exist_ok=True)
        db_url = self.config.database_url
        # Use NullPool to avoid connection pooling issues on Windows
        self._engine = create_engine(db_url, poolclass=NullPool)
        SQLModel.metadata.create_all(self._engine)
        logger.info("store_init", path=str(self._db_path))

    @property
    def db_path(self) -> Path:
        return self._db_path

    async def close(self) -> None:
        """Dispose of the database engine."""
        if self._engine:
            self._engine.dispose()

    def close_sync(self) -> None:
        """Synchronously dispose of the database engine."""
        if self._engine:
            self._engine.dispose()
            self._engine = None

        gc.collect()
