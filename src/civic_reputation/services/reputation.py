"""Single entry point wiring the reputation services together."""

from __future__ import annotations

import structlog

from civic_reputation.core.config import ReputationConfig
from civic_reputation.core.errors import NotFoundError
from civic_reputation.models import UserRole
from civic_reputation.services.accounts import AccountService, require_user
from civic_reputation.services.citizen_ratings import CitizenRatingService
from civic_reputation.services.complaints import ComplaintService
from civic_reputation.services.gps import GpsExtractor
from civic_reputation.services.issues import IssueReportService
from civic_reputation.services.locks import ContractorLocks
from civic_reputation.services.qualification import QualificationService
from civic_reputation.services.ratings import RatingService
from civic_reputation.services.reporting import generate_reputation_report
from civic_reputation.services.storage import ReputationStore

logger = structlog.get_logger()


class ReputationService:
    """Own the store and share one lock registry across all services."""

    def __init__(
        self,
        config: ReputationConfig,
        store: ReputationStore | None = None,
        gps_extractor: GpsExtractor | None = None,
    ) -> None:
        """Initialize the services.

        Args:
            config: Application configuration.
            store: Store to use. If None, one is opened from the config.
            gps_extractor: Reads coordinates from complaint photos.
        """
        self.config = config
        self.store = store or ReputationStore(config)
        self.locks = ContractorLocks()

        self.accounts = AccountService(self.store)
        self.complaints = ComplaintService(config, self.store, self.locks, gps_extractor)
        self.ratings = RatingService(config, self.store, self.locks)
        self.citizen_ratings = CitizenRatingService(config, self.store, self.locks)
        self.issues = IssueReportService(config, self.store, self.locks)
        self.qualifications = QualificationService(config, self.store, self.locks)

    async def report(self, contractor_id: str) -> str:
        """Render the markdown reputation report for a contractor.

        Raises:
            NotFoundError: If the contractor or their rating doesn't exist.
        """
        contractor = await require_user(self.store, contractor_id, UserRole.CONTRACTOR)
        rating = await self.ratings.get_rating(contractor_id)
        progress = await self.store.contractors.get_progress(contractor_id)
        if progress is None:
            raise NotFoundError("Contractor progress", contractor_id)
        stats = await self.complaints.stats(contractor_id)
        recent = await self.complaints.list_complaints(contractor_id, limit=10)
        logger.info("report_generated", contractor_id=contractor_id)
        return generate_reputation_report(contractor.name, rating, progress, stats, recent)

    async def close(self) -> None:
        await self.store.close()
