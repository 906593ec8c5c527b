"""AI rating refresh and rating lookups."""

from __future__ import annotations

import structlog
from sqlmodel import Session

from civic_reputation.core.config import ReputationConfig
from civic_reputation.core.errors import NotFoundError, ValidationError
from civic_reputation.models import (
    AIRatingResult,
    ContractorProgress,
    ContractorRating,
    UserRole,
)
from civic_reputation.scoring import calculate_new_rating
from civic_reputation.services.accounts import require_user
from civic_reputation.services.locks import ContractorLocks
from civic_reputation.services.storage import ReputationStore

logger = structlog.get_logger()


class RatingService:
    """Read contractor ratings and apply sentiment directly."""

    def __init__(
        self,
        config: ReputationConfig,
        store: ReputationStore,
        locks: ContractorLocks,
    ) -> None:
        self.config = config
        self.store = store
        self._locks = locks

    async def get_rating(self, contractor_id: str) -> ContractorRating:
        rating = await self.store.contractors.get_rating(contractor_id)
        if rating is None:
            raise NotFoundError("Rating", contractor_id)
        return rating

    async def get_progress(self, contractor_id: str) -> ContractorProgress:
        progress = await self.store.contractors.get_progress(contractor_id)
        if progress is None:
            raise NotFoundError("Contractor progress", contractor_id)
        return progress

    async def refresh_ai_rating(
        self, contractor_id: str, sentiment: float | None = None
    ) -> AIRatingResult:
        """Apply a sentiment score to a contractor's rating.

        Without a sentiment this only reads the rating. A contractor without
        a rating record starts at the configured default.

        Args:
            contractor_id: Contractor to rate.
            sentiment: Score in [-1, 1], or None for a read-only fetch.

        Returns:
            AIRatingResult with the rating before and after.

        Raises:
            ValidationError: If the sentiment is out of range.
            NotFoundError: If the contractor doesn't exist.
        """
        if sentiment is not None and not -1.0 <= sentiment <= 1.0:
            raise ValidationError(f"Sentiment must be within [-1, 1], got {sentiment}")
        await require_user(self.store, contractor_id, UserRole.CONTRACTOR)

        if sentiment is None:
            rating = await self.store.contractors.get_rating(contractor_id)
            current = rating.overall_rating if rating else self.config.scoring.default_rating
            return AIRatingResult(
                contractor_id=contractor_id, current_rating=current, new_rating=current
            )

        def _apply(
            _session: Session, rating: ContractorRating, _progress: ContractorProgress
        ) -> AIRatingResult:
            current = rating.overall_rating
            rating.overall_rating = calculate_new_rating(current, sentiment)
            return AIRatingResult(
                contractor_id=contractor_id,
                current_rating=current,
                new_rating=rating.overall_rating,
            )

        async with self._locks(contractor_id):
            result = await self.store.contractors.mutate(
                contractor_id, _apply, default_rating=self.config.scoring.default_rating
            )

        logger.info(
            "ai_rating_updated",
            contractor_id=contractor_id,
            current=result.current_rating,
            new=result.new_rating,
        )
        return result
