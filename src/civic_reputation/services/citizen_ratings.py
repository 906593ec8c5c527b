"""Citizen star ratings of completed contracts."""

from __future__ import annotations

import structlog
from sqlmodel import Session

from civic_reputation.core.config import ReputationConfig
from civic_reputation.core.errors import ValidationError
from civic_reputation.models import (
    CitizenRating,
    CitizenRatingResult,
    CitizenRatingSubmission,
    ContractorProgress,
    ContractorRating,
    UserRole,
)
from civic_reputation.scoring import calculate_rating_change, derive_eligibility
from civic_reputation.scoring.policies import days_since
from civic_reputation.services.accounts import require_contract, require_user
from civic_reputation.services.locks import ContractorLocks
from civic_reputation.services.storage import ReputationStore

logger = structlog.get_logger()

PROOF_THRESHOLD = 3.0


class CitizenRatingService:
    """Apply citizen ratings with the hard-to-gain, easy-to-lose rule."""

    def __init__(
        self,
        config: ReputationConfig,
        store: ReputationStore,
        locks: ContractorLocks,
    ) -> None:
        self.config = config
        self.store = store
        self._locks = locks

    async def submit(self, submission: CitizenRatingSubmission) -> CitizenRatingResult:
        """Record a citizen rating and update the contractor's rating.

        Raises:
            NotFoundError: If the contract, contractor, citizen or the
                contractor's rating record doesn't exist.
            ValidationError: If the contract isn't completed, or a rating
                below 3.0 comes without proof.
        """
        contract = await require_contract(self.store, submission.contract_id)
        await require_user(self.store, submission.contractor_id, UserRole.CONTRACTOR)
        await require_user(self.store, submission.citizen_id, UserRole.CITIZEN)

        if not contract.is_completed:
            raise ValidationError(
                "Can only rate completed contracts",
                f"Contract {contract.id} is {contract.status}.",
            )
        if submission.rating < PROOF_THRESHOLD and not submission.proof_url:
            raise ValidationError(
                "Proof is required for negative ratings (< 3.0)",
                "Attach a proof URL describing the problem.",
            )

        days_since_completion = (
            days_since(contract.completed_at) if contract.completed_at is not None else None
        )

        def _apply(
            session: Session, rating: ContractorRating, _progress: ContractorProgress
        ) -> CitizenRatingResult:
            previous = rating.overall_rating
            change = calculate_rating_change(previous, submission.rating)

            rating.overall_rating = change.new_overall_rating
            if submission.quality_rating:
                rating.quality_of_work = submission.quality_rating
            if submission.durability_rating:
                rating.durability_score = submission.durability_rating
            rating.points_gained += change.points_gained
            rating.points_lost += change.points_lost

            record = CitizenRating(
                contract_id=submission.contract_id,
                contractor_id=submission.contractor_id,
                citizen_id=submission.citizen_id,
                rating=submission.rating,
                comment=submission.comment,
                quality_rating=submission.quality_rating,
                durability_rating=submission.durability_rating,
                timeliness_rating=submission.timeliness_rating,
                proof_url=submission.proof_url,
                proof_description=submission.proof_description,
                time_since_completion_days=days_since_completion,
                previous_overall_rating=previous,
                new_overall_rating=change.new_overall_rating,
                points_gained=change.points_gained,
                points_lost=change.points_lost,
            )
            session.add(record)

            return CitizenRatingResult(
                citizen_rating_id=record.id,
                contractor_id=submission.contractor_id,
                previous_rating=previous,
                new_rating=change.new_overall_rating,
                points_gained=change.points_gained,
                points_lost=change.points_lost,
                is_suspended=derive_eligibility(change.new_overall_rating).is_suspended,
            )

        async with self._locks(submission.contractor_id):
            result = await self.store.contractors.mutate(submission.contractor_id, _apply)

        logger.info(
            "citizen_rating_submitted",
            contractor_id=result.contractor_id,
            previous=result.previous_rating,
            new=result.new_rating,
            gained=result.points_gained,
            lost=result.points_lost,
        )
        await self.store.audit.append("citizen_rating", result)
        return result

    async def list_ratings(
        self,
        contract_id: str | None = None,
        contractor_id: str | None = None,
        citizen_id: str | None = None,
    ) -> list[CitizenRating]:
        return await self.store.records.list_citizen_ratings(
            contract_id=contract_id, contractor_id=contractor_id, citizen_id=citizen_id
        )
