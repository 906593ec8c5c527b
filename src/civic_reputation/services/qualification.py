"""Contractor qualification intake and initial rating."""

from __future__ import annotations

import structlog
from sqlmodel import Session

from civic_reputation.core.config import ReputationConfig
from civic_reputation.core.errors import ValidationError
from civic_reputation.models import (
    ContractorProgress,
    ContractorQualification,
    ContractorRating,
    QualificationResult,
    QualificationSubmission,
    UserRole,
)
from civic_reputation.scoring import calculate_initial_rating
from civic_reputation.services.accounts import require_user
from civic_reputation.services.locks import ContractorLocks
from civic_reputation.services.storage import ReputationStore, find_qualification

logger = structlog.get_logger()

ALREADY_SUBMITTED_MESSAGE = "Qualification already submitted. Please wait for review."


class QualificationService:
    def __init__(
        self,
        config: ReputationConfig,
        store: ReputationStore,
        locks: ContractorLocks,
    ) -> None:
        self.config = config
        self.store = store
        self._locks = locks

    async def submit(self, submission: QualificationSubmission) -> QualificationResult:
        """Record a contractor's qualification and set their starting rating.

        A contractor may submit once. The rating row is created if missing,
        with every sub-score at the initial rating; an existing row has its
        overall rating reset to it.

        Raises:
            NotFoundError: If the contractor doesn't exist.
            ValidationError: If a qualification was already submitted.
        """
        await require_user(self.store, submission.contractor_id, UserRole.CONTRACTOR)

        initial = calculate_initial_rating(
            submission.has_certificate, submission.experience_years, submission.skills
        )

        def _apply(
            session: Session, rating: ContractorRating, _progress: ContractorProgress
        ) -> QualificationResult:
            if find_qualification(session, submission.contractor_id) is not None:
                raise ValidationError(ALREADY_SUBMITTED_MESSAGE)

            rating.overall_rating = initial
            qualification = ContractorQualification(
                contractor_id=submission.contractor_id,
                certificate_url=submission.certificate_url,
                certificate_number=submission.certificate_number,
                issuing_authority=submission.issuing_authority,
                issued_date=submission.issued_date,
                expiry_date=submission.expiry_date,
                skills=list(submission.skills),
                experience_years=submission.experience_years,
                experience_details=submission.experience_details,
                initial_rating=initial,
            )
            session.add(qualification)
            return QualificationResult(
                qualification_id=qualification.id,
                contractor_id=submission.contractor_id,
                initial_rating=initial,
                status=qualification.status,
            )

        async with self._locks(submission.contractor_id):
            result = await self.store.contractors.mutate(
                submission.contractor_id,
                _apply,
                default_rating=initial,
                seed_sub_scores=True,
            )

        logger.info(
            "qualification_submitted",
            contractor_id=result.contractor_id,
            initial_rating=result.initial_rating,
        )
        await self.store.audit.append("qualification", result)
        return result
