"""Complaint submission: sentiment, classification, location check and rating update."""

from __future__ import annotations

import structlog
from sqlmodel import Session

from civic_reputation.core.config import ReputationConfig
from civic_reputation.models import (
    Complaint,
    ComplaintResult,
    ComplaintSubmission,
    ContractorProgress,
    ContractorRating,
    UserRole,
)
from civic_reputation.scoring import (
    ComplaintFlag,
    ComplaintStats,
    GeoPoint,
    analyze_sentiment,
    calculate_complaint_stats,
    calculate_new_rating,
    classify_complaint,
    determine_flag,
    verify_location,
)
from civic_reputation.services.accounts import require_contract, require_user
from civic_reputation.services.gps import GpsExtractor, NullGpsExtractor
from civic_reputation.services.locks import ContractorLocks
from civic_reputation.services.storage import ReputationStore

logger = structlog.get_logger()


class ComplaintService:
    """Score complaints and apply verified ones to the contractor's rating."""

    def __init__(
        self,
        config: ReputationConfig,
        store: ReputationStore,
        locks: ContractorLocks,
        gps_extractor: GpsExtractor | None = None,
    ) -> None:
        self.config = config
        self.store = store
        self._locks = locks
        self.gps_extractor = gps_extractor or NullGpsExtractor()

    async def _project_location(self, contract_id: str | None) -> GeoPoint:
        """Reference point for location checks: the contract's site, or the default anchor."""
        default = self.config.scoring.default_project_location
        if contract_id is None:
            return GeoPoint(default.latitude, default.longitude)
        contract = await require_contract(self.store, contract_id)
        if contract.project_latitude is None or contract.project_longitude is None:
            return GeoPoint(default.latitude, default.longitude)
        return GeoPoint(contract.project_latitude, contract.project_longitude)

    def _photo_location(self, submission: ComplaintSubmission) -> GeoPoint | None:
        if submission.has_coordinates:
            return GeoPoint(submission.latitude, submission.longitude)
        if submission.image:
            return self.gps_extractor.extract(submission.image)
        return None

    async def submit(self, submission: ComplaintSubmission) -> ComplaintResult:
        """Process one complaint.

        The sentiment-driven rating is always computed, but only written to
        the contractor's live rating when the complaint is VERIFIED.

        Raises:
            NotFoundError: If the contractor or referenced contract doesn't exist.
        """
        await require_user(self.store, submission.contractor_id, UserRole.CONTRACTOR)
        project = await self._project_location(submission.contract_id)

        sentiment = analyze_sentiment(submission.text)
        classification = classify_complaint(submission.text)

        max_distance = self.config.scoring.max_distance_meters
        photo = self._photo_location(submission)
        has_gps = photo is not None
        location_ok = False
        distance: float | None = None
        if photo is not None:
            verification = verify_location(
                photo.latitude,
                photo.longitude,
                project.latitude,
                project.longitude,
                max_distance,
            )
            location_ok = verification.is_valid
            distance = verification.distance

        determination = determine_flag(has_gps, location_ok, distance, max_distance)

        def _apply(
            session: Session, rating: ContractorRating, _progress: ContractorProgress
        ) -> ComplaintResult:
            old_rating = rating.overall_rating
            new_rating = calculate_new_rating(old_rating, sentiment)
            applied = determination.flag is ComplaintFlag.VERIFIED
            if applied:
                rating.overall_rating = new_rating

            complaint = Complaint(
                contractor_id=submission.contractor_id,
                contract_id=submission.contract_id,
                text=submission.text,
                email=submission.email,
                image_url=submission.image_url,
                sentiment_score=sentiment,
                complaint_type=classification.type.value,
                confidence=classification.confidence,
                gps_latitude=photo.latitude if photo else None,
                gps_longitude=photo.longitude if photo else None,
                location_verified=location_ok,
                distance_meters=distance,
                old_rating=old_rating,
                new_rating=new_rating,
                status=determination.flag.value,
                flag_reasons=list(determination.reasons),
            )
            session.add(complaint)

            return ComplaintResult(
                complaint_id=complaint.id,
                contractor_id=submission.contractor_id,
                sentiment=round(sentiment, 2),
                type=classification.type,
                confidence=classification.confidence,
                old_rating=old_rating,
                rating=new_rating,
                rating_applied=applied,
                has_gps=has_gps,
                distance=round(distance, 2) if distance is not None else None,
                location_verified=location_ok,
                flag=determination.flag,
                flag_reason=determination.reason_text,
            )

        async with self._locks(submission.contractor_id):
            result = await self.store.contractors.mutate(
                submission.contractor_id,
                _apply,
                default_rating=self.config.scoring.default_rating,
            )

        logger.info(
            "complaint_submitted",
            complaint_id=result.complaint_id,
            contractor_id=result.contractor_id,
            flag=result.flag.value,
            sentiment=result.sentiment,
            rating=result.rating,
            applied=result.rating_applied,
        )
        await self.store.audit.append("complaint", result)
        return result

    async def list_complaints(
        self, contractor_id: str, limit: int | None = None
    ) -> list[Complaint]:
        """Recent complaints for a contractor, newest first."""
        limit = limit or self.config.scoring.recent_complaints
        return await self.store.records.list_complaints(contractor_id, limit=limit)

    async def stats(self, contractor_id: str) -> ComplaintStats:
        complaints = await self.store.records.list_complaints(contractor_id)
        return calculate_complaint_stats(complaints)
