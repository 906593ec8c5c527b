"""Database persistence for contractor ratings and bid eligibility."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, TypeVar

import structlog
from sqlalchemy import update
from sqlmodel import Session, select

from civic_reputation.core.errors import NotFoundError, StaleRatingError
from civic_reputation.models import ContractorProgress, ContractorRating
from civic_reputation.scoring.eligibility import (
    SUSPENDED_REASON,
    apply_eligibility,
    derive_eligibility,
    is_below_minimum,
)

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()

T = TypeVar("T")

RatingMutation = Callable[[Session, ContractorRating, ContractorProgress], T]

RATING_NOT_FOUND_SUGGESTION = "Please initialize contractor rating first."
MAX_WRITE_ATTEMPTS = 3


def new_rating_record(
    contractor_id: str, initial_rating: float, seed_sub_scores: bool
) -> ContractorRating:
    """Build a rating row at ``initial_rating``.

    With ``seed_sub_scores`` every sub-score and the gained-points
    accumulator start at the initial rating too.
    """
    sub_score = initial_rating if seed_sub_scores else 0.0
    return ContractorRating(
        contractor_id=contractor_id,
        overall_rating=initial_rating,
        plan_rating=sub_score,
        report_quality=sub_score,
        payment_history=sub_score,
        worker_management=sub_score,
        quality_of_work=sub_score,
        durability_score=sub_score,
        points_gained=sub_score,
        is_below_minimum=is_below_minimum(initial_rating),
    )


def new_progress_record(contractor_id: str, rating: float) -> ContractorProgress:
    progress = ContractorProgress(contractor_id=contractor_id)
    apply_eligibility(progress, derive_eligibility(rating))
    return progress


class ContractorRepository(AsyncRepository):
    """Persist and query contractor rating and progress rows.

    Every rating write goes through :meth:`mutate`, which loads the rating
    and progress rows, applies a mutation and commits both together with any
    audit rows in one session. An exception inside the mutation rolls back
    everything.

    The rating row carries a ``version``. A write only lands if the version
    is still the one that was read, so a concurrent writer in another
    process is detected and the mutation is re-run on fresh rows.
    """

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    @staticmethod
    def _load(
        session: Session, contractor_id: str
    ) -> tuple[ContractorRating | None, ContractorProgress | None]:
        rating = session.exec(
            select(ContractorRating).where(ContractorRating.contractor_id == contractor_id)
        ).first()
        progress = session.exec(
            select(ContractorProgress).where(ContractorProgress.contractor_id == contractor_id)
        ).first()
        return rating, progress

    @staticmethod
    def _claim_version(session: Session, rating: ContractorRating, read_version: int) -> None:
        """Move the stored version from ``read_version`` to the next one.

        Raises:
            StaleRatingError: If another transaction already moved it.
        """
        statement = (
            update(ContractorRating)
            .where(
                ContractorRating.id == rating.id,
                ContractorRating.version == read_version,
            )
            .values(version=read_version + 1)
            .returning(ContractorRating.id)
        )
        if session.connection().execute(statement).first() is None:
            raise StaleRatingError(rating.contractor_id, read_version)

    async def get_rating(self, contractor_id: str) -> ContractorRating | None:
        def _get(session: Session) -> ContractorRating | None:
            return self._load(session, contractor_id)[0]

        return await self._run_session(_get)

    async def get_progress(self, contractor_id: str) -> ContractorProgress | None:
        def _get(session: Session) -> ContractorProgress | None:
            return self._load(session, contractor_id)[1]

        return await self._run_session(_get)

    async def list_ratings(self) -> list[ContractorRating]:
        def _get(session: Session) -> list[ContractorRating]:
            return list(session.exec(select(ContractorRating)).all())

        return await self._run_session(_get)

    async def mutate(
        self,
        contractor_id: str,
        mutation: RatingMutation,
        default_rating: float | None = None,
        suspended_reason: str | None = None,
        seed_sub_scores: bool = False,
    ) -> T:
        """Run a read-modify-write on a contractor's rating in one transaction.

        Args:
            contractor_id: Contractor whose rating is changed.
            mutation: Called with (session, rating, progress). It changes the
                rating row, may add audit rows to the session, and returns the
                operation's result. It may be called again on fresh rows if
                the rating changed underneath it.
            default_rating: When given, a missing rating row is created at
                this value instead of failing.
            suspended_reason: Message recorded if this write suspends the
                contractor. Defaults to the current reason, or the standard
                threshold message.
            seed_sub_scores: Start a newly created row with every sub-score
                and the gained-points accumulator at ``default_rating``.

        Returns:
            Whatever ``mutation`` returns.

        Raises:
            NotFoundError: If the contractor has no rating row and no default
                was given.
            StaleRatingError: If the rating kept changing for
                ``MAX_WRITE_ATTEMPTS`` attempts.
        """

        def _mutate(session: Session) -> T:
            rating, progress = self._load(session, contractor_id)
            read_version = None
            if rating is None:
                if default_rating is None:
                    raise NotFoundError(
                        "Contractor rating record", contractor_id, RATING_NOT_FOUND_SUGGESTION
                    )
                rating = new_rating_record(contractor_id, default_rating, seed_sub_scores)
                logger.info(
                    "rating_record_created", contractor_id=contractor_id, rating=default_rating
                )
            else:
                read_version = rating.version
            if progress is None:
                progress = new_progress_record(contractor_id, rating.overall_rating)

            result = mutation(session, rating, progress)

            if read_version is not None:
                self._claim_version(session, rating, read_version)

            now = datetime.now(UTC)
            rating.is_below_minimum = is_below_minimum(rating.overall_rating)
            rating.version += 1
            rating.last_updated = now
            reason = suspended_reason or progress.suspended_reason or SUSPENDED_REASON
            eligibility = derive_eligibility(rating.overall_rating)
            if apply_eligibility(progress, eligibility, reason=reason, now=now):
                logger.warning(
                    "contractor_suspended",
                    contractor_id=contractor_id,
                    rating=rating.overall_rating,
                    reason=progress.suspended_reason,
                )

            session.add(rating)
            session.add(progress)
            session.commit()
            return result

        attempt = 1
        while True:
            try:
                return await self._run_session(_mutate)
            except StaleRatingError as e:
                if attempt >= MAX_WRITE_ATTEMPTS:
                    raise
                logger.warning(
                    "rating_write_conflict",
                    contractor_id=contractor_id,
                    read_version=e.read_version,
                    attempt=attempt,
                )
                attempt += 1
