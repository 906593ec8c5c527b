"""Issue reports, penalties and natural-disaster forgiveness."""

from __future__ import annotations

import structlog
from sqlmodel import Session

from civic_reputation.core.config import ReputationConfig
from civic_reputation.core.errors import NotFoundError, ValidationError
from civic_reputation.models import (
    ContractorProgress,
    ContractorRating,
    ForgivenessDecision,
    ForgivenessResult,
    IssueReport,
    IssueReportResult,
    IssueReportSubmission,
    IssueStatus,
    UserRole,
)
from civic_reputation.scoring import IssueCategory, apply_issue_penalty, contractor_fault_penalty
from civic_reputation.scoring.eligibility import QUALITY_SUSPENDED_REASON
from civic_reputation.services.accounts import require_contract, require_user
from civic_reputation.services.locks import ContractorLocks
from civic_reputation.services.storage import ReputationStore, mark_issue_reviewed

logger = structlog.get_logger()

FORGIVENESS_QUEUED_MESSAGE = "Issue report submitted. Will be reviewed for forgiveness eligibility."
PENALTY_APPLIED_MESSAGE = "Issue report submitted. Contractor rating updated."
FORGIVEN_MESSAGE = "Forgiveness approved. Contractor rating remains unchanged."
FORGIVENESS_REJECTED_MESSAGE = "Forgiveness rejected. Penalty applied to contractor rating."


def _penalize(rating: ContractorRating, penalty: float) -> None:
    outcome = apply_issue_penalty(
        rating.overall_rating, rating.durability_score, rating.points_lost, penalty
    )
    rating.overall_rating = outcome.overall_rating
    rating.durability_score = outcome.durability_score
    rating.points_lost = outcome.points_lost


class IssueReportService:
    """File issue reports and resolve forgiveness requests.

    Contractor-fault issues are penalized as soon as they are filed.
    Natural-disaster issues wait for a government decision: forgiven issues
    leave the rating alone, rejected ones take the contractor-fault penalty.
    """

    def __init__(
        self,
        config: ReputationConfig,
        store: ReputationStore,
        locks: ContractorLocks,
    ) -> None:
        self.config = config
        self.store = store
        self._locks = locks

    async def submit(self, submission: IssueReportSubmission) -> IssueReportResult:
        """File an issue report.

        Raises:
            NotFoundError: If the contract, contractor or citizen doesn't exist,
                or a contractor-fault report targets a contractor without a
                rating record.
            ValidationError: If a contractor-fault report has no photos.
        """
        contract = await require_contract(self.store, submission.contract_id)
        await require_user(self.store, submission.contractor_id, UserRole.CONTRACTOR)
        await require_user(self.store, submission.citizen_id, UserRole.CITIZEN)

        is_fault = submission.category is IssueCategory.CONTRACTOR_FAULT
        if is_fault and not submission.photos:
            raise ValidationError(
                "Photos are required for contractor fault reports",
                "Attach at least one photo of the defect.",
            )

        penalty = 0.0
        if is_fault:
            penalty = contractor_fault_penalty(
                submission.severity, contract.completed_at, contract.expected_lifespan_years
            )

        def _record() -> IssueReport:
            return IssueReport(
                contract_id=submission.contract_id,
                contractor_id=submission.contractor_id,
                citizen_id=submission.citizen_id,
                title=submission.title,
                description=submission.description,
                category=submission.category.value,
                severity=submission.severity,
                issue_type=submission.issue_type,
                location=submission.location,
                photos=list(submission.photos),
                issue_date=submission.issue_date,
                penalty_applied=penalty,
                is_forgiveness_request=not is_fault,
                status=(IssueStatus.UNDER_REVIEW if is_fault else IssueStatus.PENDING).value,
            )

        if is_fault:

            def _apply(
                session: Session, rating: ContractorRating, _progress: ContractorProgress
            ) -> IssueReportResult:
                _penalize(rating, penalty)
                issue = _record()
                session.add(issue)
                return IssueReportResult(
                    issue_id=issue.id,
                    contractor_id=submission.contractor_id,
                    category=submission.category,
                    status=issue.status,
                    penalty=penalty,
                    new_rating=rating.overall_rating,
                    message=PENALTY_APPLIED_MESSAGE,
                )

            async with self._locks(submission.contractor_id):
                result = await self.store.contractors.mutate(
                    submission.contractor_id,
                    _apply,
                    suspended_reason=QUALITY_SUSPENDED_REASON,
                )
        else:
            issue = await self.store.records.add(_record())
            result = IssueReportResult(
                issue_id=issue.id,
                contractor_id=submission.contractor_id,
                category=submission.category,
                status=issue.status,
                penalty=0.0,
                new_rating=None,
                message=FORGIVENESS_QUEUED_MESSAGE,
            )

        logger.info(
            "issue_reported",
            issue_id=result.issue_id,
            contractor_id=result.contractor_id,
            category=result.category.value,
            penalty=result.penalty,
        )
        await self.store.audit.append("issue_report", result)
        return result

    async def review_forgiveness(self, decision: ForgivenessDecision) -> ForgivenessResult:
        """Forgive or reject a natural-disaster issue.

        Approval only updates the issue, so it works for contractors that have
        no rating row yet. Rejection applies the contractor-fault severity
        penalty and counts against the contractor's forgiveness record.

        Raises:
            NotFoundError: If the issue doesn't exist, or a rejection targets a
                contractor without a rating row.
            ValidationError: If the issue isn't a natural-disaster report or
                was already reviewed.
        """
        issue = await self.store.records.get_issue(decision.issue_id)
        if issue is None:
            raise NotFoundError("Issue report", decision.issue_id)
        if issue.category != IssueCategory.NATURAL_DISASTER.value:
            raise ValidationError("Only natural disaster issues can be forgiven")

        if decision.forgive:
            async with self._locks(issue.contractor_id):
                reviewed = await self.store.records.approve_forgiveness(
                    decision.issue_id, decision.reviewed_by
                )
            rating = await self.store.contractors.get_rating(issue.contractor_id)
            result = ForgivenessResult(
                issue_id=reviewed.id,
                status=reviewed.status,
                penalty=0.0,
                new_rating=rating.overall_rating if rating is not None else None,
                message=FORGIVEN_MESSAGE,
            )
        else:
            result = await self._reject_forgiveness(decision, issue.contractor_id, issue.severity)

        logger.info(
            "forgiveness_reviewed",
            issue_id=result.issue_id,
            forgive=decision.forgive,
            penalty=result.penalty,
        )
        await self.store.audit.append("forgiveness_review", result)
        return result

    async def _reject_forgiveness(
        self, decision: ForgivenessDecision, contractor_id: str, severity: str | None
    ) -> ForgivenessResult:
        penalty = contractor_fault_penalty(severity)

        def _apply(
            session: Session, rating: ContractorRating, _progress: ContractorProgress
        ) -> ForgivenessResult:
            issue = mark_issue_reviewed(session, decision.issue_id, False, decision.reviewed_by)
            issue.penalty_applied = penalty
            _penalize(rating, penalty)
            rating.forgiveness_count += 1
            return ForgivenessResult(
                issue_id=issue.id,
                status=issue.status,
                penalty=penalty,
                new_rating=rating.overall_rating,
                message=FORGIVENESS_REJECTED_MESSAGE,
            )

        async with self._locks(contractor_id):
            return await self.store.contractors.mutate(
                contractor_id,
                _apply,
                suspended_reason=QUALITY_SUSPENDED_REASON,
            )

    async def list_issues(
        self,
        contract_id: str | None = None,
        contractor_id: str | None = None,
        category: IssueCategory | None = None,
        status: IssueStatus | None = None,
    ) -> list[IssueReport]:
        return await self.store.records.list_issues(
            contract_id=contract_id,
            contractor_id=contractor_id,
            category=category.value if category else None,
            status=status.value if status else None,
        )
