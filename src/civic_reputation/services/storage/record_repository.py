"""Database queries for submission audit records."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlmodel import Session, col, select

from civic_reputation.core.errors import NotFoundError, ValidationError
from civic_reputation.models import (
    CitizenRating,
    Complaint,
    ContractorQualification,
    IssueReport,
    IssueStatus,
)

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine


def mark_issue_reviewed(
    session: Session, issue_id: str, forgive: bool, reviewed_by: str | None
) -> IssueReport:
    """Record a forgiveness decision on an issue within ``session``.

    Raises:
        NotFoundError: If the issue doesn't exist.
        ValidationError: If the issue was already reviewed.
    """
    issue = session.get(IssueReport, issue_id)
    if issue is None:
        raise NotFoundError("Issue report", issue_id)
    if issue.forgiveness_approved is not None:
        raise ValidationError(
            "Issue report has already been reviewed",
            f"Issue {issue.id} is {issue.status}.",
        )

    issue.forgiveness_approved = forgive
    issue.reviewed_by = reviewed_by
    issue.reviewed_at = datetime.now(UTC)
    issue.status = (IssueStatus.APPROVED if forgive else IssueStatus.REJECTED).value
    session.add(issue)
    return issue


def find_qualification(session: Session, contractor_id: str) -> ContractorQualification | None:
    statement = select(ContractorQualification).where(
        ContractorQualification.contractor_id == contractor_id
    )
    return session.exec(statement).first()


class RecordRepository(AsyncRepository):
    """Query complaints, citizen ratings, issue reports and qualifications.

    Records are written inside :meth:`ContractorRepository.mutate` so they
    commit together with the rating change they caused.
    """

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def add(self, record: Any) -> Any:
        """Insert a record that doesn't touch a rating, such as a pending forgiveness request."""

        def _add(session: Session) -> Any:
            session.add(record)
            session.commit()
            return record

        return await self._run_session(_add)

    async def list_complaints(
        self,
        contractor_id: str | None = None,
        status: str | None = None,
        limit: int | None = None,
    ) -> list[Complaint]:
        """Get complaints, newest first."""

        def _get(session: Session) -> list[Complaint]:
            statement = select(Complaint)
            if contractor_id is not None:
                statement = statement.where(Complaint.contractor_id == contractor_id)
            if status is not None:
                statement = statement.where(Complaint.status == status)
            statement = statement.order_by(col(Complaint.created_at).desc())
            if limit is not None:
                statement = statement.limit(limit)
            return list(session.exec(statement).all())

        return await self._run_session(_get)

    async def list_citizen_ratings(
        self,
        contract_id: str | None = None,
        contractor_id: str | None = None,
        citizen_id: str | None = None,
        status: str | None = None,
    ) -> list[CitizenRating]:
        """Get citizen ratings matching the given filters, newest first."""

        def _get(session: Session) -> list[CitizenRating]:
            statement = select(CitizenRating)
            if contract_id is not None:
                statement = statement.where(CitizenRating.contract_id == contract_id)
            if contractor_id is not None:
                statement = statement.where(CitizenRating.contractor_id == contractor_id)
            if citizen_id is not None:
                statement = statement.where(CitizenRating.citizen_id == citizen_id)
            if status is not None:
                statement = statement.where(CitizenRating.status == status)
            statement = statement.order_by(col(CitizenRating.reported_at).desc())
            return list(session.exec(statement).all())

        return await self._run_session(_get)

    async def get_issue(self, issue_id: str) -> IssueReport | None:
        def _get(session: Session) -> IssueReport | None:
            return session.get(IssueReport, issue_id)

        return await self._run_session(_get)

    async def list_issues(
        self,
        contract_id: str | None = None,
        contractor_id: str | None = None,
        category: str | None = None,
        status: str | None = None,
    ) -> list[IssueReport]:
        """Get issue reports matching the given filters, latest issue first."""

        def _get(session: Session) -> list[IssueReport]:
            statement = select(IssueReport)
            if contract_id is not None:
                statement = statement.where(IssueReport.contract_id == contract_id)
            if contractor_id is not None:
                statement = statement.where(IssueReport.contractor_id == contractor_id)
            if category is not None:
                statement = statement.where(IssueReport.category == category)
            if status is not None:
                statement = statement.where(IssueReport.status == status)
            statement = statement.order_by(col(IssueReport.issue_date).desc())
            return list(session.exec(statement).all())

        return await self._run_session(_get)

    async def get_qualification(self, contractor_id: str) -> ContractorQualification | None:
        def _get(session: Session) -> ContractorQualification | None:
            return find_qualification(session, contractor_id)

        return await self._run_session(_get)

    async def approve_forgiveness(self, issue_id: str, reviewed_by: str | None) -> IssueReport:
        """Mark a forgiveness request approved. The contractor's rating is not read."""

        def _approve(session: Session) -> IssueReport:
            issue = mark_issue_reviewed(session, issue_id, True, reviewed_by)
            session.commit()
            return issue

        return await self._run_session(_approve)
