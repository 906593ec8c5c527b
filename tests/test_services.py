"""Integration tests for the reputation services on a temporary DuckDB database."""

import asyncio

import pytest
from sqlalchemy import update

from civic_reputation.core.errors import (
    MissingFieldError,
    NotFoundError,
    StaleRatingError,
    ValidationError,
)
from civic_reputation.models import (
    CitizenRatingSubmission,
    Complaint,
    ComplaintSubmission,
    ContractStatus,
    ContractorRating,
    ForgivenessDecision,
    IssueReportSubmission,
    IssueStatus,
    QualificationSubmission,
    UserRole,
)
from civic_reputation.scoring import (
    ComplaintFlag,
    ComplaintType,
    GeoPoint,
    IssueCategory,
    analyze_sentiment,
    calculate_new_rating,
)
from civic_reputation.scoring.eligibility import QUALITY_SUSPENDED_REASON, SUSPENDED_REASON
from civic_reputation.services import ComplaintService, GpsExtractor
from civic_reputation.services.storage.contractor_repository import MAX_WRITE_ATTEMPTS

NEGATIVE_TEXT = "The road is terrible and unsafe"
NEAR_SITE = (27.7175, 85.3245)
FAR_FROM_SITE = (27.75, 85.35)


def complaint_for(contractor_id, contract_id=None, coords=None, **kwargs):
    latitude, longitude = coords if coords else (None, None)
    return ComplaintSubmission(
        text=kwargs.pop("text", NEGATIVE_TEXT),
        email="asha@example.com",
        contractor_id=contractor_id,
        contract_id=contract_id,
        latitude=latitude,
        longitude=longitude,
        **kwargs,
    )


async def qualify(service, contractor_id):
    """Give a contractor a rating row at 3.9."""
    return await service.qualifications.submit(
        QualificationSubmission(
            contractor_id=contractor_id,
            certificate_url="https://example.com/cert.pdf",
            certificate_number="NP-123",
            experience_years=3,
            skills=["roads", "drainage"],
        )
    )


def bump_version(session, contractor_id):
    """Advance the stored rating version as another writer would."""
    session.connection().execute(
        update(ContractorRating)
        .where(ContractorRating.contractor_id == contractor_id)
        .values(version=ContractorRating.version + 1)
    )


class FixedGpsExtractor:
    def __init__(self, point):
        self.point = point

    def extract(self, image):
        return self.point


class TestAccountService:
    """Tests for users and contracts."""

    async def test_register_and_lookup(self, service, contractor):
        """Test a registered contractor can be fetched by role."""
        user = await service.store.users.get_user(contractor.id, role=UserRole.CONTRACTOR.value)
        assert user is not None
        assert user.name == "Road Co"
        assert await service.store.users.get_user(contractor.id, role="CITIZEN") is None

    async def test_empty_name(self, service):
        """Test an empty name is rejected."""
        with pytest.raises(MissingFieldError):
            await service.accounts.register_user("  ", "a@b.co", UserRole.CITIZEN)

    async def test_bad_email(self, service):
        """Test a malformed email is rejected."""
        with pytest.raises(ValidationError):
            await service.accounts.register_user("Asha", "asha", UserRole.CITIZEN)

    async def test_contract_for_unknown_contractor(self, service, citizen):
        """Test contracts can only be awarded to contractors."""
        with pytest.raises(NotFoundError):
            await service.accounts.create_contract("Bridge", citizen.id)

    async def test_contract_invalid_site(self, service, contractor):
        """Test an out-of-range project site is rejected."""
        with pytest.raises(ValidationError):
            await service.accounts.create_contract("Bridge", contractor.id, 5, 100.0, 85.0)

    async def test_complete_contract(self, service, completed_contract):
        """Test completing sets status and completion date."""
        assert completed_contract.status == ContractStatus.COMPLETED.value
        assert completed_contract.completed_at is not None
        assert completed_contract.is_completed

    async def test_complete_unknown_contract(self, service):
        with pytest.raises(NotFoundError):
            await service.accounts.complete_contract("missing")


class TestComplaintService:
    """Tests for complaint submission."""

    async def test_verified_complaint_updates_rating(self, service, contractor, active_contract):
        """Test an on-site complaint is verified and applied."""
        result = await service.complaints.submit(
            complaint_for(contractor.id, active_contract.id, NEAR_SITE)
        )

        expected = calculate_new_rating(5.0, analyze_sentiment(NEGATIVE_TEXT))
        assert result.flag is ComplaintFlag.VERIFIED
        assert result.flag_reason == "All checks passed"
        assert result.type is ComplaintType.SAFETY_CONCERN
        assert result.has_gps
        assert result.location_verified
        assert 50 < result.distance < 70
        assert result.old_rating == 5.0
        assert result.rating == pytest.approx(expected)
        assert result.rating_applied

        rating = await service.ratings.get_rating(contractor.id)
        assert rating.overall_rating == pytest.approx(expected)
        assert rating.version == 1
        progress = await service.ratings.get_progress(contractor.id)
        assert progress.current_rating == pytest.approx(expected)
        assert progress.can_bid_large

    async def test_complaint_without_gps_pending(self, service, contractor):
        """Test a complaint without GPS is stored for review and not applied."""
        result = await service.complaints.submit(complaint_for(contractor.id))

        assert result.flag is ComplaintFlag.PENDING_REVIEW
        assert result.flag_reason == "No GPS data in image"
        assert result.distance is None
        assert not result.rating_applied
        rating = await service.ratings.get_rating(contractor.id)
        assert rating.overall_rating == 5.0

        complaints = await service.complaints.list_complaints(contractor.id)
        assert len(complaints) == 1
        assert complaints[0].status == ComplaintFlag.PENDING_REVIEW.value

    async def test_far_complaint_rejected(self, service, contractor, active_contract):
        """Test a photo far from the site is rejected and not applied."""
        result = await service.complaints.submit(
            complaint_for(contractor.id, active_contract.id, FAR_FROM_SITE)
        )

        assert result.flag is ComplaintFlag.REJECTED
        assert result.flag_reason.startswith("Location is ")
        assert result.flag_reason.endswith("m from project site (max: 1000m)")
        assert not result.location_verified
        rating = await service.ratings.get_rating(contractor.id)
        assert rating.overall_rating == 5.0

    async def test_default_site_without_contract(self, service, contractor):
        """Test complaints without a contract are checked against the default site."""
        result = await service.complaints.submit(complaint_for(contractor.id, coords=NEAR_SITE))
        assert result.flag is ComplaintFlag.VERIFIED

    async def test_gps_from_image(self, service, contractor):
        """Test coordinates come from the photo when none are given."""
        extractor = FixedGpsExtractor(GeoPoint(*NEAR_SITE))
        assert isinstance(extractor, GpsExtractor)
        complaints = ComplaintService(service.config, service.store, service.locks, extractor)

        result = await complaints.submit(complaint_for(contractor.id, image=b"\xff\xd8\xff"))
        assert result.has_gps
        assert result.flag is ComplaintFlag.VERIFIED

    async def test_unknown_contractor(self, service, citizen):
        """Test complaints about non-contractors are rejected without writes."""
        with pytest.raises(NotFoundError):
            await service.complaints.submit(complaint_for(citizen.id))
        assert await service.store.contractors.list_ratings() == []

    async def test_unknown_contract(self, service, contractor):
        with pytest.raises(NotFoundError):
            await service.complaints.submit(complaint_for(contractor.id, "missing", NEAR_SITE))

    async def test_concurrent_complaints_not_lost(self, service, contractor):
        """Test concurrent complaints for one contractor all apply."""
        submissions = [complaint_for(contractor.id, coords=NEAR_SITE) for _ in range(8)]
        results = await asyncio.gather(*(service.complaints.submit(s) for s in submissions))

        expected = 5.0
        sentiment = analyze_sentiment(NEGATIVE_TEXT)
        for _ in submissions:
            expected = calculate_new_rating(expected, sentiment)

        rating = await service.ratings.get_rating(contractor.id)
        assert rating.overall_rating == pytest.approx(expected)
        assert rating.version == len(submissions)
        olds = sorted((r.old_rating for r in results), reverse=True)
        news = sorted((r.rating for r in results), reverse=True)
        assert olds[0] == 5.0
        assert olds[1:] == pytest.approx(news[:-1])
        assert len(await service.complaints.list_complaints(contractor.id)) == len(submissions)

    async def test_stats_and_audit_log(self, service, contractor):
        """Test stats reflect stored complaints and the audit log records them."""
        await service.complaints.submit(complaint_for(contractor.id, coords=NEAR_SITE))
        await service.complaints.submit(complaint_for(contractor.id))

        stats = await service.complaints.stats(contractor.id)
        assert stats.total == 2
        assert stats.verified == 1
        assert stats.pending == 1
        assert stats.most_common_type == ComplaintType.SAFETY_CONCERN.value

        entries = service.store.audit.read()
        assert [e["kind"] for e in entries] == ["complaint", "complaint"]


class TestRatingService:
    """Tests for AI rating refresh and suspension."""

    async def test_read_only_without_sentiment(self, service, contractor):
        """Test no sentiment returns the default without creating a row."""
        result = await service.ratings.refresh_ai_rating(contractor.id)
        assert result.current_rating == 5.0
        assert result.new_rating == 5.0
        with pytest.raises(NotFoundError):
            await service.ratings.get_rating(contractor.id)

    async def test_suspension(self, service, contractor):
        """Test falling below 3.8 suspends the contractor."""
        first = await service.ratings.refresh_ai_rating(contractor.id, -1.0)
        assert first.new_rating == pytest.approx(4.0)
        second = await service.ratings.refresh_ai_rating(contractor.id, -1.0)
        assert second.current_rating == pytest.approx(4.0)
        assert second.new_rating == pytest.approx(3.1)

        rating = await service.ratings.get_rating(contractor.id)
        assert rating.is_below_minimum
        progress = await service.ratings.get_progress(contractor.id)
        assert progress.is_suspended
        assert progress.suspended_reason == SUSPENDED_REASON
        assert progress.suspended_at is not None
        assert not progress.can_bid_small

    async def test_sentiment_out_of_range(self, service, contractor):
        with pytest.raises(ValidationError):
            await service.ratings.refresh_ai_rating(contractor.id, 1.5)

    async def test_unknown_contractor(self, service):
        with pytest.raises(NotFoundError):
            await service.ratings.refresh_ai_rating("missing", 0.5)


class TestQualificationService:
    """Tests for qualification intake."""

    async def test_initial_rating(self, service, contractor):
        """Test the initial rating seeds every sub-score."""
        result = await qualify(service, contractor.id)
        assert result.initial_rating == pytest.approx(3.9)
        assert result.status == "UNDER_REVIEW"

        rating = await service.ratings.get_rating(contractor.id)
        assert rating.overall_rating == pytest.approx(3.9)
        assert rating.quality_of_work == pytest.approx(3.9)
        assert rating.durability_score == pytest.approx(3.9)
        assert rating.points_gained == pytest.approx(3.9)

        progress = await service.ratings.get_progress(contractor.id)
        assert not progress.is_suspended
        assert progress.can_bid_medium
        assert not progress.can_bid_large

    async def test_only_once(self, service, contractor):
        """Test a second qualification is rejected."""
        await qualify(service, contractor.id)
        with pytest.raises(ValidationError):
            await qualify(service, contractor.id)

    async def test_resets_existing_rating(self, service, contractor):
        """Test qualifying after a complaint resets the overall rating."""
        await service.complaints.submit(complaint_for(contractor.id))
        await qualify(service, contractor.id)
        rating = await service.ratings.get_rating(contractor.id)
        assert rating.overall_rating == pytest.approx(3.9)

    async def test_concurrent_submissions_accept_one(self, service, contractor):
        """Test simultaneous qualifications for one contractor store exactly one."""
        results = await asyncio.gather(
            qualify(service, contractor.id),
            qualify(service, contractor.id),
            return_exceptions=True,
        )

        accepted = [r for r in results if not isinstance(r, BaseException)]
        rejected = [r for r in results if isinstance(r, ValidationError)]
        assert len(accepted) == 1
        assert len(rejected) == 1
        assert "already submitted" in rejected[0].message

        stored = await service.store.records.get_qualification(contractor.id)
        assert stored.id == accepted[0].qualification_id
        rating = await service.ratings.get_rating(contractor.id)
        assert rating.version == 1


class TestCitizenRatingService:
    """Tests for citizen ratings."""

    def _submission(self, contract, contractor, citizen, rating, **kwargs):
        return CitizenRatingSubmission(
            contract_id=contract.id,
            contractor_id=contractor.id,
            citizen_id=citizen.id,
            rating=rating,
            **kwargs,
        )

    async def test_gain_counts_half(self, service, contractor, citizen, completed_contract):
        """Test a better rating raises the contractor by half the difference."""
        await qualify(service, contractor.id)
        result = await service.citizen_ratings.submit(
            self._submission(completed_contract, contractor, citizen, 5.0, quality_rating=4.5)
        )

        assert result.previous_rating == pytest.approx(3.9)
        assert result.new_rating == pytest.approx(4.45)
        assert result.points_gained == pytest.approx(0.55)
        assert result.points_lost == 0.0
        assert not result.is_suspended

        rating = await service.ratings.get_rating(contractor.id)
        assert rating.overall_rating == pytest.approx(4.45)
        assert rating.quality_of_work == pytest.approx(4.5)
        assert rating.points_gained == pytest.approx(3.9 + 0.55)

        stored = await service.citizen_ratings.list_ratings(contractor_id=contractor.id)
        assert len(stored) == 1
        assert abs(stored[0].time_since_completion_days) <= 1
        assert stored[0].new_overall_rating == pytest.approx(4.45)

    async def test_loss_counts_fully(self, service, contractor, citizen, completed_contract):
        """Test a worse rating with proof drops the contractor by the full difference."""
        await qualify(service, contractor.id)
        result = await service.citizen_ratings.submit(
            self._submission(
                completed_contract, contractor, citizen, 2.0, proof_url="https://x.test/p.jpg"
            )
        )
        assert result.new_rating == pytest.approx(2.0)
        assert result.points_lost == pytest.approx(1.9)
        assert result.is_suspended

    async def test_negative_needs_proof(self, service, contractor, citizen, completed_contract):
        """Test a rating below 3.0 without proof is rejected before any write."""
        await qualify(service, contractor.id)
        with pytest.raises(ValidationError, match="Proof is required"):
            await service.citizen_ratings.submit(
                self._submission(completed_contract, contractor, citizen, 2.0)
            )
        rating = await service.ratings.get_rating(contractor.id)
        assert rating.overall_rating == pytest.approx(3.9)

    async def test_contract_must_be_completed(self, service, contractor, citizen, active_contract):
        await qualify(service, contractor.id)
        with pytest.raises(ValidationError, match="completed contracts"):
            await service.citizen_ratings.submit(
                self._submission(active_contract, contractor, citizen, 4.0)
            )

    async def test_requires_rating_record(self, service, contractor, citizen, completed_contract):
        """Test a contractor without a rating row can't be rated."""
        with pytest.raises(NotFoundError):
            await service.citizen_ratings.submit(
                self._submission(completed_contract, contractor, citizen, 4.0)
            )

    async def test_unknown_citizen(self, service, contractor, completed_contract):
        await qualify(service, contractor.id)
        with pytest.raises(NotFoundError):
            await service.citizen_ratings.submit(
                self._submission(completed_contract, contractor, contractor, 4.0)
            )


class TestIssueReportService:
    """Tests for issue reports and forgiveness."""

    def _submission(self, contract, contractor, citizen, category, **kwargs):
        return IssueReportSubmission(
            contract_id=contract.id,
            contractor_id=contractor.id,
            citizen_id=citizen.id,
            title="Cracks in the surface",
            category=category,
            issue_date="2024-05-01T00:00:00Z",
            **kwargs,
        )

    async def test_fault_requires_photos(self, service, contractor, citizen, completed_contract):
        await qualify(service, contractor.id)
        with pytest.raises(ValidationError, match="Photos are required"):
            await service.issues.submit(
                self._submission(
                    completed_contract, contractor, citizen, IssueCategory.CONTRACTOR_FAULT
                )
            )

    async def test_premature_fault_doubles(self, service, contractor, citizen, completed_contract):
        """Test a fault soon after completion takes double the penalty."""
        await qualify(service, contractor.id)
        result = await service.issues.submit(
            self._submission(
                completed_contract,
                contractor,
                citizen,
                IssueCategory.CONTRACTOR_FAULT,
                severity="LOW",
                photos=["https://x.test/crack.jpg"],
            )
        )

        assert result.penalty == pytest.approx(1.0)
        assert result.new_rating == pytest.approx(2.9)
        assert result.status == IssueStatus.UNDER_REVIEW.value
        assert result.message == "Issue report submitted. Contractor rating updated."

        rating = await service.ratings.get_rating(contractor.id)
        assert rating.durability_score == pytest.approx(3.4)
        assert rating.points_lost == pytest.approx(1.0)
        progress = await service.ratings.get_progress(contractor.id)
        assert progress.is_suspended
        assert progress.suspended_reason == QUALITY_SUSPENDED_REASON

    async def test_fault_before_completion(self, service, contractor, citizen, active_contract):
        """Test no amplifier without a completion date."""
        await qualify(service, contractor.id)
        result = await service.issues.submit(
            self._submission(
                active_contract,
                contractor,
                citizen,
                IssueCategory.CONTRACTOR_FAULT,
                severity="HIGH",
                photos=["https://x.test/crack.jpg"],
            )
        )
        assert result.penalty == pytest.approx(1.5)
        assert result.new_rating == pytest.approx(2.4)

    async def test_forgiveness_approved(self, service, contractor, citizen, completed_contract):
        """Test an approved natural-disaster issue leaves the rating alone."""
        await qualify(service, contractor.id)
        submitted = await service.issues.submit(
            self._submission(
                completed_contract, contractor, citizen, IssueCategory.NATURAL_DISASTER
            )
        )
        assert submitted.status == IssueStatus.PENDING.value
        assert submitted.penalty == 0.0
        assert submitted.new_rating is None

        result = await service.issues.review_forgiveness(
            ForgivenessDecision(issue_id=submitted.issue_id, forgive=True, reviewed_by="ward-4")
        )
        assert result.status == IssueStatus.APPROVED.value
        assert result.new_rating == pytest.approx(3.9)

        issue = await service.store.records.get_issue(submitted.issue_id)
        assert issue.is_forgiveness_request
        assert issue.forgiveness_approved is True
        assert issue.reviewed_by == "ward-4"

        with pytest.raises(ValidationError, match="already been reviewed"):
            await service.issues.review_forgiveness(
                ForgivenessDecision(issue_id=submitted.issue_id, forgive=False)
            )
        rating = await service.ratings.get_rating(contractor.id)
        assert rating.overall_rating == pytest.approx(3.9)
        assert rating.forgiveness_count == 0

    async def test_forgiveness_rejected(self, service, contractor, citizen, completed_contract):
        """Test a rejected request takes the severity penalty without the amplifier."""
        await qualify(service, contractor.id)
        submitted = await service.issues.submit(
            self._submission(
                completed_contract,
                contractor,
                citizen,
                IssueCategory.NATURAL_DISASTER,
                severity="HIGH",
            )
        )
        result = await service.issues.review_forgiveness(
            ForgivenessDecision(issue_id=submitted.issue_id, forgive=False)
        )

        assert result.status == IssueStatus.REJECTED.value
        assert result.penalty == pytest.approx(1.5)
        assert result.new_rating == pytest.approx(2.4)
        rating = await service.ratings.get_rating(contractor.id)
        assert rating.forgiveness_count == 1
        assert rating.durability_score == pytest.approx(3.15)

        issues = await service.issues.list_issues(
            contractor_id=contractor.id, status=IssueStatus.REJECTED
        )
        assert [i.id for i in issues] == [submitted.issue_id]

    async def test_forgiveness_without_rating_row(
        self, service, contractor, citizen, completed_contract
    ):
        """Test approval works for a contractor that has never been rated."""
        submitted = await service.issues.submit(
            self._submission(
                completed_contract, contractor, citizen, IssueCategory.NATURAL_DISASTER
            )
        )

        result = await service.issues.review_forgiveness(
            ForgivenessDecision(issue_id=submitted.issue_id, forgive=True, reviewed_by="ward-4")
        )
        assert result.status == IssueStatus.APPROVED.value
        assert result.penalty == 0.0
        assert result.new_rating is None
        assert await service.store.contractors.get_rating(contractor.id) is None

        issue = await service.store.records.get_issue(submitted.issue_id)
        assert issue.forgiveness_approved is True
        assert issue.reviewed_by == "ward-4"

    async def test_rejection_without_rating_row(
        self, service, contractor, citizen, completed_contract
    ):
        """Test rejecting needs a rating row and leaves the issue pending without one."""
        submitted = await service.issues.submit(
            self._submission(
                completed_contract, contractor, citizen, IssueCategory.NATURAL_DISASTER
            )
        )

        with pytest.raises(NotFoundError):
            await service.issues.review_forgiveness(
                ForgivenessDecision(issue_id=submitted.issue_id, forgive=False)
            )
        issue = await service.store.records.get_issue(submitted.issue_id)
        assert issue.status == IssueStatus.PENDING.value
        assert issue.forgiveness_approved is None

    async def test_only_disasters_forgiven(self, service, contractor, citizen, completed_contract):
        await qualify(service, contractor.id)
        submitted = await service.issues.submit(
            self._submission(
                completed_contract,
                contractor,
                citizen,
                IssueCategory.CONTRACTOR_FAULT,
                photos=["https://x.test/crack.jpg"],
            )
        )
        with pytest.raises(ValidationError, match="Only natural disaster"):
            await service.issues.review_forgiveness(
                ForgivenessDecision(issue_id=submitted.issue_id, forgive=True)
            )

    async def test_unknown_issue(self, service):
        with pytest.raises(NotFoundError):
            await service.issues.review_forgiveness(
                ForgivenessDecision(issue_id="missing", forgive=True)
            )

    async def test_list_issues_filters(self, service, contractor, citizen, completed_contract):
        """Test issues can be filtered by category and status."""
        await qualify(service, contractor.id)
        await service.issues.submit(
            self._submission(
                completed_contract, contractor, citizen, IssueCategory.NATURAL_DISASTER
            )
        )
        await service.issues.submit(
            self._submission(
                completed_contract,
                contractor,
                citizen,
                IssueCategory.CONTRACTOR_FAULT,
                photos=["https://x.test/crack.jpg"],
            )
        )

        assert len(await service.issues.list_issues(contractor_id=contractor.id)) == 2
        pending = await service.issues.list_issues(status=IssueStatus.PENDING)
        assert [i.category for i in pending] == [IssueCategory.NATURAL_DISASTER.value]
        faults = await service.issues.list_issues(category=IssueCategory.CONTRACTOR_FAULT)
        assert [i.status for i in faults] == [IssueStatus.UNDER_REVIEW.value]


class TestTransactions:
    """Tests for the single-transaction rating write."""

    async def test_failed_mutation_rolls_back(self, service, contractor):
        """Test an error inside a mutation leaves no rating or record behind."""

        def _fail(session, rating, _progress):
            rating.overall_rating = 0.0
            session.add(
                Complaint(
                    contractor_id=contractor.id,
                    text="x",
                    email="a@b.co",
                    sentiment_score=0.0,
                    complaint_type="OTHER",
                    confidence=0.0,
                    old_rating=5.0,
                    new_rating=0.0,
                    status="VERIFIED",
                )
            )
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await service.store.contractors.mutate(contractor.id, _fail, default_rating=5.0)

        assert await service.store.contractors.get_rating(contractor.id) is None
        assert await service.store.records.list_complaints(contractor.id) == []

    async def test_missing_row_without_default(self, service, contractor):
        with pytest.raises(NotFoundError, match="initialize contractor rating"):
            await service.store.contractors.mutate(contractor.id, lambda *_: None)

    async def test_stale_version_rereads_rating(self, service, contractor):
        """Test a write whose read version went stale is re-run on fresh rows."""
        await service.store.contractors.mutate(contractor.id, lambda *_: None, default_rating=5.0)
        seen_versions = []

        def _lower(session, rating, _progress):
            seen_versions.append(rating.version)
            if len(seen_versions) == 1:
                bump_version(session, contractor.id)
            rating.overall_rating -= 0.5
            return rating.overall_rating

        result = await service.store.contractors.mutate(contractor.id, _lower)

        assert seen_versions == [1, 1]
        assert result == pytest.approx(4.5)
        rating = await service.store.contractors.get_rating(contractor.id)
        assert rating.overall_rating == pytest.approx(4.5)
        assert rating.version == 2

    async def test_persistently_stale_write_fails(self, service, contractor):
        """Test a rating that keeps changing raises after the retry limit and writes nothing."""
        await service.store.contractors.mutate(contractor.id, lambda *_: None, default_rating=5.0)
        attempts = []

        def _lower(session, rating, _progress):
            attempts.append(rating.version)
            bump_version(session, contractor.id)
            rating.overall_rating = 0.0

        with pytest.raises(StaleRatingError):
            await service.store.contractors.mutate(contractor.id, _lower)

        assert len(attempts) == MAX_WRITE_ATTEMPTS
        rating = await service.store.contractors.get_rating(contractor.id)
        assert rating.overall_rating == 5.0
        assert rating.version == 1


class TestReport:
    """Tests for the reputation report."""

    async def test_report(self, service, contractor):
        """Test the report includes rating, eligibility and complaints."""
        await service.complaints.submit(complaint_for(contractor.id, coords=NEAR_SITE))
        report = await service.report(contractor.id)

        assert report.startswith("# Reputation: Road Co")
        assert "| Overall" in report
        assert "## Bid eligibility" in report
        assert "## Recent complaints" in report
        assert "VERIFIED" in report

    async def test_report_requires_rating(self, service, contractor):
        with pytest.raises(NotFoundError):
            await service.report(contractor.id)
