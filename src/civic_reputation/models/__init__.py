from .citizen_rating import CitizenRating, RatingStatus
from .complaint import Complaint
from .contract import Contract, ContractStatus
from .contractor import ContractorProgress, ContractorRating
from .issue_report import IssueReport, IssueStatus
from .qualification import ContractorQualification
from .submissions import (
    AIRatingResult,
    CitizenRatingResult,
    CitizenRatingSubmission,
    ComplaintResult,
    ComplaintSubmission,
    ForgivenessDecision,
    ForgivenessResult,
    IssueReportResult,
    IssueReportSubmission,
    QualificationResult,
    QualificationSubmission,
)
from .user import User, UserRole

__all__ = [
    "AIRatingResult",
    "CitizenRatingResult",
    "CitizenRatingSubmission",
    "ComplaintResult",
    "ComplaintSubmission",
    "ForgivenessDecision",
    "ForgivenessResult",
    "IssueReportResult",
    "IssueReportSubmission",
    "QualificationResult",
    "QualificationSubmission",
    "CitizenRating",
    "Complaint",
    "Contract",
    "ContractStatus",
    "ContractorProgress",
    "ContractorQualification",
    "ContractorRating",
    "IssueReport",
    "IssueStatus",
    "RatingStatus",
    "User",
    "UserRole",
]
