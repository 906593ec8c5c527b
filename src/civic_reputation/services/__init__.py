from .accounts import AccountService, require_contract, require_user
from .citizen_ratings import CitizenRatingService
from .complaints import ComplaintService
from .gps import GpsExtractor, NullGpsExtractor
from .issues import IssueReportService
from .locks import ContractorLocks
from .qualification import QualificationService
from .ratings import RatingService
from .reporting import generate_reputation_report
from .reputation import ReputationService
from .storage import ReputationStore

__all__ = [
    "AccountService",
    "CitizenRatingService",
    "ComplaintService",
    "ContractorLocks",
    "GpsExtractor",
    "IssueReportService",
    "NullGpsExtractor",
    "QualificationService",
    "RatingService",
    "ReputationService",
    "ReputationStore",
    "generate_reputation_report",
    "require_contract",
    "require_user",
]
