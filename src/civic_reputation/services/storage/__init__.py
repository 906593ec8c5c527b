from .audit_log import AuditLog
from .contractor_repository import ContractorRepository
from .record_repository import RecordRepository, find_qualification, mark_issue_reviewed
from .store import ReputationStore
from .user_repository import UserRepository

__all__ = [
    "AuditLog",
    "ContractorRepository",
    "RecordRepository",
    "ReputationStore",
    "UserRepository",
    "find_qualification",
    "mark_issue_reviewed",
]
