"""Custom exceptions for configuration, validation and lookup errors."""

from __future__ import annotations


class ReputationError(Exception):
    """Base exception with an optional suggestion for the caller."""

    label = "Error"

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[{self.label}] {self.message}"
        if self.suggestion:
            msg += f"\n[Suggestion] {self.suggestion}"
        return msg


class ConfigurationError(ReputationError):
    """Base exception for configuration errors."""

    label = "Configuration Error"


class ValidationError(ReputationError):
    """Error when a submission fails a policy precondition.

    Raised before anything is written, so no partial state exists.
    """

    label = "Validation Error"


class MissingFieldError(ValidationError):
    """Error when a required submission field is missing."""

    def __init__(self, field: str) -> None:
        super().__init__(
            f"Missing required field '{field}'",
            "Provide the field and submit again.",
        )
        self.field = field


class NotFoundError(ReputationError):
    """Error when a referenced record does not exist."""

    label = "Not Found"

    def __init__(self, entity: str, entity_id: str, suggestion: str | None = None) -> None:
        super().__init__(f"{entity} not found: {entity_id}", suggestion)
        self.entity = entity
        self.entity_id = entity_id


class StaleRatingError(ReputationError):
    """Error when a contractor's rating changed between read and write."""

    label = "Conflict"

    def __init__(self, contractor_id: str, read_version: int) -> None:
        super().__init__(
            f"Rating for contractor {contractor_id} changed since version {read_version}",
            "Submit again; the rating will be re-read.",
        )
        self.contractor_id = contractor_id
        self.read_version = read_version
