"""Custom exceptions for Med Notes."""


class MedNotesError(Exception):
    """Base exception for shorthand resolution."""

    pass


class ValidationError(MedNotesError):
    """Raised when a caller passes arguments that can never succeed."""

    pass


class LookupUnavailable(MedNotesError):
    """Raised when the feature lookup service errors or times out.

    Transient and retryable. Callers treat it as "no answer right now",
    never as "no match".
    """

    def __init__(self, operation: str, message: str = ""):
        self.operation = operation
        super().__init__(message or f"Lookup service unavailable: {operation}")


class AttachFailed(MedNotesError):
    """Raised when linking a feature to a target entity fails."""

    def __init__(self, entity_id: str, feature_id: str, message: str = ""):
        self.entity_id = entity_id
        self.feature_id = feature_id
        super().__init__(
            message or f"Could not attach feature {feature_id} to {entity_id}"
        )
