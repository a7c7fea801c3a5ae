from adminia.exceptions import ConflictActiveAnalysisError, InvalidInputError, NotFoundError


class DocumentNotFoundError(NotFoundError):
    """Raised when a document cannot be found in the store."""


class QueueEntryNotFoundError(NotFoundError):
    """Raised when a processing queue entry cannot be found."""


class QueueEntryNotPendingError(ConflictActiveAnalysisError):
    """Raised when a queue entry was already claimed or finished by another attempt."""


class ImmutableFieldError(InvalidInputError):
    """Raised when an update tries to change a field fixed at creation."""
