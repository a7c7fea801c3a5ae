class AdminiaError(Exception):
    """Base exception for all document intake errors."""


class NotFoundError(AdminiaError):
    """Raised when a requested document or object does not exist."""


class InvalidInputError(AdminiaError):
    """Raised when a payload or an analysis input is malformed."""


class ConflictActiveAnalysisError(AdminiaError):
    """Raised when a document already has an analysis in progress."""


class StorageError(AdminiaError):
    """Raised when object storage I/O fails."""
