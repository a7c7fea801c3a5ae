from adminia.exceptions import NotFoundError, StorageError


class ObjectNotFoundError(NotFoundError):
    """Raised when no object exists at the requested path."""


class UploadSignatureError(StorageError):
    """Raised when a signed upload URL is forged or expired."""


class ObjectAlreadyExistsError(StorageError):
    """Raised when a signed upload targets an object that was already written."""
