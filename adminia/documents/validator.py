"""Validates document metadata submitted after an upload."""

from adminia.documents.models import NewDocument, is_supported_mime_type
from adminia.exceptions import InvalidInputError

_MAX_NAME_LENGTH = 255


def validate_new_document(document: NewDocument) -> NewDocument:
    """Check metadata and return a cleaned copy.

    Raises:
        InvalidInputError: on any validation failure.
    """
    name = _require_text(document.name, "name")
    original_name = _require_text(document.original_name, "original_name")
    object_path = _require_text(document.object_path, "object_path")
    mime_type = document.mime_type.strip().lower() if isinstance(document.mime_type, str) else ""
    if not is_supported_mime_type(mime_type):
        raise InvalidInputError(f"Unsupported mime type: {document.mime_type!r}")
    if isinstance(document.size, bool) or not isinstance(document.size, int):
        raise InvalidInputError("'size' must be an integer")
    if document.size < 0:
        raise InvalidInputError("'size' must not be negative")
    return NewDocument(
        name=name,
        original_name=original_name,
        mime_type=mime_type,
        size=document.size,
        object_path=object_path,
    )


def _require_text(value: object, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"'{field}' must be a non-empty string")
    text = value.strip()
    if field != "object_path" and len(text) > _MAX_NAME_LENGTH:
        raise InvalidInputError(f"'{field}' must be at most {_MAX_NAME_LENGTH} characters")
    return text
