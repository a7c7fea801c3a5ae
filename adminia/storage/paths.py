from urllib.parse import urlsplit

from adminia.exceptions import InvalidInputError

OBJECTS_PREFIX = "/objects/"
UPLOADS_DIR = "uploads"


def canonical_path(key: str) -> str:
    """Return the stable path stored on a Document for a storage key."""
    return OBJECTS_PREFIX + key.lstrip("/")


def key_from_path(path: str) -> str | None:
    """Return the storage key of a canonical path, None for anything else."""
    if not path.startswith(OBJECTS_PREFIX):
        return None
    key = path[len(OBJECTS_PREFIX):]
    return key or None


def normalize_object_path(raw: str, public_base_url: str) -> str:
    """Turn a signed upload URL, a storage key or a canonical path into a canonical path.

    URLs that do not point at this service's object routes are returned unchanged.
    Applying the function to its own output returns the same value.

    Raises:
        InvalidInputError: if the input is empty or names no object.
    """
    candidate = raw.strip() if isinstance(raw, str) else ""
    if not candidate:
        raise InvalidInputError("Object path must not be empty")

    parts = urlsplit(candidate)
    if parts.scheme or parts.netloc:
        base = urlsplit(public_base_url)
        mount = base.path.rstrip("/")
        if parts.netloc != base.netloc or not parts.path.startswith(mount + OBJECTS_PREFIX):
            return candidate
        path = parts.path[len(mount):]
    elif parts.path.startswith(OBJECTS_PREFIX):
        path = parts.path
    else:
        path = canonical_path(parts.path)

    if key_from_path(path) is None:
        raise InvalidInputError(f"Object path names no object: {raw!r}")
    return path
