import hashlib
import hmac
import time
import uuid
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import BinaryIO
from urllib.parse import urlencode

from adminia.exceptions import StorageError
from adminia.logging.logger import Log
from adminia.storage.base import BaseObjectStorage
from adminia.storage.exceptions import (
    ObjectAlreadyExistsError,
    ObjectNotFoundError,
    UploadSignatureError,
)
from adminia.storage.paths import (
    UPLOADS_DIR,
    canonical_path,
    key_from_path,
    normalize_object_path,
)


class LocalObjectStorage(BaseObjectStorage):
    """Stores objects under a filesystem root and signs upload URLs with HMAC."""

    def __init__(
        self,
        *,
        root: Path,
        public_base_url: str,
        signing_secret: str,
        upload_ttl_seconds: int = 900,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not signing_secret:
            raise ValueError("storage signing secret must not be empty")
        self._root = root
        self._public_base_url = public_base_url.rstrip("/")
        self._secret = signing_secret.encode("utf-8")
        self._ttl = upload_ttl_seconds
        self._clock = clock

    def issue_upload_url(self) -> str:
        key = f"{UPLOADS_DIR}/{uuid.uuid4().hex}"
        expires = str(int(self._clock()) + self._ttl)
        query = urlencode({"expires": expires, "signature": self._sign(key, expires)})
        Log.debug(f"Issued upload URL for {key}, expires at {expires}")
        return f"{self._public_base_url}{canonical_path(key)}?{query}"

    def normalize_path(self, raw_path_or_url: str) -> str:
        return normalize_object_path(raw_path_or_url, self._public_base_url)

    def open_read_stream(self, canonical_path: str) -> BinaryIO:
        key = key_from_path(canonical_path)
        if key is None:
            raise ObjectNotFoundError(f"Object not found: {canonical_path}")
        path = self._resolve(key)
        if not path.is_file():
            raise ObjectNotFoundError(f"Object not found: {canonical_path}")
        try:
            return path.open("rb")
        except FileNotFoundError as exc:
            raise ObjectNotFoundError(f"Object not found: {canonical_path}") from exc
        except OSError as exc:
            raise StorageError(f"Failed to open object {canonical_path}: {exc}") from exc

    def verify_upload(self, key: str, expires: str, signature: str) -> None:
        try:
            expires_at = int(expires)
        except ValueError as exc:
            raise UploadSignatureError("Upload URL has an invalid expiry") from exc
        if not hmac.compare_digest(self._sign(key, expires), signature):
            raise UploadSignatureError("Upload URL signature does not match")
        if expires_at < self._clock():
            raise UploadSignatureError("Upload URL has expired")

    def write_object(self, key: str, chunks: Iterable[bytes]) -> str:
        path = self._resolve(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handle = path.open("xb")
        except FileExistsError as exc:
            raise ObjectAlreadyExistsError(f"Object already exists: {key}") from exc
        except OSError as exc:
            raise StorageError(f"Failed to create object {key}: {exc}") from exc

        written = 0
        try:
            with handle:
                for chunk in chunks:
                    handle.write(chunk)
                    written += len(chunk)
        except OSError as exc:
            path.unlink(missing_ok=True)
            raise StorageError(f"Failed to write object {key}: {exc}") from exc
        Log.info(f"Stored object {key} ({written} bytes)")
        return canonical_path(key)

    def _sign(self, key: str, expires: str) -> str:
        message = f"PUT\n{key}\n{expires}".encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    def _resolve(self, key: str) -> Path:
        """Map a key to a file under the root; keys escaping the root do not exist."""
        root = self._root.resolve()
        path = (root / key.lstrip("/")).resolve()
        if path == root or not path.is_relative_to(root):
            raise ObjectNotFoundError(f"Object not found: {key}")
        return path
