from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import BinaryIO


class BaseObjectStorage(ABC):
    """Contract for object storage gateways."""

    @abstractmethod
    def issue_upload_url(self) -> str:
        """Return a time-limited, write-once PUT URL for a fresh object key."""

    @abstractmethod
    def normalize_path(self, raw_path_or_url: str) -> str:
        """Convert a signed URL or raw storage path into the canonical object path.

        Raises:
            InvalidInputError: if the input names no object.
        """

    @abstractmethod
    def open_read_stream(self, canonical_path: str) -> BinaryIO:
        """Open an object for reading. The caller closes the stream.

        Raises:
            ObjectNotFoundError: if the object does not exist.
            StorageError: if the object cannot be read.
        """

    @abstractmethod
    def verify_upload(self, key: str, expires: str, signature: str) -> None:
        """Check the signature of an upload URL.

        Raises:
            UploadSignatureError: if the signature is invalid or expired.
        """

    @abstractmethod
    def write_object(self, key: str, chunks: Iterable[bytes]) -> str:
        """Write a new object and return its canonical path.

        Raises:
            ObjectAlreadyExistsError: if the key was already written.
            StorageError: on I/O failure.
        """

    def read_bytes(self, canonical_path: str) -> bytes:
        """Read a whole object into memory."""
        with self.open_read_stream(canonical_path) as stream:
            return stream.read()
