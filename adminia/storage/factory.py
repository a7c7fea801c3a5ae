from pathlib import Path

from adminia.config.settings import Settings
from adminia.storage.base import BaseObjectStorage
from adminia.storage.local_adapter import LocalObjectStorage


class ObjectStorageFactory:
    """Creates the object storage gateway selected in settings."""

    BACKENDS = ("local",)

    @classmethod
    def create(cls, settings: Settings) -> BaseObjectStorage:
        backend = settings.storage_backend.lower()
        if backend == "local":
            return LocalObjectStorage(
                root=Path(settings.storage_root),
                public_base_url=settings.storage_public_base_url,
                signing_secret=settings.storage_signing_secret,
                upload_ttl_seconds=settings.upload_url_ttl_seconds,
            )
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
