# i2kn_core/storage/__init__.py

from .models import LoadResult
from .provider import StorageProvider, check_name
from .providers.memory_provider import InMemoryStorage
from .providers.fs_provider import FileSystemStorage
from pathlib import Path
import os


def load_storage_provider(root: str | Path, config: dict | None = None) -> StorageProvider:
    """
    Factory resolver for the storage backend of one node root.

        - fs (default)
        - memory
    """
    config = config or {}
    provider = config.get("provider") or os.getenv("I2KN_STORAGE_PROVIDER", "fs")

    if provider == "memory":
        return InMemoryStorage(str(root))

    if provider == "fs":
        return FileSystemStorage(Path(root).expanduser())

    raise ValueError(f"Unknown storage provider: {provider}")


__all__ = [
    "LoadResult",
    "StorageProvider",
    "InMemoryStorage",
    "FileSystemStorage",
    "check_name",
    "load_storage_provider",
]
