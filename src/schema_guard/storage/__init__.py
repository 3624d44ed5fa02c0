"""Pluggable storage backends behind Protocol interfaces."""
from typing import Optional, Tuple

from schema_guard.config import settings as default_settings
from schema_guard.config.settings import Settings
from schema_guard.storage.filesystem_backend import FileSystemDatasetStore, FileSystemSchemaRepository
from schema_guard.storage.memory_backend import MemoryDatasetStore, MemorySchemaRepository
from schema_guard.storage.protocols import IDatasetStore, ISchemaRepository


def create_storage(settings: Optional[Settings] = None) -> Tuple[IDatasetStore, ISchemaRepository]:
    """Create the dataset store and schema repository selected by STORAGE_BACKEND."""
    settings = settings or default_settings

    if settings.STORAGE_BACKEND == "filesystem":
        return (
            FileSystemDatasetStore(settings.STORAGE_DIR),
            FileSystemSchemaRepository(settings.STORAGE_DIR),
        )
    return MemoryDatasetStore(), MemorySchemaRepository()


__all__ = [
    "IDatasetStore",
    "ISchemaRepository",
    "MemoryDatasetStore",
    "MemorySchemaRepository",
    "FileSystemDatasetStore",
    "FileSystemSchemaRepository",
    "create_storage",
]
