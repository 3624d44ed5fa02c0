"""
Storage interfaces the API depends on.
Structural typing: any backend with these methods qualifies.
"""
from typing import List, Protocol, runtime_checkable

from schema_guard.models import Dataset, Schema


@runtime_checkable
class IDatasetStore(Protocol):
    """Dataset records (name + filename), keyed by an opaque id."""

    def create(self, name: str, filename: str) -> Dataset: ...

    def get(self, dataset_id: str) -> Dataset: ...

    def list(self) -> List[Dataset]: ...


@runtime_checkable
class ISchemaRepository(Protocol):
    """One schema per dataset. Saved once, then read-only."""

    def save(self, dataset_id: str, schema: Schema) -> None: ...

    def get(self, dataset_id: str) -> Schema: ...
