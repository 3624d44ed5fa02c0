"""In-memory backends, dict-backed. Used by default and in tests."""
import threading
from typing import Dict, List

from schema_guard.core.serialization import dump_schema, load_schema
from schema_guard.models import Dataset, Schema
from schema_guard.utils.exceptions import (
    DatasetNotFoundError,
    SchemaAlreadyExistsError,
    SchemaNotFoundError,
)


class MemoryDatasetStore:
    """Dict-backed IDatasetStore."""

    def __init__(self) -> None:
        self._datasets: Dict[str, Dataset] = {}
        self._lock = threading.Lock()

    def create(self, name: str, filename: str) -> Dataset:
        dataset = Dataset(name=name, filename=filename)
        with self._lock:
            self._datasets[dataset.id] = dataset
        return dataset

    def get(self, dataset_id: str) -> Dataset:
        with self._lock:
            dataset = self._datasets.get(dataset_id)
        if dataset is None:
            raise DatasetNotFoundError(dataset_id)
        return dataset

    def list(self) -> List[Dataset]:
        with self._lock:
            return sorted(self._datasets.values(), key=lambda d: d.created_at)


class MemorySchemaRepository:
    """
    Dict-backed ISchemaRepository.
    Keeps the serialized definition rather than the model, so reads go
    through the same parsing path as any persistent backend.
    """

    def __init__(self) -> None:
        self._definitions: Dict[str, str] = {}
        self._lock = threading.Lock()

    def save(self, dataset_id: str, schema: Schema) -> None:
        definition = dump_schema(schema)
        with self._lock:
            if dataset_id in self._definitions:
                raise SchemaAlreadyExistsError(dataset_id)
            self._definitions[dataset_id] = definition

    def get(self, dataset_id: str) -> Schema:
        with self._lock:
            definition = self._definitions.get(dataset_id)
        if definition is None:
            raise SchemaNotFoundError(dataset_id)
        return load_schema(definition)
