"""
Filesystem backends: one JSON file per record under a root directory.

    <root>/datasets/<dataset_id>.json   Dataset record
    <root>/schemas/<dataset_id>.json    {"dataset_id": ..., "schema_definition": "<dump_schema JSON>"}
"""
import json
import os
import re
from typing import List

from pydantic import ValidationError

from schema_guard.core.serialization import dump_schema, load_schema
from schema_guard.models import Dataset, Schema
from schema_guard.utils.exceptions import (
    DatasetNotFoundError,
    MalformedDatasetRecordError,
    MalformedStoredSchemaError,
    SchemaAlreadyExistsError,
    SchemaNotFoundError,
)
from schema_guard.utils.logger import get_logger

logger = get_logger(__name__)

# ids end up in file paths
_SAFE_ID = re.compile(r"[A-Za-z0-9_-]+")


def _is_safe_id(dataset_id: str) -> bool:
    return _SAFE_ID.fullmatch(dataset_id) is not None


class FileSystemDatasetStore:
    """IDatasetStore backed by a directory of JSON files."""

    def __init__(self, root: str) -> None:
        self._dir = os.path.join(root, "datasets")
        os.makedirs(self._dir, exist_ok=True)

    def _path(self, dataset_id: str) -> str:
        return os.path.join(self._dir, f"{dataset_id}.json")

    def create(self, name: str, filename: str) -> Dataset:
        dataset = Dataset(name=name, filename=filename)
        tmp_path = self._path(dataset.id) + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(dataset.model_dump_json())
        os.replace(tmp_path, self._path(dataset.id))
        logger.info(f"Stored dataset record {dataset.id} ({filename})")
        return dataset

    def get(self, dataset_id: str) -> Dataset:
        if not _is_safe_id(dataset_id):
            raise DatasetNotFoundError(dataset_id)
        try:
            with open(self._path(dataset_id), encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            raise DatasetNotFoundError(dataset_id)

        try:
            return Dataset.model_validate_json(raw)
        except ValidationError as e:
            raise MalformedDatasetRecordError(
                f"Dataset record '{dataset_id}' is invalid: {e.errors()[0]['msg']}"
            )

    def list(self) -> List[Dataset]:
        datasets = []
        for entry in sorted(os.listdir(self._dir)):
            if entry.endswith(".json"):
                datasets.append(self.get(entry[:-len(".json")]))
        return sorted(datasets, key=lambda d: d.created_at)


class FileSystemSchemaRepository:
    """ISchemaRepository backed by a directory of JSON files."""

    def __init__(self, root: str) -> None:
        self._dir = os.path.join(root, "schemas")
        os.makedirs(self._dir, exist_ok=True)

    def _path(self, dataset_id: str) -> str:
        return os.path.join(self._dir, f"{dataset_id}.json")

    def save(self, dataset_id: str, schema: Schema) -> None:
        if not _is_safe_id(dataset_id):
            raise DatasetNotFoundError(dataset_id)
        record = {"dataset_id": dataset_id, "schema_definition": dump_schema(schema)}
        try:
            # "x" refuses to overwrite: schemas have no update path
            with open(self._path(dataset_id), "x", encoding="utf-8") as f:
                json.dump(record, f)
        except FileExistsError:
            raise SchemaAlreadyExistsError(dataset_id)
        logger.info(f"Stored schema for dataset {dataset_id} ({len(schema.columns)} columns)")

    def get(self, dataset_id: str) -> Schema:
        if not _is_safe_id(dataset_id):
            raise SchemaNotFoundError(dataset_id)
        try:
            with open(self._path(dataset_id), encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            raise SchemaNotFoundError(dataset_id)

        try:
            record = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedStoredSchemaError(f"Schema record for dataset '{dataset_id}' is not valid JSON: {e}")
        if not isinstance(record, dict) or "schema_definition" not in record:
            raise MalformedStoredSchemaError(f"Schema record for dataset '{dataset_id}' has no schema_definition.")
        if record.get("dataset_id") != dataset_id:
            raise MalformedStoredSchemaError(f"Schema record for dataset '{dataset_id}' belongs to another dataset.")
        return load_schema(record["schema_definition"])
