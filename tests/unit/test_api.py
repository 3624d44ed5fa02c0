import os
import pytest
from fastapi.testclient import TestClient
from schema_guard.api import routes
from schema_guard.api.routes import app, get_dataset_store, get_schema_repository
from schema_guard.storage import (
    FileSystemDatasetStore,
    FileSystemSchemaRepository,
    MemoryDatasetStore,
    MemorySchemaRepository,
)

PEOPLE_CSV = b"id,age,active\n1,30,true\n2,41,false\n"


@pytest.fixture
def stores():
    datasets, schemas = MemoryDatasetStore(), MemorySchemaRepository()
    app.dependency_overrides[get_dataset_store] = lambda: datasets
    app.dependency_overrides[get_schema_repository] = lambda: schemas
    yield datasets, schemas
    app.dependency_overrides.clear()


@pytest.fixture
def client(stores):
    return TestClient(app)


def _upload(client, content: bytes, name: str = "people", filename: str = "people.csv"):
    return client.post(
        "/datasets",
        data={"name": name},
        files={"file": (filename, content, "text/csv")},
    )


def _validate(client, dataset_id: str, content: bytes):
    return client.post(
        f"/datasets/{dataset_id}/validate",
        files={"file": ("new.csv", content, "text/csv")},
    )

# --- Tests for Health ---

def test_root(client):
    """Test the health check endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "online"

# --- Tests for Dataset Creation ---

def test_create_dataset_infers_schema(client):
    """Test that an upload creates a dataset and returns its inferred columns."""
    response = _upload(client, PEOPLE_CSV)
    assert response.status_code == 201
    body = response.json()
    assert body["dataset"]["name"] == "people"
    assert body["dataset"]["filename"] == "people.csv"
    assert body["columns"] == [
        {"name": "id", "type": "integer"},
        {"name": "age", "type": "integer"},
        {"name": "active", "type": "boolean"},
    ]

def test_show_dataset(client):
    """Test that the stored schema is returned with the dataset."""
    dataset_id = _upload(client, PEOPLE_CSV).json()["dataset"]["id"]
    response = client.get(f"/datasets/{dataset_id}")
    assert response.status_code == 200
    assert response.json()["dataset"]["id"] == dataset_id
    assert [c["name"] for c in response.json()["columns"]] == ["id", "age", "active"]

def test_list_datasets(client):
    """Test that created datasets are listed."""
    _upload(client, PEOPLE_CSV, name="one")
    _upload(client, PEOPLE_CSV, name="two")
    names = {d["name"] for d in client.get("/datasets").json()["datasets"]}
    assert names == {"one", "two"}

def test_create_header_only_stores_nothing(client):
    """Test that a failed inference leaves no dataset record behind."""
    response = _upload(client, b"id,age,active\n")
    assert response.status_code == 400
    assert response.json()["error"] == "NoDataRowError"
    assert client.get("/datasets").json()["datasets"] == []

def test_create_empty_file(client):
    """Test that an empty upload is rejected."""
    response = _upload(client, b"")
    assert response.status_code == 400
    assert response.json()["error"] == "EmptyDatasetError"

def test_create_binary_file(client):
    """Test that non-text uploads are unsupported."""
    response = _upload(client, b"\x89PNG\r\n\x1a\n\xff\xd8", filename="image.png")
    assert response.status_code == 415
    assert response.json()["error"] == "UnsupportedFormatError"

def test_create_too_large(client, monkeypatch):
    """Test the upload size limit."""
    monkeypatch.setattr(routes.settings, "MAX_UPLOAD_SIZE_MB", 0)
    response = _upload(client, PEOPLE_CSV)
    assert response.status_code == 400
    assert "limit" in response.json()["detail"]

def test_create_requires_name(client):
    """Test that the dataset name is mandatory."""
    response = client.post("/datasets", files={"file": ("people.csv", PEOPLE_CSV, "text/csv")})
    assert response.status_code == 422

# --- Tests for Validation ---

def test_validate_compatible(client):
    """Test that a structurally equal upload is compatible."""
    dataset_id = _upload(client, PEOPLE_CSV).json()["dataset"]["id"]
    response = _validate(client, dataset_id, b"id,age,active\n7,19,false\n")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "compatible"
    assert body["dataset_id"] == dataset_id
    assert body["reason"] == "Dataset is valid according to the schema."

def test_validate_type_change(client):
    """Test that a changed column type is reported with expected and actual types."""
    dataset_id = _upload(client, PEOPLE_CSV).json()["dataset"]["id"]
    response = _validate(client, dataset_id, b"id,age,active\n1,thirty,true\n")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "incompatible"
    assert body["diff"]["type_mismatches"] == {"age": {"expected": "integer", "actual": "string"}}

def test_validate_renamed_column(client):
    """Test that a renamed column is reported as missing plus extra."""
    dataset_id = _upload(client, PEOPLE_CSV).json()["dataset"]["id"]
    body = _validate(client, dataset_id, b"id,years,active\n1,30,true\n").json()
    assert body["status"] == "incompatible"
    assert body["diff"]["missing_columns"] == ["age"]
    assert body["diff"]["extra_columns"] == ["years"]

def test_validate_unknown_dataset(client):
    """Test that validating against an unknown dataset is a 404."""
    response = _validate(client, "missing", PEOPLE_CSV)
    assert response.status_code == 404
    assert response.json()["error"] == "DatasetNotFoundError"

def test_validate_header_only_upload(client):
    """Test that inference errors on the new upload reach the caller."""
    dataset_id = _upload(client, PEOPLE_CSV).json()["dataset"]["id"]
    response = _validate(client, dataset_id, b"id,age,active\n")
    assert response.status_code == 400
    assert response.json()["error"] == "NoDataRowError"

def test_validate_corrupted_stored_schema(client, stores):
    """Test that a corrupted stored schema is a server error, not a verdict."""
    _, schemas = stores
    dataset_id = _upload(client, PEOPLE_CSV).json()["dataset"]["id"]
    schemas._definitions[dataset_id] = "Generated Schema"
    response = _validate(client, dataset_id, PEOPLE_CSV)
    assert response.status_code == 500
    assert response.json()["error"] == "MalformedStoredSchemaError"

def test_show_unknown_dataset(client):
    """Test that an unknown dataset id is a 404."""
    response = client.get("/datasets/missing")
    assert response.status_code == 404

def test_list_with_corrupted_dataset_record(tmp_path):
    """Test that a corrupted dataset file surfaces as a typed server error."""
    datasets = FileSystemDatasetStore(str(tmp_path))
    schemas = FileSystemSchemaRepository(str(tmp_path))
    app.dependency_overrides[get_dataset_store] = lambda: datasets
    app.dependency_overrides[get_schema_repository] = lambda: schemas
    try:
        with open(os.path.join(str(tmp_path), "datasets", "broken.json"), "w", encoding="utf-8") as f:
            f.write("{not json")
        response = TestClient(app).get("/datasets")
        assert response.status_code == 500
        assert response.json()["error"] == "MalformedDatasetRecordError"
    finally:
        app.dependency_overrides.clear()
