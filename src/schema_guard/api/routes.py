from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse

from schema_guard.config import settings
from schema_guard.utils.exceptions import AppException, FileProcessingError
from schema_guard.utils.logger import get_logger

# Import core logic
from schema_guard.core.inference import infer_schema
from schema_guard.core.comparison import compare_schemas
from schema_guard.models import Dataset, Schema
from schema_guard.storage import IDatasetStore, ISchemaRepository, create_storage

logger = get_logger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs"
)

# --- Storage, chosen by STORAGE_BACKEND ---
DATASET_STORE, SCHEMA_REPOSITORY = create_storage(settings)


def get_dataset_store() -> IDatasetStore:
    return DATASET_STORE


def get_schema_repository() -> ISchemaRepository:
    return SCHEMA_REPOSITORY


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    """Translates typed application errors into JSON responses with their status code."""
    logger.warning(f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


def _check_upload(file: UploadFile) -> None:
    if not file.filename:
        raise FileProcessingError("No file was uploaded.")
    limit = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    if file.size is not None and file.size > limit:
        raise FileProcessingError(f"File exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit.")


def _columns(schema: Schema) -> list:
    return [{"name": c.name, "type": c.dtype.value} for c in schema.columns]


def _dataset_info(dataset: Dataset) -> dict:
    return dataset.model_dump(mode="json")


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "online", "message": f"{settings.APP_NAME} API is running"}


@app.post("/datasets", status_code=201)
def create_dataset(
    name: str = Form(..., min_length=1),
    file: UploadFile = File(...),
    datasets: IDatasetStore = Depends(get_dataset_store),
    schemas: ISchemaRepository = Depends(get_schema_repository),
):
    """
    Registers a dataset and stores the schema inferred from its upload.
    Nothing is stored if inference fails.
    """
    try:
        logger.info(f"Received dataset upload: {file.filename} (name={name!r})")
        _check_upload(file)

        schema = infer_schema(
            file.file,
            sample_rows=settings.SAMPLE_ROWS,
            delimiter=settings.CSV_DELIMITER,
        )
        dataset = datasets.create(name=name, filename=file.filename)
        schemas.save(dataset.id, schema)

        logger.info(f"Dataset {dataset.id} created with {len(schema.columns)} columns")
        return {
            "message": "Dataset created and schema inferred.",
            "dataset": _dataset_info(dataset),
            "columns": _columns(schema),
        }

    except AppException as e:
        raise e
    except Exception as e:
        logger.error(f"Unexpected upload error: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/datasets")
def list_datasets(datasets: IDatasetStore = Depends(get_dataset_store)):
    return {"datasets": [_dataset_info(d) for d in datasets.list()]}


@app.get("/datasets/{dataset_id}")
def show_dataset(
    dataset_id: str,
    datasets: IDatasetStore = Depends(get_dataset_store),
    schemas: ISchemaRepository = Depends(get_schema_repository),
):
    dataset = datasets.get(dataset_id)
    schema = schemas.get(dataset_id)
    return {"dataset": _dataset_info(dataset), "columns": _columns(schema)}


@app.post("/datasets/{dataset_id}/validate")
def validate_dataset(
    dataset_id: str,
    file: UploadFile = File(...),
    datasets: IDatasetStore = Depends(get_dataset_store),
    schemas: ISchemaRepository = Depends(get_schema_repository),
):
    """
    Checks a new upload against the dataset's stored schema.
    Both verdicts answer 200; the body says which one it is.
    """
    try:
        dataset = datasets.get(dataset_id)
        logger.info(f"Validating {file.filename} against dataset {dataset.id}")
        _check_upload(file)

        verdict = compare_schemas(
            schemas.get(dataset.id),
            file.file,
            sample_rows=settings.SAMPLE_ROWS,
            delimiter=settings.CSV_DELIMITER,
        )

        logger.info(f"Dataset {dataset.id} validation: {verdict.status.value}")
        return {
            "dataset_id": dataset.id,
            "filename": file.filename,
            **verdict.model_dump(mode="json"),
        }

    except AppException as e:
        raise e
    except Exception as e:
        logger.error(f"Validation failed: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to validate dataset.")
