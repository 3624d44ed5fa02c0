"""
Custom exception classes for the Schema Guard application.
Each carries the HTTP status the API layer should answer with, so user errors (4xx)
stay distinguishable from corrupted state (5xx).
"""

class AppException(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)

class FileProcessingError(AppException):
    """Raised when the upload itself is rejected before inference (size, missing file)."""
    def __init__(self, message: str = "Failed to process the uploaded file."):
        super().__init__(message, status_code=400)

# --- Inference ---

class EmptyDatasetError(AppException):
    """Raised when the dataset has no header row."""
    def __init__(self, message: str = "The dataset is empty: no header row was found."):
        super().__init__(message, status_code=400)

class NoDataRowError(AppException):
    """Raised when a header row exists but no data row follows it."""
    def __init__(self, message: str = "The dataset has a header row but no data rows."):
        super().__init__(message, status_code=400)

class UnsupportedFormatError(AppException):
    """Raised when the input is not row/column tabular text."""
    def __init__(self, message: str = "The dataset is not in a supported tabular format."):
        super().__init__(message, status_code=415)

# --- Stored state ---

class MalformedStoredSchemaError(AppException):
    """Raised when a persisted schema cannot be parsed back into a Schema."""
    def __init__(self, message: str = "The stored schema is malformed."):
        super().__init__(message, status_code=500)

class MalformedDatasetRecordError(AppException):
    """Raised when a persisted dataset record cannot be parsed back into a Dataset."""
    def __init__(self, message: str = "The stored dataset record is malformed."):
        super().__init__(message, status_code=500)

class DatasetNotFoundError(AppException):
    def __init__(self, dataset_id: str):
        self.dataset_id = dataset_id
        super().__init__(f"Dataset '{dataset_id}' was not found.", status_code=404)

class SchemaNotFoundError(AppException):
    def __init__(self, dataset_id: str):
        self.dataset_id = dataset_id
        super().__init__(f"No schema is stored for dataset '{dataset_id}'.", status_code=404)

class SchemaAlreadyExistsError(AppException):
    """Raised on a second save for the same dataset; schemas have no update path."""
    def __init__(self, dataset_id: str):
        self.dataset_id = dataset_id
        super().__init__(f"A schema is already stored for dataset '{dataset_id}'.", status_code=409)
