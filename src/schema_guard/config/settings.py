from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal, Optional


class Settings(BaseSettings):
    """
    Application settings managed via Pydantic Settings.
    Reads variables from environment and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    # --- Application Meta ---
    APP_NAME: str = "Schema Guard"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # --- Server Configuration ---
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # --- Data Ingestion Limits ---
    MAX_UPLOAD_SIZE_MB: int = 10

    # --- Schema Inference ---
    # Number of data rows sampled per column. 1 means first-row inference.
    SAMPLE_ROWS: int = Field(1, description="Data rows sampled for type inference")
    # None means the delimiter is sniffed from the header line
    CSV_DELIMITER: Optional[str] = None

    # --- Storage ---
    STORAGE_BACKEND: Literal["memory", "filesystem"] = "memory"
    STORAGE_DIR: str = "data/schemas"

    @field_validator("SAMPLE_ROWS")
    @classmethod
    def validate_sample_rows(cls, v: int) -> int:
        if v < 1:
            raise ValueError("SAMPLE_ROWS must be at least 1")
        return v

    @field_validator("CSV_DELIMITER")
    @classmethod
    def validate_delimiter(cls, v: Optional[str]) -> Optional[str]:
        """
        An empty value falls back to sniffing.
        Anything else must be exactly one character, as the csv module requires.
        """
        if not v:
            return None
        if len(v) != 1:
            raise ValueError("CSV_DELIMITER must be a single character")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown LOG_LEVEL: {v}")
        return level


settings = Settings()
