"""Configuration settings for the photo tagging service."""
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MIN_CONFIDENCE = 70.0
DEFAULT_SIMILARITY_THRESHOLD = 80.0


class Settings(BaseSettings):
    """Application settings.

    These settings are loaded from environment variables with the following precedence:
    1. Environment variables
    2. .env file
    3. Default values

    Attributes:
        MIN_CONFIDENCE: Minimum confidence for label detection (also read from ``MinConfidence``)
        SIMILARITY_THRESHOLD: Similarity threshold for face matching (0-100, inclusive)
        UPLOADER_METADATA_KEY: Object metadata field holding the uploading user
        PROCESS_FIRST_RECORD_ONLY: Stop after the first record of an event batch
    """
    model_config = SettingsConfigDict(
        case_sensitive=True,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_prefix="",
        populate_by_name=True,
    )

    # Core Settings
    PROJECT_NAME: str = "Photo Tagging Service"
    VERSION: str = "0.1.0"
    ENVIRONMENT: str = "development"

    # Face matching settings
    MIN_CONFIDENCE: float = Field(
        default=DEFAULT_MIN_CONFIDENCE,
        validation_alias=AliasChoices("MIN_CONFIDENCE", "MinConfidence"),
    )
    SIMILARITY_THRESHOLD: float = Field(default=DEFAULT_SIMILARITY_THRESHOLD, ge=0.0, le=100.0)
    MAX_MATCHES: int = Field(default=1, ge=1)

    # Event settings
    UPLOADER_METADATA_KEY: str = "user"
    PROCESS_FIRST_RECORD_ONLY: bool = False

    # DynamoDB Settings
    FACES_TABLE_NAME: str = "Faces"
    FACES_TABLE_KEY: str = "FaceId"
    FACES_CONTACT_ATTRIBUTE: str = "Email"
    PHOTOS_TABLE_NAME: str = "Photos"
    PHOTOS_TABLE_KEY: str = "Face"
    PHOTOS_SET_ATTRIBUTE: str = "Photo"

    # AWS Settings
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_REGION: str = "us-east-1"

    # SQS Settings
    SQS_QUEUE_NAME: str = "phototag-upload-events"
    SQS_BATCH_SIZE: int = 10  # Maximum allowed by SQS ReceiveMessage API
    SQS_WAIT_TIME: int = 20
    WORKER_STATS_INTERVAL: int = 30

    # Optional settings with defaults
    LOG_LEVEL: str = "INFO"

    @field_validator("MIN_CONFIDENCE", mode="before")
    @classmethod
    def parse_min_confidence(cls, value: Any) -> Any:
        """Fall back to the default when the override cannot be parsed."""
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_MIN_CONFIDENCE
        try:
            return float(value)
        except (TypeError, ValueError):
            return DEFAULT_MIN_CONFIDENCE


settings = Settings()
