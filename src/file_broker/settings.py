# src/file_broker/settings.py
from typing import Optional
from pydantic import Field, validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


VALID_DEPLOYMENT_MODES = ["local-dev", "aws-mock", "aws-prod"]


class Settings(BaseSettings):
    """
    Single source of truth for all broker settings.

    Configuration precedence:
    1. Environment variables (highest priority)
    2. .env file (if exists)
    3. Default values in this class (lowest priority)

    Usage:
        from file_broker.settings import get_settings
        settings = get_settings()
        bucket_name = settings.s3_bucket_name
    """

    # Application Settings
    app_name: str = Field(
        default="file-broker",
        description="Application name"
    )

    # Deployment Mode
    deployment_mode: str = Field(
        default="local-dev",
        description="Deployment mode: local-dev, aws-mock, or aws-prod"
    )

    # AWS Core Settings
    aws_region: str = Field(
        default="us-east-1",
        alias="AWS_DEFAULT_REGION"
    )

    aws_access_key_id: Optional[str] = Field(
        default=None,
        alias="AWS_ACCESS_KEY_ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default=None,
        alias="AWS_SECRET_ACCESS_KEY"
    )

    aws_endpoint_url: Optional[str] = Field(
        default=None,
        alias="AWS_ENDPOINT_URL"
    )

    # S3 Configuration
    s3_bucket_name: str = Field(
        default="notebook-files",
        description="S3 bucket holding notebook files"
    )

    # Storage Configuration
    storage_dir: str = Field(
        default="storage",
        description="Local storage directory"
    )

    index_db_path: str = Field(
        default="file_index.db",
        description="SQLite database tracking file ids and timestamps"
    )

    # Notebook
    notebook_id: str = Field(
        default="default",
        description="Notebook served when none is given explicitly"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )

    @validator('deployment_mode', pre=True)
    def normalize_deployment_mode(cls, v):
        """Normalize deployment mode values for backwards compatibility."""
        if v:
            mode_mapping = {
                "local": "local-dev",
                "local-mock": "local-dev",
                "cloud": "aws-prod",
            }
            return mode_mapping.get(v, v)
        return v

    @validator('deployment_mode')
    def validate_deployment_mode(cls, v):
        """Validate deployment mode is one of the allowed values."""
        if v not in VALID_DEPLOYMENT_MODES:
            raise ValueError(f"Invalid deployment_mode: {v}. Must be one of {VALID_DEPLOYMENT_MODES}")
        return v

    @validator('aws_endpoint_url', always=True)
    def set_endpoint_url_based_on_mode(cls, v, values):
        """Point at the local moto server in aws-mock mode if not explicitly provided."""
        if v is None and values.get('deployment_mode') == "aws-mock":
            return "http://localhost:5000"
        return v

    @validator('aws_access_key_id', 'aws_secret_access_key', always=True)
    def set_mock_credentials_for_local_modes(cls, v, values):
        """Auto-set mock credentials for local modes if not provided."""
        if v is None and values.get('deployment_mode') in ["local-dev", "aws-mock"]:
            return "mock"
        # In production, None lets the IAM execution role handle auth
        return v

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=(".env", ".env.local-dev", ".env.aws-mock", ".env.aws-prod"),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one Settings instance per process.
    """
    return Settings()
