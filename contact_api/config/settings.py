from typing import Optional, Any, Union
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import PostgresDsn, ValidationInfo, field_validator, Field
from pathlib import Path

# Define the root directory of the contact_api package
SERVICE_ROOT_DIR = Path(__file__).parent.parent.resolve()
# Path to the repository root (one level above the package)
PROJECT_ROOT_DIR = SERVICE_ROOT_DIR.parent


class Settings(BaseSettings):
    # Application settings
    APP_NAME: str = "ContactFormAPI"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    API_HOST: str = "0.0.0.0"
    PORT: int = 4000

    # Security settings
    CORS_ORIGINS: Union[str, list[str]] = "*"

    # AWS settings, shared by the S3 and CloudWatch clients
    AWS_REGION: str = "us-east-1"
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[str] = None
    AWS_S3_BUCKET: str = ""

    # Telemetry settings
    METRICS_NAMESPACE: str = "ContactFormAPI"
    METRICS_ENABLED: bool = True

    # Upload settings
    MAX_UPLOAD_BYTES: int = 5 * 1024 * 1024

    # Database settings
    RDS_HOSTNAME: str = "localhost"
    RDS_PORT: int = 5432
    RDS_USERNAME: str = "postgres"
    RDS_PASSWORD: str = "postgres"
    RDS_DB_NAME: str = "contact_system"
    DATABASE_URL: Optional[str] = Field(default=None, validate_default=True)
    DB_AUTO_CREATE_SCHEMA: bool = True

    @field_validator("DATABASE_URL", mode='before')
    @classmethod
    def assemble_db_connection(cls, v: Optional[str], values: ValidationInfo) -> Any:
        if isinstance(v, str) and v:
            return v
        # Fields declared above DATABASE_URL are already validated and available in values.data
        return str(PostgresDsn.build(
            scheme="postgresql+asyncpg",
            username=values.data.get("RDS_USERNAME"),
            password=values.data.get("RDS_PASSWORD"),
            host=values.data.get("RDS_HOSTNAME"),
            port=values.data.get("RDS_PORT"),
            path=values.data.get("RDS_DB_NAME") or "",
        ))

    def model_post_init(self, __context) -> None:
        """Parse comma-separated strings into lists after model initialization."""
        if isinstance(self.CORS_ORIGINS, str):
            if self.CORS_ORIGINS.strip() == "*":
                self.CORS_ORIGINS = ["*"]
            else:
                self.CORS_ORIGINS = [origin.strip() for origin in self.CORS_ORIGINS.split(',') if origin.strip()]

    # Logging configuration path (can be overridden by env var)
    LOGGING_CONFIG_PATH: str = str(SERVICE_ROOT_DIR / "config" / "logging_config.yaml")

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT_DIR / ".env"),  # Load variables from project root .env
        env_file_encoding='utf-8',
        extra='ignore'
    )


# Instantiate settings
settings = Settings()
