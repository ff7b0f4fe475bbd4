"""Configuration management for EduRelay."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    ENV: str = "local"
    SERVICE_NAME: str = "edurelay"
    SERVICE_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # Storage Configuration
    STORAGE_BACKEND: str = "s3"  # "s3", "gcs" or "local"

    # S3-compatible object store (Cloudflare R2, MinIO, AWS)
    S3_ENDPOINT: str = ""
    S3_ACCESS_KEY_ID: str = ""
    S3_SECRET_ACCESS_KEY: str = ""
    S3_BUCKET: str = ""
    S3_REGION: str = "auto"

    # GCP Configuration
    GCP_PROJECT_ID: str = ""
    GCS_BUCKET_NAME: str = ""

    LOCAL_STORAGE_PATH: str = "data/objects"

    # Public URLs
    PUBLIC_BASE_URL: str = "https://cdn.example.com"
    PRESIGN_EXPIRATION_SECONDS: int = 600

    # Relay server
    STAGING_DIR: str = "uploads"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    ALLOWED_ORIGINS: str = "http://localhost:5173,http://localhost:3000,http://127.0.0.1:5173"

    # Upload client
    UPLOAD_SERVER_URL: str = "http://localhost:3000"
    UPLOAD_TRANSPORT: str = "relay"  # "relay" or "presigned"

    @property
    def allowed_origins(self) -> list[str]:
        """Parse ALLOWED_ORIGINS into a list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @property
    def public_base_url(self) -> str:
        """PUBLIC_BASE_URL without a trailing slash."""
        return self.PUBLIC_BASE_URL.rstrip("/")


# Singleton settings instance
settings = Settings()
