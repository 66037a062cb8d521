from functools import lru_cache
from pathlib import Path

from loguru import logger
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# SigV4 presigned URLs cannot outlive seven days.
MAX_SIGN_SECONDS = 7 * 24 * 60 * 60
DEFAULT_SIGN_SECONDS = 86400


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True, populate_by_name=True
    )

    app_name: str = "Photo QR Uploader"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 3000
    public_dir: str = "public"

    cf_account_id: str | None = None
    s3_endpoint: str | None = None
    r2_bucket: str | None = None
    r2_region: str = "auto"
    r2_access_key_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("R2_ACCESS_KEY_ID", "AWS_ACCESS_KEY_ID"),
    )
    r2_secret_access_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("R2_SECRET_ACCESS_KEY", "AWS_SECRET_ACCESS_KEY"),
    )

    base_url: str | None = None
    sign_url_expires: int = DEFAULT_SIGN_SECONDS

    max_upload_bytes: int = Field(default=8 * 1024 * 1024, ge=1)
    max_image_width: int = Field(default=1920, ge=1)
    jpeg_quality: int = Field(default=82, ge=1, le=95)
    qr_error_correction: str = Field(default="M", pattern="^[LMQH]$")

    @field_validator("sign_url_expires", mode="before")
    @classmethod
    def clamp_sign_expiry(cls, value):
        try:
            seconds = int(value)
        except (TypeError, ValueError):
            logger.warning("Invalid SIGN_URL_EXPIRES value={}; using {}", value, DEFAULT_SIGN_SECONDS)
            return DEFAULT_SIGN_SECONDS
        clamped = min(max(seconds, 1), MAX_SIGN_SECONDS)
        if clamped != seconds:
            logger.warning("SIGN_URL_EXPIRES out of range value={}; clamped to {}", seconds, clamped)
        return clamped

    @property
    def storage_endpoint(self) -> str | None:
        if self.cf_account_id:
            return f"https://{self.cf_account_id}.r2.cloudflarestorage.com"
        return self.s3_endpoint

    @property
    def public_path(self) -> Path:
        return Path(self.public_dir)

    def missing_storage_settings(self) -> list[str]:
        missing = []
        if not self.r2_bucket:
            missing.append("R2_BUCKET")
        if not self.r2_access_key_id:
            missing.append("R2_ACCESS_KEY_ID")
        if not self.r2_secret_access_key:
            missing.append("R2_SECRET_ACCESS_KEY")
        return missing


@lru_cache
def get_settings() -> Settings:
    return Settings()
