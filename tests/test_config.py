import pytest
from pydantic import ValidationError

from photoqr.config import Settings


def test_defaults(clean_env) -> None:
    settings = Settings(_env_file=None)
    assert settings.sign_url_expires == 86400
    assert settings.max_upload_bytes == 8 * 1024 * 1024
    assert settings.max_image_width == 1920
    assert settings.jpeg_quality == 82
    assert settings.qr_error_correction == "M"
    assert settings.r2_region == "auto"
    assert settings.port == 3000
    assert settings.storage_endpoint is None
    assert settings.missing_storage_settings() == ["R2_BUCKET", "R2_ACCESS_KEY_ID", "R2_SECRET_ACCESS_KEY"]


def test_account_id_builds_r2_endpoint(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("CF_ACCOUNT_ID", "abc123")
    monkeypatch.setenv("S3_ENDPOINT", "https://ignored.example.test")
    assert Settings(_env_file=None).storage_endpoint == "https://abc123.r2.cloudflarestorage.com"


def test_explicit_endpoint_without_account(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("S3_ENDPOINT", "https://minio.local:9000")
    assert Settings(_env_file=None).storage_endpoint == "https://minio.local:9000"


def test_credentials_fall_back_to_aws_names(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("R2_BUCKET", "photos")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "aws-key")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "aws-secret")
    settings = Settings(_env_file=None)
    assert settings.r2_access_key_id == "aws-key"
    assert settings.r2_secret_access_key == "aws-secret"
    assert settings.missing_storage_settings() == []


def test_r2_credentials_win_over_aws_names(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("R2_ACCESS_KEY_ID", "r2-key")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "aws-key")
    assert Settings(_env_file=None).r2_access_key_id == "r2-key"


def test_sign_expiry_from_env(clean_env, monkeypatch) -> None:
    monkeypatch.setenv("SIGN_URL_EXPIRES", "3600")
    assert Settings(_env_file=None).sign_url_expires == 3600


@pytest.mark.parametrize(
    ("value", "expected"),
    [("0", 1), ("-5", 1), ("604801", 604800), ("99999999", 604800), ("soon", 86400), ("", 86400)],
)
def test_sign_expiry_is_clamped_instead_of_failing(clean_env, monkeypatch, value, expected) -> None:
    monkeypatch.setenv("SIGN_URL_EXPIRES", value)
    assert Settings(_env_file=None).sign_url_expires == expected


def test_settings_are_immutable(clean_env) -> None:
    settings = Settings(_env_file=None)
    with pytest.raises(ValidationError):
        settings.sign_url_expires = 10
