import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from photoqr.config import Settings, get_settings
from photoqr.main import app
from photoqr.services.storage import get_object_store

STORAGE_ENV_VARS = (
    "CF_ACCOUNT_ID",
    "S3_ENDPOINT",
    "R2_BUCKET",
    "R2_REGION",
    "R2_ACCESS_KEY_ID",
    "R2_SECRET_ACCESS_KEY",
    "AWS_ACCESS_KEY_ID",
    "AWS_SECRET_ACCESS_KEY",
    "BASE_URL",
    "SIGN_URL_EXPIRES",
    "MAX_UPLOAD_BYTES",
)


class FakeObjectStore:
    def __init__(self, bucket: str = "photos") -> None:
        self.bucket = bucket
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.signed: list[tuple[str, int]] = []

    def put(self, key: str, data: bytes, content_type: str) -> None:
        self.objects[key] = (data, content_type)

    def presign_get(self, key: str, expires_in: int) -> str:
        self.signed.append((key, expires_in))
        return (
            f"https://acct.r2.cloudflarestorage.com/{self.bucket}/{key}"
            f"?X-Amz-Expires={expires_in}&X-Amz-Signature=deadbeef"
        )


def make_settings(**overrides) -> Settings:
    values = {
        "cf_account_id": "acct",
        "r2_bucket": "photos",
        "R2_ACCESS_KEY_ID": "AKIDEXAMPLE",
        "R2_SECRET_ACCESS_KEY": "secret",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_image(width: int, height: int, fmt: str = "JPEG", orientation: int | None = None, mode: str = "RGB") -> bytes:
    img = Image.new(mode, (width, height), color="red" if mode == "RGB" else (255, 0, 0, 128))
    buf = io.BytesIO()
    if orientation is not None:
        exif = Image.Exif()
        exif[0x0112] = orientation
        img.save(buf, format=fmt, exif=exif)
    else:
        img.save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def clean_env(monkeypatch):
    for name in STORAGE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def client(settings, store):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_object_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def image_factory():
    return make_image


@pytest.fixture
def settings_factory():
    return make_settings


@pytest.fixture
def store_factory():
    return FakeObjectStore
