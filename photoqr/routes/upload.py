from fastapi import APIRouter, Depends, File, UploadFile
from loguru import logger

from photoqr.config import Settings, get_settings
from photoqr.models.upload import ErrorResponse, UploadResult
from photoqr.services.errors import MissingFile, PayloadTooLarge, UnsupportedMediaType
from photoqr.services.storage import ObjectStore, get_object_store
from photoqr.services.uploads import process_upload

router = APIRouter(prefix="/upload", tags=["upload"])


@router.post(
    "",
    response_model=UploadResult,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def upload_photo(
    photo: UploadFile | None = File(None),
    settings: Settings = Depends(get_settings),
    store: ObjectStore = Depends(get_object_store),
) -> UploadResult:
    if photo is None:
        raise MissingFile("No file uploaded.")

    content_type = photo.content_type or ""
    if not content_type.startswith("image/"):
        raise UnsupportedMediaType("Only image uploads are allowed.")

    data = await photo.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise PayloadTooLarge(f"File exceeds the {settings.max_upload_bytes} byte upload limit.")
    logger.info(
        "Upload received filename={} content_type={} size_bytes={}",
        photo.filename,
        content_type,
        len(data),
    )

    return await process_upload(data, store, settings)
