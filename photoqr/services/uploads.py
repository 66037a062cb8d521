from fastapi.concurrency import run_in_threadpool
from loguru import logger

from photoqr.config import Settings
from photoqr.models.upload import UploadResult
from photoqr.services.errors import PhotoQRError
from photoqr.services.identifiers import new_object_id, object_key_for
from photoqr.services.images import JPEG_MIME, normalize_image
from photoqr.services.qr import qr_data_url
from photoqr.services.storage import ObjectStore


async def _sign_and_encode(store: ObjectStore, key: str, settings: Settings) -> tuple[str, str]:
    view_url = await run_in_threadpool(store.presign_get, key, settings.sign_url_expires)
    qr = await run_in_threadpool(qr_data_url, view_url, settings.qr_error_correction)
    return view_url, qr


async def process_upload(data: bytes, store: ObjectStore, settings: Settings) -> UploadResult:
    """Normalize, store, sign and QR-encode one uploaded photo.

    A failure after the write leaves the object in the bucket; its key is
    logged as orphaned so it can be collected later.
    """
    try:
        optimized = await run_in_threadpool(
            normalize_image,
            data,
            settings.max_image_width,
            settings.jpeg_quality,
        )
    except PhotoQRError:
        raise
    except Exception as exc:
        logger.exception("Image normalization error size_bytes={} error={}", len(data), str(exc))
        raise PhotoQRError(str(exc) or "Internal error") from exc

    object_id = new_object_id()
    key = object_key_for(object_id)
    try:
        await run_in_threadpool(store.put, key, optimized, JPEG_MIME)
    except PhotoQRError:
        raise
    except Exception as exc:
        logger.exception("Object write error key={} error={}", key, str(exc))
        raise PhotoQRError(str(exc) or "Internal error") from exc

    try:
        view_url, qr = await _sign_and_encode(store, key, settings)
    except Exception as exc:
        logger.warning("Orphaned object left in store bucket={} key={} error={}", store.bucket, key, str(exc))
        if isinstance(exc, PhotoQRError):
            raise
        raise PhotoQRError(str(exc) or "Internal error") from exc

    logger.info(
        "Upload processed id={} key={} source_bytes={} stored_bytes={} expires_in={}",
        object_id,
        key,
        len(data),
        len(optimized),
        settings.sign_url_expires,
    )
    return UploadResult(id=object_id, filename=key, view_url=view_url, qr_data_url=qr)
