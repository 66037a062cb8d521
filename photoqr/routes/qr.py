import html

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse
from loguru import logger

from photoqr.config import Settings, get_settings
from photoqr.services.qr import qr_data_url

router = APIRouter(prefix="/qr-upload", tags=["qr"])

UPLOAD_PAGE = "/upload.html"


def upload_page_url(request: Request, settings: Settings) -> str:
    base = settings.base_url or f"{request.url.scheme}://{request.url.netloc}"
    return base.rstrip("/") + UPLOAD_PAGE


@router.get("", response_class=HTMLResponse)
async def upload_page_qr(request: Request, settings: Settings = Depends(get_settings)) -> HTMLResponse:
    """Page with a QR code pointing phones at the upload form."""
    target = upload_page_url(request, settings)
    img = await run_in_threadpool(qr_data_url, target, settings.qr_error_correction)
    logger.debug("Upload page QR rendered target={}", target)
    return HTMLResponse(f'<h3>Scan to upload a photo</h3><img src="{img}" alt="{html.escape(target, quote=True)}" />')
