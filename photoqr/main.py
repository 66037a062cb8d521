import sys
import time
from contextlib import asynccontextmanager
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from loguru import logger

from photoqr.config import Settings, get_settings
from photoqr.middleware import MULTIPART_OVERHEAD, UploadSizeLimit
from photoqr.routes.health import router as health_router
from photoqr.routes.qr import router as qr_router
from photoqr.routes.upload import router as upload_router
from photoqr.services.errors import PhotoQRError, UploadRejected

settings = get_settings()


def _configure_logging(app_settings: Settings) -> None:
    logger.configure(patcher=lambda record: record["extra"].setdefault("request_id", "-"))
    logger.remove()
    logger.add(
        sys.stderr,
        level=app_settings.log_level.upper(),
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | req={extra[request_id]} | {name}:{function}:{line} | {message}",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    app_settings = settings
    _configure_logging(app_settings)
    app.state.settings = app_settings
    logger.bind(request_id="-").info(
        "Starting app app_name={} port={} endpoint={} bucket={} sign_url_expires={}",
        app_settings.app_name,
        app_settings.port,
        app_settings.storage_endpoint,
        app_settings.r2_bucket,
        app_settings.sign_url_expires,
    )
    missing = app_settings.missing_storage_settings()
    if missing:
        logger.bind(request_id="-").warning(
            "Object store not fully configured; uploads will fail until set missing={}",
            ",".join(missing),
        )
    yield
    logger.bind(request_id="-").info("Shutting down app app_name={}", app_settings.app_name)


app = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)

app.add_middleware(UploadSizeLimit, path="/upload", max_body_bytes=settings.max_upload_bytes + MULTIPART_OVERHEAD)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(upload_router)
app.include_router(qr_router)


@app.exception_handler(PhotoQRError)
async def handle_photoqr_error(request: Request, exc: PhotoQRError) -> JSONResponse:
    if isinstance(exc, UploadRejected):
        logger.warning("Upload rejected path={} code={} error={}", request.url.path, exc.code, str(exc))
    else:
        logger.opt(exception=exc).error("Upload failed path={} code={} error={}", request.url.path, exc.code, str(exc))
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc) or "Internal error", "code": exc.code})


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Request validation failed path={} errors={}", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"error": "Invalid upload request.", "code": "invalid_request"})


@app.middleware("http")
async def add_request_context(request: Request, call_next) -> Response:
    request_id = request.headers.get("x-request-id", str(uuid4()))
    bound_logger = logger.bind(request_id=request_id)
    start = time.perf_counter()
    bound_logger.info("Request start method={} path={}", request.method, request.url.path)
    with logger.contextualize(request_id=request_id):
        try:
            response = await call_next(request)
        except Exception:
            bound_logger.exception("Request failed method={} path={}", request.method, request.url.path)
            raise
    duration_ms = (time.perf_counter() - start) * 1000
    bound_logger.info(
        "Request finish method={} path={} status={} duration_ms={:.2f}",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    response.headers["X-Request-ID"] = request_id
    return response


if settings.public_path.exists():
    app.mount("/", StaticFiles(directory=str(settings.public_path), html=True), name="public")


def run() -> None:
    uvicorn.run("photoqr.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())
