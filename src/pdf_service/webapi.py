import logging
import os

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import FileResponse, JSONResponse

from pdf_service import __version__
from pdf_service.conversion import (
    ConversionDispatcher,
    ConversionError,
    ConversionService,
    ErrorKind,
    LibreOfficeConverter,
    LocalArtifactStore,
    default_strategies,
)
from pdf_service.retention import RetentionScheduler, RetentionSweeper
from pdf_service.settings import ServiceConfig

logger = logging.getLogger(__name__)

app = FastAPI(
    title="PDF Conversion Service",
    version=os.getenv("PDF_SERVICE_VERSION", __version__),
    description=(
        "Converts uploaded images, text files, office documents and PDFs into "
        "normalized PDF artifacts that expire after a retention window."
    ),
)

ERROR_STATUS: dict[ErrorKind, int] = {
    ErrorKind.UNSUPPORTED_FORMAT: 415,
    ErrorKind.UNSUPPORTED_IMAGE_FORMAT: 415,
    ErrorKind.DECODE_FAILURE: 422,
    ErrorKind.OFFICE_CONVERSION_UNAVAILABLE: 503,
    ErrorKind.IO_FAILURE: 500,
}

SERVICE: ConversionService | None = None
SCHEDULER: RetentionScheduler | None = None


def build_service(config: ServiceConfig) -> ConversionService:
    store = LocalArtifactStore(config.staging_dir, config.output_dir)
    office = LibreOfficeConverter(config.soffice_binary, timeout_sec=config.office_timeout_sec)
    dispatcher = ConversionDispatcher(store, default_strategies(office))
    return ConversionService(dispatcher)


@app.on_event("startup")
async def _startup() -> None:
    global SERVICE, SCHEDULER
    config = ServiceConfig.from_env()
    SERVICE = build_service(config)
    SERVICE.store.ensure_dirs()
    sweeper = RetentionSweeper(config.managed_dirs())
    SCHEDULER = RetentionScheduler(
        sweeper,
        retention_minutes=config.retention_minutes,
        interval_seconds=config.sweep_interval_minutes * 60,
    )
    await SCHEDULER.start()
    logger.info("Upload directory: %s", config.staging_dir)
    logger.info("Converted directory: %s", config.output_dir)


@app.on_event("shutdown")
async def _shutdown() -> None:
    global SCHEDULER
    if SCHEDULER is not None:
        await SCHEDULER.stop()
        SCHEDULER = None


@app.get("/health")
def health() -> dict[str, str]:
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.post("/convert")
async def convert(file: UploadFile = File(...)) -> JSONResponse:
    """Convert an uploaded document into a PDF.

    Accepts multipart/form-data with a single required part named "file".
    The staged original is deleted whatever the outcome. Failures return the
    classified error code and a message that never contains server paths.
    """
    assert SERVICE is not None
    original_name = file.filename or "upload"

    async def read_chunk(n: int) -> bytes:
        return await file.read(n)

    try:
        input_path = await SERVICE.stage_upload(original_name, read_chunk)
    except OSError:
        logger.exception("Could not stage upload %s", original_name)
        raise HTTPException(status_code=500, detail={"code": ErrorKind.IO_FAILURE.value, "message": "could not store upload"})

    try:
        artifact = await SERVICE.convert_upload_async(input_path, original_name)
    except ConversionError as e:
        raise HTTPException(status_code=ERROR_STATUS[e.kind], detail=e.to_detail())

    body = {
        "message": "File converted successfully",
        "file": {**artifact.to_dict(), "download_url": f"/files/{artifact.converted_name}"},
    }
    return JSONResponse(content=body)


@app.get("/files/{filename}")
async def download(filename: str) -> FileResponse:
    assert SERVICE is not None
    path = SERVICE.store.resolve_output(filename)
    if path is None:
        raise HTTPException(status_code=403, detail={"code": "forbidden", "message": "access denied"})
    if not path.is_file():
        raise HTTPException(status_code=404, detail={"code": "not_found", "message": "file not found"})
    return FileResponse(path, media_type="application/pdf", filename=path.name)


def run() -> None:
    """Run a development ASGI server using uvicorn.

    Exposes the app at host:port (default 0.0.0.0:8080). Set PORT env var to override.
    """
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8080"))
    # Enable reload in dev unless explicitly disabled
    reload = os.getenv("RELOAD", "true").lower() in {"1", "true", "yes", "on"}

    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    uvicorn.run("pdf_service.webapi:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    run()
