import logging

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from reportdeck.api.routes import router
from reportdeck.api.routes import sessions
from reportdeck.core.config import report_missing_credentials
from reportdeck.core.config import settings
from reportdeck.core.exceptions import ApiError
from reportdeck.core.exceptions import ConfigurationError
from reportdeck.core.exceptions import DraftGenerationFailed
from reportdeck.core.exceptions import ExportCancelled
from reportdeck.core.exceptions import ExportFailed
from reportdeck.core.exceptions import ExportServiceError
from reportdeck.core.exceptions import ExportTimedOut
from reportdeck.core.exceptions import FileProcessingError
from reportdeck.core.exceptions import ImageGenerationFailed
from reportdeck.core.exceptions import PipelineError
from reportdeck.core.exceptions import ProxyAccessRequired
from reportdeck.core.exceptions import UploadLimitExceeded
from reportdeck.core.logging import setup_logging

setup_logging(settings.log_level)

app = FastAPI(title="ReportDeck")

logger = logging.getLogger(__name__)


@app.on_event("startup")
async def startup_event() -> None:
    missing = report_missing_credentials(settings)
    logger.info("Application started (%d credentials missing)", len(missing))


@app.on_event("shutdown")
async def shutdown_event() -> None:
    await sessions.close()
    logger.info("Application shut down, export sessions closed")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.error(f"HTTP exception: {exc.detail} (status: {exc.status_code})")
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.error("Request validation failed: %s", exc.errors(), exc_info=False)
    return JSONResponse(
        {"error": "Input validation failed", "details": exc.errors()},
        status_code=422,
    )


@app.exception_handler(ConfigurationError)
async def configuration_exception_handler(_request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error(f"Configuration error: {str(exc)}")
    return JSONResponse({"error": str(exc)}, status_code=503)


@app.exception_handler(FileProcessingError)
async def file_processing_exception_handler(_request: Request, exc: FileProcessingError) -> JSONResponse:
    logger.error(f"File processing error: {str(exc)}")
    return JSONResponse({"error": str(exc), "filename": exc.filename}, status_code=400)


@app.exception_handler(UploadLimitExceeded)
async def upload_limit_exception_handler(_request: Request, exc: UploadLimitExceeded) -> JSONResponse:
    logger.warning(f"Upload limit exceeded: {str(exc)}")
    return JSONResponse({"error": str(exc)}, status_code=413)


@app.exception_handler(DraftGenerationFailed)
async def draft_exception_handler(_request: Request, exc: DraftGenerationFailed) -> JSONResponse:
    logger.error(f"Draft generation failed: {exc.detail}")
    return JSONResponse({"error": str(exc)}, status_code=502)


@app.exception_handler(ImageGenerationFailed)
async def image_exception_handler(_request: Request, exc: ImageGenerationFailed) -> JSONResponse:
    logger.error(f"Image generation failed: {str(exc)}")
    return JSONResponse({"error": str(exc)}, status_code=502)


@app.exception_handler(ProxyAccessRequired)
async def proxy_exception_handler(_request: Request, exc: ProxyAccessRequired) -> JSONResponse:
    logger.warning("Export proxy requires activation at %s", exc.activation_url)
    return JSONResponse(
        {"error": str(exc), "action": "proxy_activation", "activation_url": exc.activation_url},
        status_code=428,
    )


@app.exception_handler(ApiError)
async def export_api_exception_handler(_request: Request, exc: ApiError) -> JSONResponse:
    logger.error(f"Export API error: {exc.status}")
    return JSONResponse({"error": str(exc), "status": exc.status, "body": exc.body}, status_code=502)


@app.exception_handler(ExportFailed)
async def export_failed_exception_handler(_request: Request, exc: ExportFailed) -> JSONResponse:
    logger.error(f"Export failed: {exc.detail}")
    return JSONResponse({"error": str(exc)}, status_code=502)


@app.exception_handler(ExportTimedOut)
async def export_timeout_exception_handler(_request: Request, exc: ExportTimedOut) -> JSONResponse:
    logger.error(f"Export timed out after {exc.attempts} attempts")
    return JSONResponse({"error": str(exc)}, status_code=504)


@app.exception_handler(ExportCancelled)
async def export_cancelled_exception_handler(_request: Request, exc: ExportCancelled) -> JSONResponse:
    logger.info(f"Export {exc.job_id} was superseded")
    return JSONResponse({"error": str(exc), "job_id": exc.job_id}, status_code=409)


@app.exception_handler(ExportServiceError)
async def export_exception_handler(_request: Request, exc: ExportServiceError) -> JSONResponse:
    logger.error(f"Export service error: {str(exc)}")
    return JSONResponse({"error": str(exc)}, status_code=502)


@app.exception_handler(PipelineError)
async def pipeline_exception_handler(_request: Request, exc: PipelineError) -> JSONResponse:
    logger.error(f"Pipeline error: {str(exc)}")
    return JSONResponse({"error": str(exc)}, status_code=500)


@app.get("/health", status_code=status.HTTP_200_OK, tags=["Health"])
async def health_check() -> dict[str, str]:
    logger.info("Health check endpoint called")
    return {"status": "ok"}


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_methods=["POST", "GET", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)
app.include_router(router)
