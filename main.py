
"""
Matte Emergency SOS Backend - FastAPI Application Entry Point

Per-user emergency settings, SOS trigger/resolve and auto-action planning
for the Matte scam-protection app.
"""

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import settings
from core.cors import EmptyPreflightCORSMiddleware
from core.exceptions import EmergencyServiceError
from core.logging import setup_logging, log_request_middleware
from api.v1 import emergency, content_analysis
from schemas.responses import StandardErrorResponse, StandardSuccessResponse

# Setup logging
logger = setup_logging()


app = FastAPI(
    title="Matte Emergency SOS API",
    description="Emergency SOS backend for the Matte scam-protection app",
    version=settings.VERSION,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    openapi_url="/openapi.json" if settings.DEBUG else None,
)


app.add_middleware(
    EmptyPreflightCORSMiddleware,
    allow_origins=settings.origins,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["*"],
)

if settings.ENABLE_REQUEST_LOGGING:
    app.middleware("http")(log_request_middleware)


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=StandardErrorResponse(error=message).model_dump(),
    )


@app.exception_handler(EmergencyServiceError)
async def emergency_exception_handler(request: Request, exc: EmergencyServiceError):
    logger.warning(
        f"Emergency Exception: {exc.message} | "
        f"Path: {request.url.path} | "
        f"Method: {request.method}"
    )
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation exceptions."""
    logger.error(
        f"Validation Exception: {exc.errors()} | "
        f"Path: {request.url.path} | "
        f"Method: {request.method}"
    )
    user_message = exc.errors()[0].get("msg", "Invalid input data") if exc.errors() else "Invalid input data"
    return _error_response(status.HTTP_400_BAD_REQUEST, user_message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.error(
        f"HTTP Exception: {exc.detail} | "
        f"Path: {request.url.path} | "
        f"Method: {request.method}"
    )
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(
        f"Server Exception: {exc!r} | "
        f"Path: {request.url.path} | "
        f"Method: {request.method}"
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@app.get("/health")
async def health():
    return StandardSuccessResponse(
        message="ok",
        data={"service": settings.APP_NAME, "version": settings.VERSION},
    )


# Include API routers
app.include_router(emergency.router, prefix="/api/emergency/sos", tags=["Emergency SOS"])
app.include_router(content_analysis.router, prefix="/api/ai/analyze", tags=["Content Analysis"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )
