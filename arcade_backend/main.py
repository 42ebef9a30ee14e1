import os
import uuid
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from arcade_backend import __version__
from arcade_backend.config import feature_flags, settings
from arcade_backend.config.settings import ENV_FILE
from arcade_backend.dependencies import build_services
from arcade_backend.errors import ErrorCode, APIError, InvalidInputError, get_error_summary
from arcade_backend.routes import cron, profile, scores, tournament
from arcade_backend.security.rate_limit import limiter
from arcade_backend.tasks.reconcile import start_reconcile_task

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application...")
    logger.info(f"Loaded .env from: {ENV_FILE}")
    logger.info(f"Feature flags: {feature_flags.get_all_flags()}")

    if settings.SCORE_STORE_BACKEND == "sql":
        from arcade_backend.database import init_db
        try:
            await init_db()
            logger.info("Database connected successfully")
        except Exception as e:
            logger.error(f"Failed to connect to database: {str(e)}")
            raise

    services = build_services(settings, feature_flags)
    app.state.services = services

    reconcile_task = None
    if feature_flags.FEATURE_BACKGROUND_RECONCILER:
        reconcile_task = start_reconcile_task(services.reconciler, settings.RECONCILE_INTERVAL_SECONDS)

    yield

    logger.info("Shutting down application...")
    if reconcile_task is not None:
        reconcile_task.cancel()
        try:
            await reconcile_task
        except asyncio.CancelledError:
            pass

    await services.score_store.close()
    if settings.SCORE_STORE_BACKEND == "sql":
        from arcade_backend.database import close_db
        try:
            await close_db()
            logger.info("Database connection closed")
        except Exception as e:
            logger.error(f"Error closing database connection: {str(e)}")


app = FastAPI(
    title="Arcade Tournament API",
    description="Score ingestion, leaderboards and ledger-backed daily tournaments",
    version=__version__,
    docs_url="/docs" if settings.is_development() else None,
    redoc_url="/redoc" if settings.is_development() else None,
    lifespan=lifespan
)

# Attach rate limiter to the app
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "OPTIONS"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")

    error_details = []
    for error in exc.errors():
        error_dict = {
            "loc": error.get("loc"),
            "msg": error.get("msg"),
            "type": error.get("type")
        }
        error_details.append(error_dict)

    # Malformed score reports are INVALID_INPUT (400), not a schema 422
    if request.method == "POST" and request.url.path == "/api/scores":
        return InvalidInputError("Malformed score submission", details={"errors": error_details}).to_response()

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "error": "Validation Error",
            "code": ErrorCode.VALIDATION_ERROR,
            "details": error_details
        }
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    logger.warning(f"HTTP exception on {request.url.path}: {exc.detail}")

    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.detail
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": "Error",
            "message": str(exc.detail),
            "code": ErrorCode.INTERNAL_ERROR if exc.status_code >= 500 else ErrorCode.INVALID_INPUT
        }
    )


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    logger.warning(f"API error on {request.url.path}: {exc.code} - {exc.message}")
    return exc.to_response()


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    log_id = str(uuid.uuid4())[:8]
    logger.error(f"[{log_id}] Unhandled exception on {request.url.path}: {type(exc).__name__}: {str(exc)}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "Internal Error",
            "message": "An unexpected error occurred. Please try again later.",
            "code": ErrorCode.INTERNAL_ERROR,
            "details": {"log_id": log_id}
        }
    )


@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "score_store": settings.SCORE_STORE_BACKEND,
        "ledger_writes_configured": settings.manager_private_key() is not None,
        "cron_configured": bool(settings.CRON_SECRET),
        "version": __version__
    }


@app.get("/api/errors/health", tags=["Health"])
async def error_handling_health():
    return get_error_summary()


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": "Arcade Tournament API",
        "version": __version__,
        "docs": "/docs" if settings.is_development() else None
    }


app.include_router(scores.router)
app.include_router(tournament.router)
app.include_router(cron.router)
app.include_router(profile.router)


if __name__ == "__main__":
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", 8000))
    reload = settings.is_development()

    logger.info(f"Starting server on {host}:{port}")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    uvicorn.run(
        "arcade_backend.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info"
    )
