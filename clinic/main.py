from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
import time
import logging

from .api.v1.appointments import router as appointments_router
from .api.v1.auth import router as auth_router
from .api.v1.diagnoses import router as diagnoses_router
from .core.config import Settings, get_settings
from .core.database import init_db

API_PREFIX = "/api/v1"

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(settings: Settings) -> FastAPI:
    """Build the application; middleware depends on the loaded settings."""
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.VERSION,
        description="Clinic workflow: accounts, appointment scheduling and diagnoses",
        openapi_url=f"{API_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if not settings.TESTING:
        application.add_middleware(
            TrustedHostMiddleware,
            allowed_hosts=["localhost", "127.0.0.1", "*.localhost", "testserver"]
        )

    application.include_router(auth_router, prefix=API_PREFIX)
    application.include_router(appointments_router, prefix=API_PREFIX)
    application.include_router(diagnoses_router, prefix=API_PREFIX)
    return application


# Fails fast when JWT_SECRET is not configured
app = create_app(get_settings())


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed:.4f}s)")
    return response


@app.exception_handler(404)
async def not_found_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=404,
        content={
            "error": "Not Found",
            "detail": getattr(exc, "detail", "The requested resource was not found"),
            "path": str(request.url.path)
        }
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    # Store and signing failures end up here; the client gets no detail
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "message": "An unexpected error occurred"
        }
    )


@app.on_event("startup")
async def startup_event():
    settings = get_settings()
    backend = settings.DATABASE_URL.split(":", 1)[0]
    logger.info(f"Starting {settings.APP_NAME} ({settings.APP_ENV}) on {settings.BIND_ADDR}, database: {backend}")

    try:
        init_db()
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    logger.info("Application startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down")


@app.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    return {
        "status": "healthy",
        "timestamp": time.time(),
        "version": settings.VERSION,
        "environment": settings.APP_ENV
    }


@app.get("/")
async def root(settings: Settings = Depends(get_settings)):
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.VERSION,
        "docs": "/docs",
        "health": "/health"
    }


@app.get(f"{API_PREFIX}/info")
async def api_info(settings: Settings = Depends(get_settings)):
    """Route groups exposed by this service."""
    return {
        "name": settings.APP_NAME,
        "version": settings.VERSION,
        "environment": settings.APP_ENV,
        "endpoints": {
            "users": f"{API_PREFIX}/users",
            "appointments": f"{API_PREFIX}/appointments",
            "diagnoses": f"{API_PREFIX}/diagnoses",
            "openapi": f"{API_PREFIX}/openapi.json"
        }
    }


def run():
    import uvicorn

    settings = get_settings()
    host, port = settings.bind_host_port
    uvicorn.run(
        "clinic.main:app",
        host=host,
        port=port,
        reload=settings.DEBUG,
        log_level="info"
    )


if __name__ == "__main__":
    run()
