import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from prometheus_client import make_asgi_app
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.v1.endpoints import articles, image, translate, weather
from core.config import settings
from core.exceptions import RequestValidationFailed, TranslatorServiceError
from core.logging_utils import setup_logging
from models.responses import HealthResponse
from services.factory import build_services

setup_logging(settings.LOG_LEVEL)

# Prometheus metrics endpoint
metrics_app = make_asgi_app()


# ------------------------------------------------------------------
# FastAPI App Lifecycle
# ------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        logger.info("Initializing application...")

        services = build_services(settings)
        app.state.services = services
        app.state.translation_client = services.translation_client
        app.state.fetcher = services.fetcher
        app.state.orchestrator = services.orchestrator
        app.state.weather = services.weather
        app.state.dictionary = services.dictionary

        yield

        logger.info("Shutting down application...")
        await services.aclose()

    except Exception as e:
        logger.exception(f"Application lifecycle error: {str(e)}")
        raise


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="EN⇄RU web page translator API",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=settings.ALLOWED_HOSTS,
)

app.include_router(translate.router, prefix="/api", tags=["translate"])
app.include_router(weather.router, prefix="/api", tags=["weather"])
app.include_router(articles.router, prefix="/api", tags=["articles"])
app.include_router(image.router, prefix="/api", tags=["image"])


@app.middleware("http")
async def add_timing_header(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    process_time = time.perf_counter() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=RequestValidationFailed(errors=exc.errors()).to_dict(),
    )


@app.exception_handler(TranslatorServiceError)
async def translator_exception_handler(request: Request, exc: TranslatorServiceError):
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": "Endpoint не найден"},
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail)},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Внутренняя ошибка сервера"},
    )


app.mount("/metrics", metrics_app)


@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(timestamp=datetime.now(timezone.utc).isoformat())


@app.get("/")
async def root():
    return {
        "name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "description": "EN⇄RU web page translator API",
        "docs_url": "/docs",
        "health_check": "/api/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=settings.WORKERS,
        log_level=settings.LOG_LEVEL.lower(),
    )
