import os
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .config import settings
from .db import Base, engine
from .errors import SolarHubError
from .logging import setup_logging, RequestIdMiddleware
from .routes.clients import router as clients_router
from .routes.projects import router as projects_router
from .routes.pipeline import router as pipeline_router
from .routes.production import router as production_router
from .routes.alerts import router as alerts_router
from .routes.dashboard import router as dashboard_router

logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title=settings.app_name)

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    @app.exception_handler(SolarHubError)
    async def _domain_error(request: Request, exc: SolarHubError):
        logger.info("domain_error", error=type(exc).__name__, detail=str(exc), path=request.url.path)
        return JSONResponse(status_code=exc.status_code, content={"detail": str(exc), "error": type(exc).__name__})

    # Routers
    app.include_router(clients_router)
    app.include_router(projects_router)
    app.include_router(pipeline_router)
    app.include_router(production_router)
    app.include_router(alerts_router)
    app.include_router(dashboard_router)

    # Metrics
    Instrumentator().instrument(app).expose(app)

    @app.on_event("startup")
    def _startup():
        logger.info("startup", environment=settings.environment)
        # Ensure local SQLite directory exists
        if settings.database_url.startswith("sqlite:///./"):
            os.makedirs("var", exist_ok=True)
        if settings.auto_create_db:
            Base.metadata.create_all(bind=engine)
            logger.info("tables_verified", tables=len(Base.metadata.tables))

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    return app


app = create_app()
