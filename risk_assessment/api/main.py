"""FastAPI application factory"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from risk_assessment.api.middleware import RequestIDMiddleware, MetricsMiddleware
from risk_assessment.api.v1 import assessments, events
from risk_assessment.container import ServiceContainer, build_container
from risk_assessment.infrastructure.observability.logging import setup_logging
from risk_assessment.config import settings

# Setup structured logging
setup_logging(settings.log_level, settings.service_name)


def create_app(container: ServiceContainer | None = None) -> FastAPI:
    """Create and configure FastAPI application"""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.container = container or build_container(settings)
        try:
            yield
        finally:
            await app.state.container.aclose()

    app = FastAPI(
        title="Risk Assessment Service",
        description="Resilient credit risk scoring and decisioning",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        breaker = app.state.container.credit_bureau.breaker
        return {
            "status": "ok",
            "service": settings.service_name,
            "central_bank_circuit": breaker.state.value,
        }

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(assessments.router, prefix="/v1", tags=["assessments"])
    app.include_router(events.router, prefix="/v1", tags=["events"])

    return app


app = create_app()
