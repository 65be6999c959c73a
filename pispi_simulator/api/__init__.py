"""
PI-SPI Participant Simulator API Application Factory
"""

from datetime import datetime, timezone
from typing import Optional
import time
import uuid

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .comptes import router as comptes_router
from .dependencies import Simulator
from .oauth import router as oauth_router
from .problems import register_problem_handlers
from .webhooks import router as webhooks_router
from ..config import SimulatorConfig, get_config
from ..logging_config import correlation_id_var, get_logger, log_action, setup_logging


def create_app(config: Optional[SimulatorConfig] = None,
               simulator: Optional[Simulator] = None) -> FastAPI:
    """Create and configure the FastAPI application"""
    config = config or get_config()
    setup_logging(config.log_level, config.log_format, config.log_file)
    logger = get_logger("pispi.api")

    app = FastAPI(
        title="PI-SPI Participant Simulator",
        description="Conformance simulator for the PI-SPI participant account API",
        version=config.version,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.config = config
    app.state.simulator = simulator or Simulator(config)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Access log with a correlation id echoed as X-Request-ID"""
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        token = correlation_id_var.set(request_id)
        started = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.reset(token)
        response.headers["X-Request-ID"] = request_id
        log_action(
            logger, "info", f"{request.method} {request.url.path} {response.status_code}",
            action="http_request", correlation_id=request_id,
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            }
        )
        return response

    register_problem_handlers(app)

    app.include_router(oauth_router, prefix="/oauth", tags=["OAuth2"])
    app.include_router(comptes_router, prefix="/comptes", tags=["Comptes"])
    app.include_router(webhooks_router, prefix="/webhooks", tags=["Webhooks"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": config.version,
            "scenario": config.scenario
        }

    return app


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    uvicorn.run(
        "pispi_simulator.api:create_app",
        factory=True,
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug,
        log_level=config.log_level.lower()
    )
