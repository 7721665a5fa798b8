"""
FastAPI Application Entry Point

Integrates:
  - LINE webhook receiver
  - Slack RTM session (when SLACK_RTM_ENABLED=true)
  - Health checks
  - Middleware for logging & error handling

Run: uvicorn main:app --host 0.0.0.0 --port 8000
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from infra.bootstrap import GatewayBootstrap
from infra.config import GatewayConfig, get_config
from transport.line.webhook import router as line_router

# Setup logging
logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(
    config: Optional[GatewayConfig] = None,
    gateway: Optional[GatewayBootstrap] = None,
) -> FastAPI:
    """
    Build the application.

    Config is loaded and validated at startup, not at import, so a missing
    setting stops the process before it accepts traffic.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan: startup and shutdown handlers.
        """
        # Startup
        current = gateway
        if current is None:
            settings = config or get_config()
            settings.validate()
            current = GatewayBootstrap(settings)

        logging.getLogger().setLevel(current.config.log_level)

        logger.info("=" * 60)
        logger.info("Chat gateway starting up...")
        logger.info(f"Handlers: {len(current.registry)}")
        logger.info(f"Executor workers: {current.config.executor_workers}")
        logger.info(f"Slack RTM: {'enabled' if current.rtm_session else 'disabled'}")
        logger.info("=" * 60)

        await current.start()
        app.state.gateway = current

        yield

        # Shutdown
        logger.info("Chat gateway shutting down...")
        await current.stop()

    app = FastAPI(
        title="Chat Gateway",
        description="Multi-platform chat-bot gateway",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Middleware for logging
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests."""
        logger.debug(f"{request.method} {request.url.path}")
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            logger.error(f"Request error: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error"},
            )

    # Include routers
    app.include_router(line_router)

    # Health check endpoints
    @app.get("/health/live")
    async def health_live():
        """Live health check (Kubernetes liveness probe)."""
        return {"status": "alive"}

    @app.get("/health/ready")
    async def health_ready(request: Request):
        """Readiness health check (Kubernetes readiness probe)."""
        current = getattr(request.app.state, "gateway", None)
        if current is None or not current.executor.running:
            return JSONResponse(
                status_code=503,
                content={"status": "not_ready", "reason": "executor not running"},
            )

        rtm_state = current.rtm_session.state.value if current.rtm_session else "disabled"
        return {
            "status": "ready",
            "pending_events": current.executor.pending,
            "rtm": rtm_state,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_config()

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.environment == "development",
    )
