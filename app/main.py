"""
Vibe Drinks - FastAPI Backend Application
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
import structlog

from app.config import settings
from app.database import SessionLocal
from app.api import auth, orders, delivery, addresses, motoboys, settings as store_settings
from app.realtime.broadcaster import Broadcaster

logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Vibe Drinks API", version="1.0.0")
    heartbeat = asyncio.create_task(app.state.broadcaster.run_heartbeat())

    yield

    heartbeat.cancel()
    try:
        await heartbeat
    except asyncio.CancelledError:
        pass
    app.state.broadcaster.close()
    logger.info("Shutting down Vibe Drinks API")


# Create FastAPI application
app = FastAPI(
    title="Vibe Drinks",
    description="Drinks delivery: order lifecycle, live order events and delivery pricing",
    version="1.0.0",
    lifespan=lifespan,
)

# One broadcaster per process, shared by every SSE connection
app.state.broadcaster = Broadcaster()

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Health check endpoints
@app.get("/health")
async def health():
    """Basic health check"""
    return {"status": "healthy", "service": "api", "version": "1.0.0"}


@app.get("/health/ready")
async def ready():
    """Readiness check with dependency verification"""
    checks = {}

    # Check database
    try:
        async with SessionLocal() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        checks["database"] = f"failed: {str(e)}"

    checks["sse_subscribers"] = app.state.broadcaster.subscriber_count

    return {
        "status": "ready" if checks["database"] == "ok" else "not_ready",
        "checks": checks,
    }


# Include API routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
app.include_router(delivery.router, prefix="/api/delivery", tags=["Delivery"])
app.include_router(addresses.router, prefix="/api/addresses", tags=["Addresses"])
app.include_router(motoboys.router, prefix="/api/motoboys", tags=["Motoboys"])
app.include_router(store_settings.router, prefix="/api/settings", tags=["Settings"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
