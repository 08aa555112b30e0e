"""
POS Aggregator: FastAPI application entry point.

Serves normalized menus, business hours and order history for the shop
directory, and runs the periodic order status sync.
"""
import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pos_aggregator.utils.config import settings
from pos_aggregator.utils.structured_logging import configure_logging
from pos_aggregator.routers import health, orders, shops
from pos_aggregator.scheduler.cron_tasks import (
    configure_scheduler,
    start_scheduler,
    shutdown_scheduler,
)
from pos_aggregator.services.business_hours_service import business_hours_service
from pos_aggregator.services.cache_service import cache_service
from pos_aggregator.services.shop_service import shop_service

logger = logging.getLogger(__name__)


# -------------------------------------------------
# Lifespan
# -------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifecycle.
    Startup work runs in the background; /health returns 503 until it is done.
    """
    configure_logging()

    app.state.is_ready = False
    logger.info(f"Starting {settings.APP_NAME}")

    async def background_startup():
        # -------------------------
        # Shop directory + hours warm-up
        # -------------------------
        shops = shop_service.list_shops()
        try:
            await business_hours_service.fetch_many(shops)
            logger.info(f"✅ Business hours warmed for {len(shops)} shops")
        except Exception as e:
            logger.warning(f"Business hours warm-up failed: {e}")

        # -------------------------
        # Scheduler
        # -------------------------
        try:
            configure_scheduler()
            start_scheduler()
            logger.info("✅ Scheduler started")
        except Exception as e:
            logger.warning(f"Scheduler failed: {e}")

        app.state.is_ready = True
        logger.info("✨ Application is READY to accept traffic")

    startup_task = asyncio.create_task(background_startup())

    yield

    # -------------------------------------------------
    # Shutdown
    # -------------------------------------------------
    logger.info("Shutting down application")
    startup_task.cancel()
    shutdown_scheduler()
    await cache_service.close()
    logger.info(f"Shut down {settings.APP_NAME}")


# -------------------------------------------------
# FastAPI App
# -------------------------------------------------

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, tags=["Health"])
app.include_router(shops.router, prefix="/api", tags=["Shops"])
app.include_router(orders.router, prefix="/api", tags=["Orders"])


@app.get("/", tags=["Root"])
async def root():
    return {
        "message": f"{settings.APP_NAME} v{settings.APP_VERSION} is running",
        "docs": "/docs",
    }
