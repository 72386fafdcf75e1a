"""
FastAPI app entry point
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .db import Base, SessionLocal, engine
from .scripts.menu_initial_data import create_default_menu
from .utils.broadcaster import ChangeBroadcaster
from .utils.exceptions import RestaurantError

# Import models so every table is registered on Base
from . import models  # noqa: F401

# Import routes
from .routes import (
    menu,
    orders,
    payments,
    realtime
)

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


def seed_menu():
    """Seed the demo menu only if the menu table is empty"""
    db = SessionLocal()
    try:
        created = create_default_menu(db)
        if created:
            logger.info(f"Seeded {created} demo menu item(s)")
        else:
            logger.info("Menu already has data, skipping seed")
    except Exception:
        logger.exception("Seed error")
        db.rollback()
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME} in {settings.ENVIRONMENT} mode...")
    logger.info(f"Database URL: {settings.database_url[:50]}...")
    logger.info("=" * 60)

    for warning in settings.validate_settings():
        logger.warning(warning)

    if settings.CREATE_TABLES_ON_STARTUP:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables created/verified")

    if settings.SEED_MENU:
        seed_menu()

    # One broadcaster per process, bound to the serving event loop
    app.state.broadcaster = ChangeBroadcaster()
    logger.info("Application ready!")

    yield

    # Shutdown
    logger.info(
        f"Shutting down with {app.state.broadcaster.connection_count} realtime client(s) connected")


app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    version=settings.APP_VERSION,
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
    lifespan=lifespan
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RestaurantError)
async def restaurant_error_handler(request: Request, exc: RestaurantError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.__class__.__name__}
    )


@app.get("/")
async def root():
    return {
        "status": "ok",
        "message": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "docs": "/docs",
        # Clients refetch /api/orders/active at this interval when realtime is down
        "pollIntervalSeconds": settings.ACTIVE_ORDERS_POLL_SECONDS
    }


@app.get("/health")
async def health_check(request: Request):
    broadcaster = request.app.state.broadcaster
    return {
        "status": "healthy",
        "message": f"{settings.APP_NAME} is running",
        "environment": settings.ENVIRONMENT,
        "realtime": {
            "connected_clients": broadcaster.connection_count
        }
    }


# Register routers
app.include_router(menu.router)
app.include_router(orders.router)
app.include_router(payments.router)
app.include_router(realtime.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("restaurant_api.main:app", host=settings.HOST, port=settings.PORT, reload=False)
