from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
import uvicorn

from .api import districts, location, sync, admin
from .config import settings
from .database.connection import Database
from .helpers.synthetic_data import SyntheticDataGenerator
from .scheduler import start_scheduler, shutdown_scheduler
from .utils.errors import ApiError
from .utils.geocoder import NominatimClient

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def initialize_database(database: Database, seed: bool):
    """Create tables and seed reference + synthetic data. Never fatal."""
    logger.info("=" * 70)
    logger.info("🔍 MGNREGA TRACKER STARTUP")
    logger.info("=" * 70)

    try:
        database.ping()
        logger.info("✅ Database connection successful")
        database.create_schema()
    except Exception as e:
        logger.error(f"❌ Database verification failed: {e}")
        logger.warning("⚠️  Server starting anyway - Fix database issues")
        return

    if not seed:
        logger.info("⏭️  Seeding disabled (SEED_ON_STARTUP=false)")
        return

    try:
        result = SyntheticDataGenerator(database).initialize()
        logger.info(
            f"✅ Seed check complete: {result['districts_inserted']} districts, "
            f"{result['performance_inserted']} performance rows inserted"
        )
    except Exception as e:
        logger.error(f"❌ Error initializing database: {e}")

    logger.info("=" * 70)


def create_app(database: Database = None, geocoder=None,
               seed_on_startup: bool = None, enable_scheduler: bool = None) -> FastAPI:
    database = database or Database()
    geocoder = geocoder or NominatimClient()
    seed_on_startup = settings.SEED_ON_STARTUP if seed_on_startup is None else seed_on_startup
    enable_scheduler = settings.ENABLE_AUTO_SYNC if enable_scheduler is None else enable_scheduler

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.open()
        await run_in_threadpool(initialize_database, database, seed_on_startup)

        if enable_scheduler:
            try:
                start_scheduler(database)
            except Exception as e:
                logger.error(f"❌ Scheduler startup failed: {e}")
                logger.warning("⚠️  Server starting anyway - Scheduler disabled")

        yield

        logger.info("🛑 Shutting down application...")
        if enable_scheduler:
            try:
                shutdown_scheduler()
            except Exception as e:
                logger.error(f"❌ Scheduler shutdown error: {e}")
        if hasattr(geocoder, "close"):
            geocoder.close()
        database.close()

    app = FastAPI(title="MGNREGA District Tracker API", version="1.0", lifespan=lifespan)
    app.state.database = database
    app.state.geocoder = geocoder

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # Include Routers
    app.include_router(districts.router, prefix="/api", tags=["Districts"])
    app.include_router(location.router, prefix="/api", tags=["Location"])
    app.include_router(sync.router, prefix="/api", tags=["Sync"])
    app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])

    @app.get("/api/health")
    def health(request: Request):
        try:
            request.app.state.database.ping()
        except Exception as e:
            return JSONResponse(status_code=503, content={
                "status": "unhealthy",
                "database": "disconnected",
                "error": str(e)
            })
        return {
            "status": "healthy",
            "database": "connected",
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    @app.get("/")
    def root():
        return {"message": "MGNREGA District Tracker API Server Running"}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "backend.main_api:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.API_RELOAD
    )
