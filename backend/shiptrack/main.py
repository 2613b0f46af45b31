from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from shiptrack.core.config import settings
from shiptrack.core.logging import configure_logging, logger
from shiptrack.api.router import api_router
from shiptrack.db.session import engine
from shiptrack.db.base import Base
from shiptrack.services.seed import seed_demo
import shiptrack.db.models  # noqa: F401


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # schema comes from alembic outside dev
    if settings.ENV == "dev":
        Base.metadata.create_all(bind=engine)
        if settings.SEED_DEMO:
            seed_demo()
    yield

def create_app() -> FastAPI:
    configure_logging(settings.ENV, settings.LOG_LEVEL)
    app = FastAPI(title="Shipment Tracker", version="0.1.0", lifespan=lifespan)

    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    app.include_router(api_router)
    logger.info("app_started", env=settings.ENV)
    return app

app = create_app()
