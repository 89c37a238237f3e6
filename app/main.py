import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.database import create_tables, engine
from app.dependencies import close_triage_client
from app.routers.reports import router as reports_router
from app.routers.stats import router as stats_router
from app.routers.triage import router as triage_router
from app.utils.exceptions import register_exception_handlers

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "street-rescue-api"
SERVICE_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    logger.info("Database ready, triage model=%s", settings.openai_model)
    yield
    await close_triage_client()
    await engine.dispose()


app = FastAPI(
    title="Street Rescue API",
    description="Triage and reporting backend for street animals in distress",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(reports_router, prefix="/api")
app.include_router(stats_router, prefix="/api")
app.include_router(triage_router, prefix="/api")


@app.get("/health")
async def health_check():
    return {"status": "success", "data": {"service": SERVICE_NAME, "version": SERVICE_VERSION}, "message": None}
