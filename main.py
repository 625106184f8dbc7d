import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

from dyeplan.api.v1.api import api_router
from dyeplan.core.catalog import load_catalog
from dyeplan.core.db.mongodb import close_mongo_connection, connect_to_mongo
from dyeplan.core.monitoring.prometheus_middleware import PrometheusMiddleware
from dyeplan.core.setting import config

APP_VERSION = "0.1.0"

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Catalog is read once; routes get it through dyeplan.api.deps.get_catalog
    app.state.catalog = load_catalog(config.CATALOG_FILE)
    await connect_to_mongo()
    logger.info(f"{config.PROJECT_NAME} {APP_VERSION} started ({config.ENVIRONMENT})")
    yield
    await close_mongo_connection()


app = FastAPI(
    title=config.PROJECT_NAME,
    version=APP_VERSION,
    openapi_url=f"{config.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.middleware("http")(PrometheusMiddleware())


@app.get("/metrics", include_in_schema=False)
async def metrics():
    """Scraped by Prometheus."""
    return Response(content=generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": config.PROJECT_NAME, "version": APP_VERSION}


app.include_router(api_router, prefix=config.API_V1_STR)


@app.get("/")
async def root():
    return {
        "message": "Dyeing Production Planning API",
        "docs": "/redoc",
        "metrics": "/metrics",
        "health": "/health",
    }
