# blogcore/main.py
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blogcore.config import settings
from blogcore.db.session import create_db_and_tables, dispose_engine
from blogcore.errors import register_exception_handlers
from blogcore.api.analytics.engine import AnalyticsEngine
from blogcore.api.analytics.router import router as analytics_router
from blogcore.api.articles.router import router as articles_router
from blogcore.api.categories.cache import CategoryCache
from blogcore.api.categories.router import router as categories_router
from blogcore.api.health.router import router as health_router  # /api/health

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------
# Lifespan: schema on boot, in-process state, retention sweeper
# ---------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.SKIP_DB_INIT:
        logger.info("Creating database and tables...")
        await create_db_and_tables()
        logger.info("Database tables created successfully")
    else:
        logger.info("SKIP_DB_INIT set, skipping database initialisation")

    app.state.category_cache = CategoryCache(settings.CATEGORY_CACHE_TTL_SECONDS)
    app.state.analytics = AnalyticsEngine.from_settings(settings)
    sweeper = asyncio.create_task(
        app.state.analytics.run_sweeper(settings.ANALYTICS_SWEEP_INTERVAL_SECONDS)
    )

    yield

    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper
    logger.info("Disposing database engine...")
    await dispose_engine()
    logger.info("Database engine disposed")


# ---------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------
app = FastAPI(
    title="Blog Content Server",
    description="Bilingual articles, categories and reader analytics on FastAPI + SQLModel",
    version="1.0.0",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------
# CORS: local dev origins plus FRONTEND_URL when deployed
# ---------------------------------------------------------------------
allow_origins = {
    "http://localhost:3000",
    "http://127.0.0.1:3000",
}
if settings.FRONTEND_URL:
    allow_origins.add(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(allow_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# ---------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------
app.include_router(articles_router, prefix="/api")
app.include_router(categories_router, prefix="/api")
app.include_router(analytics_router, prefix="/api")
app.include_router(health_router, prefix="/api/health", tags=["health"])


# platform health check
@app.get("/health")
async def health():
    return {"ok": True}


@app.get("/")
async def root():
    return {
        "message": "Blog Content API",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc",
    }
