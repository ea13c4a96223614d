import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.middleware.exceptions import register_exception_handlers
from app.routers import analytics, health, production_batches
from app.utils.cache import close_redis

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("mycofarm")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("MycoFarm API starting (environment=%s)", settings.environment)
    yield
    await close_redis()


app = FastAPI(
    title="MycoFarm",
    description="Mushroom production batch tracking",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware ───────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
app.include_router(health.router)
app.include_router(
    production_batches.router, prefix="/api/production-batches", tags=["production-batches"]
)
app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])
