from pathlib import Path
from contextlib import asynccontextmanager

from alembic import command
from alembic.config import Config
from fastapi import FastAPI

from manaledger.api.routes import cards_router, health_router, stats_router, sync_router
from manaledger.core.config import settings
from manaledger.core.logging import get_logger


log = get_logger("manaledger")


def run_migrations() -> None:
    """Execute Alembic migrations programmatically on startup."""
    project_root = Path(__file__).resolve().parent.parent
    alembic_cfg = Config(str(project_root / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(project_root / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL or "")
    log.info("Running Alembic migrations to head")
    command.upgrade(alembic_cfg, "head")
    log.info("Alembic migrations applied")


@asynccontextmanager
async def lifespan(app: FastAPI):
    log.info(f"Starting application in {settings.ENV.upper()} mode")
    if settings.is_production:
        log.info("Production mode: Debug disabled, docs disabled, stricter logging")
    else:
        log.info("Development mode: Debug enabled, docs available")

    if settings.RUN_MIGRATIONS_ON_STARTUP:
        if not settings.DATABASE_URL:
            log.warning("DATABASE_URL is not set; skipping migrations (store access will fail)")
        else:
            try:
                run_migrations()
            except Exception:
                log.exception("Failed to apply migrations on startup")
                raise

    yield

    log.info("Application shutdown complete")


app = FastAPI(
    title="ManaLedger Card Sync",
    description="Scryfall + CardMarket card catalog import and lookup",
    version="1.0.0",
    lifespan=lifespan,
    # Disable docs in production
    docs_url="/docs" if settings.docs_enabled else None,
    redoc_url="/redoc" if settings.docs_enabled else None,
    openapi_url="/openapi.json" if settings.docs_enabled else None,
    debug=settings.debug_enabled,
)


app.include_router(sync_router)
app.include_router(cards_router)
app.include_router(health_router)
app.include_router(stats_router)
