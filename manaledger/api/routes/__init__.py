from manaledger.api.routes.cards import router as cards_router
from manaledger.api.routes.health import router as health_router
from manaledger.api.routes.stats import router as stats_router
from manaledger.api.routes.sync import router as sync_router

__all__ = ["cards_router", "health_router", "stats_router", "sync_router"]
