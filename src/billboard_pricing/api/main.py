import sys
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Add src to path for internal imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from billboard_pricing import __version__
from billboard_pricing.api import state
from billboard_pricing.api.pricing_api import router as pricing_router, sync_router
from billboard_pricing.api.zones_api import (
    router as zones_router,
    sizes_router,
    municipalities_router,
    packages_router,
)
from billboard_pricing.config.logging_config import configure_logging
from billboard_pricing.services.system import PricingSystem


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # Tests install their own system before the app starts
    try:
        state.get_system()
    except RuntimeError:
        state.set_system(await PricingSystem.load())
    yield


app = FastAPI(
    title="Billboard Pricing API",
    description="Pricing computation and pricing-zone synchronization for billboard rentals",
    version=__version__,
    lifespan=lifespan,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(zones_router)
app.include_router(sizes_router)
app.include_router(municipalities_router)
app.include_router(packages_router)
app.include_router(pricing_router)
app.include_router(sync_router)


@app.get("/")
async def root():
    return {"status": "online", "message": "Billboard Pricing API Active"}


@app.get("/system/status")
async def get_status():
    system = state.get_system()
    return {
        "engine_active": True,
        "zones_count": len(system.store.list_zones()),
        "sizes_count": len(system.store.list_sizes()),
        "municipalities_count": len(system.municipalities),
        "packages_count": len(system.packages),
        "last_sync_state": system.reconciler.state.value,
        "currency": system.currency,
    }
