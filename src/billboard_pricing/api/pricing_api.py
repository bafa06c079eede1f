"""
Pricing API - price lookups, quotes, statistics and zone synchronization.
"""
from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

from ..engine.errors import PricingError
from ..engine.models import BillboardRecord, CategorySelection, CustomerInfo, TierSelection
from ..services.zone_service import ZoneAdminService
from .errors import to_http_error
from .state import get_system

router = APIRouter(prefix="/api/pricing", tags=["pricing"])
sync_router = APIRouter(prefix="/api/sync", tags=["sync"])


class BillboardIn(BaseModel):
    billboard_id: str
    size: str
    municipality: str
    name: str = ''
    city: Optional[str] = None
    area: Optional[str] = None
    level: Optional[str] = None
    price_tier: Optional[str] = None


class CustomerIn(BaseModel):
    name: str = ''
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None


class QuoteRequest(BaseModel):
    """Billboards may be sent inline or referenced by id from the inventory."""
    mode: str = "category"  # "category" or "tier"
    category: str = "individual"
    default_tier: str = "A"  # tier mode, for billboards without a tier
    duration: int = 1
    billboards: list[BillboardIn] = []
    billboard_ids: list[str] = []
    customer: Optional[CustomerIn] = None
    include_installation: bool = False


@router.get("/price")
async def get_price(
    size: str,
    zone: str,
    category: Optional[str] = None,
    tier: Optional[str] = None,
    duration: int = 1,
):
    """Derive a single price with its resolution trace."""
    engine = get_system().engine
    if tier:
        derived = engine.resolve_tier(size, zone, tier, duration)
    else:
        derived = engine.resolve_category(size, zone, category or "individual")
    return jsonable_encoder(derived)


async def _collect_billboards(req: QuoteRequest) -> list[BillboardRecord]:
    billboards = [BillboardRecord(**b.model_dump()) for b in req.billboards]
    if req.billboard_ids:
        wanted = set(req.billboard_ids)
        inventory = await get_system().feed.fetch()
        found = [b for b in inventory if b.billboard_id in wanted]
        missing = wanted - {b.billboard_id for b in found}
        if missing:
            raise HTTPException(
                status_code=404,
                detail=f"Billboard(s) not in inventory: {', '.join(sorted(missing))}",
            )
        billboards.extend(found)
    return billboards


@router.post("/quote")
async def create_quote(req: QuoteRequest):
    if req.mode == "category":
        selection = CategorySelection(req.category)
    elif req.mode == "tier":
        selection = TierSelection(req.default_tier)
    else:
        raise HTTPException(status_code=400, detail=f"Unknown pricing mode '{req.mode}'")

    system = get_system()
    try:
        billboards = await _collect_billboards(req)
        package = system.package_for(req.duration)
        customer = CustomerInfo(**req.customer.model_dump()) if req.customer else None
        quote = system.assembler.assemble(
            billboards, selection, package,
            customer=customer, include_installation=req.include_installation,
        )
        return quote.to_dict()
    except PricingError as e:
        raise to_http_error(e)


@router.get("/statistics")
async def get_statistics():
    return ZoneAdminService(get_system()).get_stats()


@sync_router.get("/analyze")
async def analyze_zones():
    """Dry run: which inventory municipalities still lack a price table."""
    try:
        report = await get_system().reconciler.analyze()
    except PricingError as e:
        raise to_http_error(e)
    data = report.to_dict()
    data['needs_sync'] = report.needs_sync
    return data


@sync_router.post("/run")
async def run_sync():
    try:
        report = await get_system().reconciler.run()
    except PricingError as e:
        raise to_http_error(e)
    return report.to_dict()


@sync_router.post("/sizes")
async def sync_sizes():
    try:
        report = await get_system().reconciler.sync_sizes()
    except PricingError as e:
        raise to_http_error(e)
    return report.to_dict()
