"""
Zones API - FastAPI routers for zone, size, municipality and package management.
"""
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from ..engine.errors import PricingError
from ..engine.models import CategoryView, DurationPackage, Municipality, TierDurationView
from ..services.zone_service import ZoneAdminService
from .errors import to_http_error
from .state import get_system

router = APIRouter(prefix="/api/zones", tags=["zones"])
sizes_router = APIRouter(prefix="/api/sizes", tags=["sizes"])
municipalities_router = APIRouter(prefix="/api/municipalities", tags=["municipalities"])
packages_router = APIRouter(prefix="/api/packages", tags=["packages"])


def _service() -> ZoneAdminService:
    return ZoneAdminService(get_system())


# Pydantic models for API
class ZoneCreate(BaseModel):
    """Request model for manually adding a zone."""
    name: str
    template_zone: Optional[str] = None


class PriceUpdate(BaseModel):
    """Request model for setting one stored price."""
    view: str  # "category" or "tier"
    key: str  # category name or tier letter
    size: str
    price: float
    bucket: Optional[int] = None


class SizeCreate(BaseModel):
    size: str


class InstallationUpdate(BaseModel):
    price: float


class MunicipalityCreate(BaseModel):
    name: str
    multiplier: float = 1.0
    region: Optional[str] = None
    city: Optional[str] = None


class MunicipalityUpdate(BaseModel):
    name: Optional[str] = None
    multiplier: Optional[float] = None
    region: Optional[str] = None
    city: Optional[str] = None


class PackageCreate(BaseModel):
    duration_value: int
    unit_label: str
    discount_percent: float = 0.0


class ValidationResponse(BaseModel):
    """Response model for validation."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def _price_view(update: PriceUpdate):
    if update.view == 'category':
        return CategoryView(update.key)
    if update.view == 'tier':
        if update.bucket is None:
            raise HTTPException(status_code=400, detail="bucket is required for tier prices")
        return TierDurationView(update.key, update.bucket)
    raise HTTPException(status_code=400, detail=f"Unknown view '{update.view}'")


# Zones

@router.get("")
async def list_zones():
    """List all priced zones with their multipliers."""
    return _service().list_zones()


@router.get("/{name}")
async def get_zone(name: str):
    try:
        return _service().get_zone(name).to_dict()
    except PricingError as e:
        raise to_http_error(e)


@router.post("")
async def create_zone(zone_data: ZoneCreate):
    """Add a zone copied from a template (or the baseline) and scaled by its multiplier."""
    try:
        table = await _service().create_zone(zone_data.name, zone_data.template_zone)
        return table.to_dict()
    except PricingError as e:
        raise to_http_error(e)


@router.delete("/{name}")
async def delete_zone(name: str):
    try:
        await _service().remove_zone(name)
        return {"deleted": name}
    except PricingError as e:
        raise to_http_error(e)


@router.put("/{name}/prices", response_model=ValidationResponse)
async def set_price(name: str, update: PriceUpdate):
    """Set one stored price; duration monotonicity issues come back as warnings."""
    view = _price_view(update)
    try:
        result = await _service().set_price(name, view, update.size, update.price)
        return ValidationResponse(**asdict(result))
    except PricingError as e:
        raise to_http_error(e)


# Sizes

@sizes_router.get("")
async def list_sizes():
    store = get_system().store
    return [
        {"size": size, "installation_price": store.get_installation_price(size)}
        for size in store.sorted_sizes()
    ]


@sizes_router.post("")
async def add_size(size_data: SizeCreate):
    try:
        added = await _service().add_size(size_data.size)
        return {"size": size_data.size.strip(), "added": added}
    except PricingError as e:
        raise to_http_error(e)


@sizes_router.delete("/{size}")
async def delete_size(size: str):
    try:
        await _service().remove_size(size)
        return {"deleted": size}
    except PricingError as e:
        raise to_http_error(e)


@sizes_router.put("/{size}/installation")
async def set_installation_price(size: str, update: InstallationUpdate):
    try:
        await _service().set_installation_price(size, update.price)
        return {"size": size, "installation_price": get_system().store.get_installation_price(size)}
    except PricingError as e:
        raise to_http_error(e)


# Municipalities

@municipalities_router.get("")
async def list_municipalities(search: Optional[str] = None):
    registry = get_system().municipalities
    found = registry.search(search) if search else registry.all()
    return [m.to_dict() for m in found]


@municipalities_router.post("", response_model=ValidationResponse)
async def add_municipality(data: MunicipalityCreate):
    try:
        result = await _service().add_municipality(Municipality(**data.model_dump()))
        return ValidationResponse(**asdict(result))
    except PricingError as e:
        raise to_http_error(e)


@municipalities_router.put("/{name}", response_model=ValidationResponse)
async def update_municipality(name: str, updates: MunicipalityUpdate):
    # Only apply fields that were actually sent
    update_dict = updates.model_dump(exclude_unset=True)
    try:
        result = await _service().update_municipality(name, update_dict)
        return ValidationResponse(**asdict(result))
    except PricingError as e:
        raise to_http_error(e)


@municipalities_router.delete("/{name}")
async def delete_municipality(name: str):
    try:
        removed = await _service().remove_municipality(name)
        return {"deleted": removed.name}
    except PricingError as e:
        raise to_http_error(e)


# Packages

@packages_router.get("")
async def list_packages():
    return get_system().packages.to_document()


@packages_router.post("", response_model=ValidationResponse)
async def add_package(data: PackageCreate):
    try:
        result = await _service().add_package(DurationPackage(**data.model_dump()))
        return ValidationResponse(**asdict(result))
    except PricingError as e:
        raise to_http_error(e)


@packages_router.delete("/{duration_value}")
async def delete_package(duration_value: int):
    try:
        removed = await _service().remove_package(duration_value)
        return {"deleted": removed.duration_value}
    except PricingError as e:
        raise to_http_error(e)
