"""
Zone Admin Service - administrative edits that are persisted immediately.

Every mutation is applied to the in-memory system first and then the full
document is saved through the repository.
"""
import logging
from dataclasses import dataclass, field
from typing import Optional

from ..data.price_report import price_statistics
from ..engine.models import DurationPackage, Municipality, PriceTable, PriceView
from .system import PricingSystem

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Outcome of an accepted edit; warnings never block the edit."""
    valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class ZoneAdminService:
    """Service for managing zones, sizes, municipalities and packages."""

    def __init__(self, system: PricingSystem):
        self.system = system

    @property
    def store(self):
        return self.system.store

    # Zones

    def list_zones(self) -> list[dict]:
        return [
            {
                'name': zone,
                'multiplier': self.system.municipalities.multiplier_for(zone),
                'applied_multiplier': self.store.applied_multiplier(zone),
                'has_municipality': zone in self.system.municipalities,
            }
            for zone in self.store.sorted_zones()
        ]

    def get_zone(self, name: str) -> PriceTable:
        return self.store.get_zone(name)

    async def create_zone(self, name: str, template_zone: Optional[str] = None) -> PriceTable:
        """Manually add a zone, copied from a template and scaled by its multiplier."""
        name = str(name or '').strip()
        table = self.system.fabricator.build(name, template_zone)
        self.store.add_zone(table)
        await self.system.save()
        logger.info("Created zone %s", name)
        return self.store.get_zone(name)

    async def remove_zone(self, name: str) -> None:
        self.store.remove_zone(name)
        await self.system.save()

    async def set_price(self, zone: str, view: PriceView, size: str, value) -> ValidationResult:
        self.store.set_base_price(zone, view, size, value)
        result = ValidationResult(warnings=self.store.check_duration_monotonicity(zone))
        await self.system.save()
        return result

    # Sizes

    async def add_size(self, size: str) -> bool:
        added = self.store.add_size(size)
        if added:
            await self.system.save()
        return added

    async def remove_size(self, size: str) -> None:
        self.store.remove_size(size)
        await self.system.save()

    async def set_installation_price(self, size: str, value) -> None:
        self.store.set_installation_price(size, value)
        await self.system.save()

    # Municipalities

    async def add_municipality(self, municipality: Municipality) -> ValidationResult:
        check = self.system.municipalities.add(municipality)
        await self.system.save()
        return ValidationResult(warnings=list(check.warnings))

    async def update_municipality(self, name: str, updates: dict) -> ValidationResult:
        check = self.system.municipalities.update(name, updates)
        await self.system.save()
        return ValidationResult(warnings=list(check.warnings))

    async def remove_municipality(self, name: str) -> Municipality:
        removed = self.system.municipalities.remove(name)
        await self.system.save()
        return removed

    # Packages

    async def add_package(self, package: DurationPackage) -> ValidationResult:
        self.system.packages.add(package)
        result = ValidationResult(warnings=self.system.packages.check_monotonic())
        await self.system.save()
        return result

    async def remove_package(self, duration_value: int) -> DurationPackage:
        removed = self.system.packages.remove(duration_value)
        await self.system.save()
        return removed

    def get_stats(self) -> dict:
        return price_statistics(self.store, self.system.municipalities)
