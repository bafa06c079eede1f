"""
Zone Fabricator - synthesizes a complete price table for a new zone.

Template precedence:
1. Explicit template zone (if present in the store)
2. Configured default template zone (if present in the store)
3. Lexicographically first existing zone
4. Hard-coded baseline table over the current size set

Every price is then rescaled from the template's applied multiplier to the
new zone's multiplier and rounded.
"""
import logging
from typing import Optional

from ..data.defaults import (
    CATEGORY_FACTORS,
    DURATION_DISCOUNT_LADDER,
    TIER_FACTORS,
    baseline_price,
)
from .models import PriceTable
from .multipliers import MunicipalityRegistry
from .price_store import PriceTableStore
from .pricing_engine import round_price

logger = logging.getLogger(__name__)


class ZoneFabricator:
    """Creates price tables for zones that the store does not know yet."""

    def __init__(
        self,
        store: PriceTableStore,
        multipliers: MunicipalityRegistry,
        default_template: Optional[str] = None,
    ):
        self.store = store
        self.multipliers = multipliers
        self.default_template = default_template

    def choose_template(self, template_zone: Optional[str] = None) -> Optional[str]:
        """Pick the zone to copy from, or None when the baseline must be used."""
        if template_zone:
            if self.store.has_zone(template_zone):
                return template_zone
            logger.warning("Template zone %s not found, falling back", template_zone)
        if self.default_template and self.store.has_zone(self.default_template):
            return self.default_template
        zones = self.store.sorted_zones()
        return zones[0] if zones else None

    def build(self, new_zone: str, template_zone: Optional[str] = None) -> PriceTable:
        """Build (but do not store) the scaled table for `new_zone`."""
        multiplier = self.multipliers.multiplier_for(new_zone)
        template = self.choose_template(template_zone)

        if template is None:
            logger.info("No zone to copy for %s, using baseline prices", new_zone)
            source = self.baseline_table(new_zone)
        else:
            logger.info("Copying zone %s for %s (multiplier %s)", template, new_zone, multiplier)
            source = self.store.get_zone(template).copy(name=new_zone)

        return scale_table(source, multiplier)

    def fabricate(self, new_zone: str, template_zone: Optional[str] = None) -> PriceTable:
        """
        Create `new_zone` in the store and return its table.

        If the zone already exists the store is left untouched and the
        existing table is returned.
        """
        new_zone = str(new_zone or '').strip()
        if self.store.has_zone(new_zone):
            logger.info("Zone %s already priced, skipping fabrication", new_zone)
            return self.store.get_zone(new_zone)

        table = self.build(new_zone, template_zone)
        self.store.add_zone(table)
        return self.store.get_zone(new_zone)

    def baseline_table(self, name: str) -> PriceTable:
        """Unscaled baseline table covering the store's current sizes."""
        table = PriceTable(name=name)
        sizes = self.store.sorted_sizes()

        for category in self.store.categories:
            factor = CATEGORY_FACTORS.get(category, 1.0)
            table.category_prices[category] = {
                size: round_price(baseline_price(size) * factor) for size in sizes
            }

        for tier in self.store.tiers:
            tier_factor = TIER_FACTORS.get(tier, 1.0)
            table.tier_prices[tier] = {}
            for bucket in self.store.buckets:
                discount = DURATION_DISCOUNT_LADDER.get(bucket, 0.0)
                table.tier_prices[tier][bucket] = {
                    size: round_price(baseline_price(size) * tier_factor * (1 - discount))
                    for size in sizes
                }
        return table


def scale_table(table: PriceTable, multiplier: float) -> PriceTable:
    """
    Copy of `table` rescaled so that `multiplier` is baked into its prices.

    Any multiplier already applied to `table` is divided out first.
    """
    factor = multiplier / table.applied_multiplier
    scaled = table.copy()
    scaled.category_prices = {
        category: {size: round_price(price * factor) for size, price in prices.items()}
        for category, prices in table.category_prices.items()
    }
    scaled.tier_prices = {
        tier: {
            bucket: {size: round_price(price * factor) for size, price in prices.items()}
            for bucket, prices in buckets.items()
        }
        for tier, buckets in table.tier_prices.items()
    }
    scaled.applied_multiplier = multiplier
    return scaled
