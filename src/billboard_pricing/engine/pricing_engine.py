"""
Price Derivation Engine - resolves final prices from the store and multipliers.

Resolution order for every lookup:
1. Read the stored base price for (zone, view, size)
2. Scale by the zone's current multiplier (divided by any multiplier already
   baked into a fabricated table)
3. Round half-up to whole currency units

Missing zones, sizes or entries never raise; they resolve to 0.
"""
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from .models import (
    DURATION_BUCKETS,
    CategoryView,
    DerivedPrice,
    PriceView,
    TierDurationView,
    TraceStep,
)
from .multipliers import MunicipalityRegistry
from .price_store import PriceTableStore

logger = logging.getLogger(__name__)

DAYS_PER_MONTH = 30


def round_price(value: float) -> int:
    """Round to the nearest whole currency unit, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def round_amount(value: float) -> float:
    """Round a money amount to two decimals, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))


def duration_months(duration_value, buckets: tuple = DURATION_BUCKETS):
    """
    Convert a raw duration into months.

    Values up to the largest bucket are already months; larger values are
    days (365 → 12, 180 → 6, 90 → 3), never less than one month.
    """
    value = float(duration_value)
    if value > max(buckets):
        return max(1, round(value / DAYS_PER_MONTH))
    return int(value) if value.is_integer() else value


def duration_bucket(duration_value, buckets: tuple = DURATION_BUCKETS) -> int:
    """
    Map a raw duration onto a defined bucket.

    The duration goes through duration_months() first. The result is the
    largest bucket that does not exceed it, so a customer is never given a
    longer-term discount than they committed to. Unmappable values fall back
    to the first bucket.
    """
    ordered = sorted(buckets)
    try:
        value = float(duration_value)
    except (TypeError, ValueError):
        return ordered[0]
    if value != value or value <= 0:
        return ordered[0]

    months = duration_months(value, ordered)

    chosen = ordered[0]
    for bucket in ordered:
        if bucket <= months:
            chosen = bucket
    return chosen


class PriceDerivationEngine:
    """
    Derives final prices. Pure with respect to its inputs: it reads the store
    and the municipality registry on every call and never writes.
    """

    def __init__(self, store: PriceTableStore, multipliers: MunicipalityRegistry):
        self.store = store
        self.multipliers = multipliers

    def effective_multiplier(self, zone: str) -> float:
        """Current zone multiplier relative to what is already in the stored prices."""
        applied = self.store.applied_multiplier(zone)
        return self.multipliers.multiplier_for(zone) / applied

    def resolve(self, size: str, zone: str, view: PriceView) -> DerivedPrice:
        """Derive a price for any view, with trace and a priced flag."""
        size = str(size or '').strip()
        derived = DerivedPrice(price=0, priced=False, zone=zone, size=size)
        derived.trace.append(_step("Lookup", f"{_describe(view)} · size {size} · zone {zone}"))

        base = self.store.lookup_base_price(zone, view, size)
        if base is None:
            reason = "zone not priced" if not self.store.has_zone(zone) else "no price entry"
            derived.trace.append(_step("Base Price", f"Missing ({reason}), degrading to 0", "0"))
            return derived

        multiplier = self.effective_multiplier(zone)
        derived.multiplier = multiplier
        derived.price = round_price(base * multiplier)
        derived.priced = base > 0
        derived.trace.append(_step("Base Price", "Stored price", str(base)))
        derived.trace.append(_step("Multiplier", f"Zone multiplier for {zone}", f"{multiplier:g}"))
        derived.trace.append(_step("Final Price", "Rounded to whole units", str(derived.price)))
        return derived

    def resolve_category(self, size: str, zone: str, category: str) -> DerivedPrice:
        return self.resolve(size, zone, CategoryView(category))

    def resolve_tier(self, size: str, zone: str, tier: str, duration_value) -> DerivedPrice:
        bucket = duration_bucket(duration_value, self.store.buckets)
        derived = self.resolve(size, zone, TierDurationView(tier, bucket))
        derived.trace.insert(0, _step("Duration Bucket", f"Duration {duration_value} mapped", str(bucket)))
        return derived

    def derive_category(self, size: str, zone: str, category: str) -> int:
        """Category-mode price; 0 when unpriced."""
        return self.resolve_category(size, zone, category).price

    def derive_tier(self, size: str, zone: str, tier: str, duration_value) -> int:
        """Tier/duration-mode price; 0 when unpriced."""
        return self.resolve_tier(size, zone, tier, duration_value).price

    def derive(self, size: str, zone: str, key: str, duration_value: Optional[int] = None) -> int:
        """
        Convenience entry point: a tier letter with a duration selects
        tier mode, anything else is treated as a customer category.
        """
        if duration_value is not None and key in self.store.tiers:
            return self.derive_tier(size, zone, key, duration_value)
        return self.derive_category(size, zone, key)


def _step(step: str, description: str, value: str = None) -> TraceStep:
    return TraceStep(step=step, description=description, value=value)


def _describe(view: PriceView) -> str:
    if isinstance(view, CategoryView):
        return f"category {view.category}"
    return f"tier {view.tier} · {view.bucket}-period bucket"
