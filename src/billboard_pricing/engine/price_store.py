"""
Price Table Store - system of record for zone price tables and the size set.

The store keeps everything in memory and guarantees read-after-write within
the process. Durability is delegated to a persistence collaborator which
receives `to_document()` snapshots.
"""
import logging
import re
from typing import Iterable, Optional

import pandas as pd

from .errors import (
    InvalidSizeFormat,
    LastSizeError,
    LastZoneError,
    UnknownSizeError,
    UnknownZoneError,
    ValidationError,
    ZoneExistsError,
)
from .models import (
    CUSTOMER_CATEGORIES,
    DURATION_BUCKETS,
    PRICE_TIERS,
    CategoryView,
    PriceTable,
    PriceView,
    TierDurationView,
)

logger = logging.getLogger(__name__)

SIZE_PATTERN = re.compile(r'^\d+x\d+$')


def normalize_size(size: str) -> str:
    return str(size or '').strip()


def is_valid_size(size: str) -> bool:
    """Check a size string against the `<int>x<int>` contract."""
    return bool(SIZE_PATTERN.match(normalize_size(size)))


def size_sort_key(size: str) -> tuple:
    """Order sizes by area, largest first, then by name."""
    try:
        width, height = (int(part) for part in size.split('x'))
        return (-(width * height), size)
    except ValueError:
        return (0, size)


def _check_price(value) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Price must be a number, got {value!r}")
    if number != number or number < 0:
        raise ValidationError(f"Price must be zero or positive, got {value}")
    # Keep whole-unit prices as ints so documents stay readable
    return int(number) if number.is_integer() else number


class PriceTableStore:
    """
    Holds every zone's PriceTable plus the process-wide size set.

    Invariants:
    - the size set is never emptied by `remove_size`
    - the zone set is never emptied by `remove_zone`
    - every zone holds an entry for every size in every view (zero-filled)
    """

    def __init__(
        self,
        sizes: Optional[Iterable[str]] = None,
        zones: Optional[Iterable[PriceTable]] = None,
        categories: tuple = CUSTOMER_CATEGORIES,
        tiers: tuple = PRICE_TIERS,
        buckets: tuple = DURATION_BUCKETS,
        installation_prices: Optional[dict[str, float]] = None,
    ):
        self.categories = tuple(categories)
        self.tiers = tuple(tiers)
        self.buckets = tuple(buckets)
        self._sizes: list[str] = []
        self._zones: dict[str, PriceTable] = {}
        self._installation: dict[str, float] = {}

        for size in sizes or []:
            self.add_size(size)
        for table in zones or []:
            self.add_zone(table)
        for size, price in (installation_prices or {}).items():
            self.set_installation_price(size, price)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_zones(self) -> set[str]:
        return set(self._zones)

    def list_sizes(self) -> set[str]:
        return set(self._sizes)

    def sorted_zones(self) -> list[str]:
        return sorted(self._zones)

    def sorted_sizes(self) -> list[str]:
        return sorted(self._sizes, key=size_sort_key)

    def has_zone(self, name: str) -> bool:
        return name in self._zones

    def get_zone(self, name: str) -> PriceTable:
        """Return a deep copy of a zone's table."""
        if name not in self._zones:
            raise UnknownZoneError(f"Zone '{name}' not found")
        return self._zones[name].copy()

    def applied_multiplier(self, zone: str) -> float:
        table = self._zones.get(zone)
        return table.applied_multiplier if table else 1.0

    def lookup_base_price(self, zone: str, view: PriceView, size: str) -> Optional[float]:
        """Return the stored price, or None when no entry exists."""
        table = self._zones.get(zone)
        if table is None:
            return None
        size = normalize_size(size)

        if isinstance(view, CategoryView):
            return table.category_prices.get(view.category, {}).get(size)
        if isinstance(view, TierDurationView):
            return table.tier_prices.get(view.tier, {}).get(view.bucket, {}).get(size)
        raise TypeError(f"Unsupported price view: {view!r}")

    def get_base_price(self, zone: str, view: PriceView, size: str) -> float:
        """Return the stored price, or 0 ("unpriced") when no entry exists."""
        price = self.lookup_base_price(zone, view, size)
        return 0 if price is None else price

    def get_installation_price(self, size: str) -> float:
        """Unscaled one-off installation price for a size; 0 when unknown."""
        return self._installation.get(normalize_size(size), 0)

    def set_installation_price(self, size: str, value) -> None:
        price = _check_price(value)
        size = normalize_size(size)
        if size not in self._sizes:
            raise UnknownSizeError(f"Size '{size}' not found")
        self._installation[size] = price

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _check_view(self, view: PriceView):
        if isinstance(view, CategoryView):
            if view.category not in self.categories:
                raise ValidationError(
                    f"Unknown customer category '{view.category}'. Valid: {list(self.categories)}"
                )
        elif isinstance(view, TierDurationView):
            if view.tier not in self.tiers:
                raise ValidationError(f"Unknown price tier '{view.tier}'. Valid: {list(self.tiers)}")
            if view.bucket not in self.buckets:
                raise ValidationError(
                    f"Unknown duration bucket {view.bucket}. Valid: {list(self.buckets)}"
                )
        else:
            raise TypeError(f"Unsupported price view: {view!r}")

    def set_base_price(self, zone: str, view: PriceView, size: str, value) -> None:
        """Set one price. Rejects negative values; never mutates on failure."""
        price = _check_price(value)
        self._check_view(view)
        size = normalize_size(size)
        if zone not in self._zones:
            raise UnknownZoneError(f"Zone '{zone}' not found")
        if size not in self._sizes:
            raise UnknownSizeError(f"Size '{size}' not found")

        table = self._zones[zone]
        if isinstance(view, CategoryView):
            table.category_prices.setdefault(view.category, {})[size] = price
        else:
            table.tier_prices.setdefault(view.tier, {}).setdefault(view.bucket, {})[size] = price
            for violation in self._monotonicity_violations(table, view.tier, size):
                logger.warning("Zone %s: %s", zone, violation)

    def add_size(self, size: str) -> bool:
        """
        Add a size to every zone (zero-priced).

        Returns True if the size was added, False if it already existed.
        """
        size = normalize_size(size)
        if not is_valid_size(size):
            raise InvalidSizeFormat(f"Invalid size '{size}': expected <width>x<height>, e.g. 4x12")
        if size in self._sizes:
            return False

        self._sizes.append(size)
        self._installation.setdefault(size, 0)
        for table in self._zones.values():
            self._fill_size(table, size)
        logger.info("Added size %s to %d zone(s)", size, len(self._zones))
        return True

    def remove_size(self, size: str) -> None:
        size = normalize_size(size)
        if size not in self._sizes:
            raise UnknownSizeError(f"Size '{size}' not found")
        if len(self._sizes) <= 1:
            raise LastSizeError("Cannot remove the last remaining size")

        self._sizes.remove(size)
        self._installation.pop(size, None)
        for table in self._zones.values():
            for prices in table.category_prices.values():
                prices.pop(size, None)
            for buckets in table.tier_prices.values():
                for prices in buckets.values():
                    prices.pop(size, None)
        logger.info("Removed size %s", size)

    def add_zone(self, table: PriceTable) -> None:
        """Add a zone. Unknown sizes in the table become process-wide sizes."""
        name = str(table.name or '').strip()
        if not name:
            raise ValidationError("Zone name is required")
        if name in self._zones:
            raise ZoneExistsError(f"Zone '{name}' already exists")
        if table.applied_multiplier <= 0:
            raise ValidationError(
                f"Applied multiplier must be greater than 0, got {table.applied_multiplier}"
            )

        incoming = table.copy(name=name)
        new_sizes = sorted(incoming.sizes() - set(self._sizes))
        invalid = [s for s in new_sizes if not is_valid_size(s)]
        if invalid:
            raise InvalidSizeFormat(f"Invalid size(s) in zone '{name}': {', '.join(invalid)}")

        # Validate every price before touching state
        for prices in incoming.category_prices.values():
            for size, value in prices.items():
                prices[size] = _check_price(value)
        for buckets in incoming.tier_prices.values():
            for prices in buckets.values():
                for size, value in prices.items():
                    prices[size] = _check_price(value)

        for size in new_sizes:
            self.add_size(size)
        for size in self._sizes:
            self._fill_size(incoming, size)

        self._zones[name] = incoming
        logger.info("Added zone %s", name)

    def remove_zone(self, name: str) -> None:
        if name not in self._zones:
            raise UnknownZoneError(f"Zone '{name}' not found")
        if len(self._zones) <= 1:
            raise LastZoneError("Cannot remove the last remaining pricing zone")
        del self._zones[name]
        logger.info("Removed zone %s", name)

    def _fill_size(self, table: PriceTable, size: str) -> None:
        for category in self.categories:
            table.category_prices.setdefault(category, {}).setdefault(size, 0)
        for tier in self.tiers:
            buckets = table.tier_prices.setdefault(tier, {})
            for bucket in self.buckets:
                buckets.setdefault(bucket, {}).setdefault(size, 0)

    # ------------------------------------------------------------------
    # Invariant checks
    # ------------------------------------------------------------------

    def _monotonicity_violations(self, table: PriceTable, tier: str, size: str) -> list[str]:
        violations = []
        previous_bucket, previous_price = None, None
        for bucket in sorted(self.buckets):
            price = table.tier_prices.get(tier, {}).get(bucket, {}).get(size)
            if not price:
                continue
            if previous_price is not None and price > previous_price:
                violations.append(
                    f"tier {tier} size {size}: {bucket}-period price {price} exceeds "
                    f"{previous_bucket}-period price {previous_price}"
                )
            previous_bucket, previous_price = bucket, price
        return violations

    def check_duration_monotonicity(self, zone: Optional[str] = None) -> list[str]:
        """List every place where a longer duration costs more than a shorter one."""
        names = [zone] if zone else self.sorted_zones()
        violations = []
        for name in names:
            if name not in self._zones:
                raise UnknownZoneError(f"Zone '{name}' not found")
            table = self._zones[name]
            for tier in self.tiers:
                for size in self._sizes:
                    violations.extend(
                        f"{name}: {v}" for v in self._monotonicity_violations(table, tier, size)
                    )
        return violations

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_document(self) -> dict:
        return {
            'sizes': list(self._sizes),
            'installation_prices': dict(self._installation),
            'zones': {name: self._zones[name].to_dict() for name in self.sorted_zones()},
        }

    @classmethod
    def from_document(cls, document: dict) -> 'PriceTableStore':
        zones = [PriceTable.from_dict(z) for z in (document.get('zones') or {}).values()]
        return cls(
            sizes=document.get('sizes') or [],
            zones=zones,
            installation_prices=document.get('installation_prices') or {},
        )

    def to_frame(self) -> pd.DataFrame:
        """Long-format view: one row per (zone, view, key, bucket, size)."""
        rows = []
        for name in self.sorted_zones():
            table = self._zones[name]
            for category, prices in table.category_prices.items():
                for size, price in prices.items():
                    rows.append({
                        'zone': name, 'view': 'category', 'key': category,
                        'bucket': 1, 'size': size, 'price': price,
                    })
            for tier, buckets in table.tier_prices.items():
                for bucket, prices in buckets.items():
                    for size, price in prices.items():
                        rows.append({
                            'zone': name, 'view': 'tier', 'key': tier,
                            'bucket': bucket, 'size': size, 'price': price,
                        })
        return pd.DataFrame(rows, columns=['zone', 'view', 'key', 'bucket', 'size', 'price'])
