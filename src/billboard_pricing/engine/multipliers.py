"""
Municipality registry - owns the per-zone multipliers.

The registry is the single source of truth for multipliers; other components
query `multiplier_for` on every call instead of caching values.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .errors import ValidationError
from .models import Municipality

logger = logging.getLogger(__name__)

SANE_MULTIPLIER_RANGE = (0.1, 10.0)


@dataclass
class MultiplierCheck:
    """Result of multiplier validation."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def validate_multiplier(multiplier: float) -> MultiplierCheck:
    """Validate a multiplier: non-positive is an error, out of range is a warning."""
    result = MultiplierCheck(valid=True)
    try:
        value = float(multiplier)
    except (TypeError, ValueError):
        result.valid = False
        result.errors.append(f"Multiplier must be a number, got {multiplier!r}")
        return result

    if value != value or value <= 0:
        result.valid = False
        result.errors.append(f"Multiplier must be greater than 0, got {multiplier}")
        return result

    low, high = SANE_MULTIPLIER_RANGE
    if value < low:
        result.warnings.append(f"Multiplier {value} is below {low}; prices will be very low")
    elif value > high:
        result.warnings.append(f"Multiplier {value} is above {high}; prices will be very high")
    return result


class MunicipalityRegistry:
    """
    Registry of municipalities and their multipliers.

    Names are matched case-insensitively. Unknown names resolve to a
    multiplier of 1.0, which makes "not configured" indistinguishable from
    "intentionally 1.0"; use `get` to detect absence.
    """

    def __init__(self, municipalities: Optional[Iterable[Municipality]] = None):
        self._items: dict[str, Municipality] = {}
        for municipality in municipalities or []:
            self.add(municipality)

    @staticmethod
    def _key(name: str) -> str:
        return str(name).strip().casefold()

    def multiplier_for(self, zone_name: str) -> float:
        """Return the zone multiplier, or 1.0 for unknown zones."""
        if zone_name is None:
            return 1.0
        municipality = self._items.get(self._key(zone_name))
        if municipality is None:
            return 1.0
        return municipality.multiplier

    def get(self, name: str) -> Optional[Municipality]:
        return self._items.get(self._key(name))

    def all(self) -> list[Municipality]:
        return sorted(self._items.values(), key=lambda m: m.name)

    def __contains__(self, name: str) -> bool:
        return self._key(name) in self._items

    def __len__(self) -> int:
        return len(self._items)

    def add(self, municipality: Municipality) -> MultiplierCheck:
        """Register a new municipality. Rejects duplicates and non-positive multipliers."""
        name = str(municipality.name or '').strip()
        if not name:
            raise ValidationError("Municipality name is required")
        if name.casefold() in self._items:
            raise ValidationError(f"Municipality '{name}' already exists")

        check = validate_multiplier(municipality.multiplier)
        if not check.valid:
            raise ValidationError("; ".join(check.errors))
        for warning in check.warnings:
            logger.warning("Municipality %s: %s", name, warning)

        self._items[name.casefold()] = Municipality(
            name=name,
            multiplier=float(municipality.multiplier),
            region=municipality.region,
            city=municipality.city,
        )
        return check

    def update(self, name: str, updates: dict) -> MultiplierCheck:
        """Update fields of an existing municipality."""
        current = self.get(name)
        if current is None:
            raise ValidationError(f"Municipality '{name}' not found")

        check = MultiplierCheck(valid=True)
        if 'multiplier' in updates and updates['multiplier'] is not None:
            check = validate_multiplier(updates['multiplier'])
            if not check.valid:
                raise ValidationError("; ".join(check.errors))
            for warning in check.warnings:
                logger.warning("Municipality %s: %s", current.name, warning)

        new_name = str(updates.get('name') or current.name).strip()
        if self._key(new_name) != self._key(current.name) and self._key(new_name) in self._items:
            raise ValidationError(f"Municipality '{new_name}' already exists")

        updated = Municipality(
            name=new_name,
            multiplier=float(updates['multiplier']) if updates.get('multiplier') is not None else current.multiplier,
            region=updates.get('region', current.region),
            city=updates.get('city', current.city),
        )
        del self._items[self._key(current.name)]
        self._items[self._key(new_name)] = updated

        if updated.multiplier != current.multiplier:
            logger.info(
                "Multiplier for %s changed %s → %s",
                updated.name, current.multiplier, updated.multiplier
            )
        return check

    def remove(self, name: str) -> Municipality:
        municipality = self._items.pop(self._key(name), None)
        if municipality is None:
            raise ValidationError(f"Municipality '{name}' not found")
        return municipality

    def search(self, query: str) -> list[Municipality]:
        """Substring search over name, region and city."""
        term = str(query or '').strip().casefold()
        if not term:
            return self.all()
        return [
            m for m in self.all()
            if term in m.name.casefold()
            or (m.region and term in m.region.casefold())
            or (m.city and term in m.city.casefold())
        ]

    def to_document(self) -> list[dict]:
        return [m.to_dict() for m in self.all()]

    @classmethod
    def from_document(cls, rows: Optional[list[dict]]) -> 'MunicipalityRegistry':
        registry = cls()
        for row in rows or []:
            registry.add(Municipality.from_dict(row))
        return registry
