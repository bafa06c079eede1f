"""
Zone Resolver - maps a billboard's municipality onto a priced zone.
"""
from dataclasses import dataclass
from typing import Optional

from ..engine.errors import NoZonesConfiguredError
from ..engine.models import PRICE_TIERS, BillboardRecord
from ..engine.price_store import PriceTableStore


@dataclass
class ZoneResolution:
    zone: str
    method: str  # exact, case_insensitive, alias, default, first_known


class ZoneResolver:
    """
    Resolves the pricing zone for a municipality name.

    Waterfall precedence:
    1. Exact match against priced zones
    2. Case-insensitive match
    3. Configured alias table
    4. Designated default zone
    5. Fallback: first known zone (sorted)
    """

    def __init__(
        self,
        store: PriceTableStore,
        aliases: Optional[dict[str, str]] = None,
        default_zone: Optional[str] = None,
    ):
        self.store = store
        self.aliases = {k.strip().casefold(): v for k, v in (aliases or {}).items()}
        self.default_zone = default_zone

    def resolve(self, municipality: Optional[str]) -> ZoneResolution:
        zones = self.store.sorted_zones()
        if not zones:
            raise NoZonesConfiguredError("No pricing zones configured")

        name = str(municipality or '').strip()

        # 1. Exact
        if name in zones:
            return ZoneResolution(name, 'exact')

        # 2. Case-insensitive
        folded = name.casefold()
        if folded:
            for zone in zones:
                if zone.casefold() == folded:
                    return ZoneResolution(zone, 'case_insensitive')

        # 3. Alias table
        alias_target = self.aliases.get(folded)
        if alias_target and self.store.has_zone(alias_target):
            return ZoneResolution(alias_target, 'alias')

        # 4. Default zone
        if self.default_zone and self.store.has_zone(self.default_zone):
            return ZoneResolution(self.default_zone, 'default')

        # 5. Fallback
        return ZoneResolution(zones[0], 'first_known')


class TierResolver:
    """
    Resolves the price tier for a billboard.

    1. Explicit price tier tag
    2. Level string: exact tier letter, then leading tier letter
    3. Fallback: default tier
    """

    def __init__(self, tiers: tuple = PRICE_TIERS, default_tier: str = 'A'):
        self.tiers = tuple(tiers)
        self.default_tier = default_tier

    def _match(self, value: Optional[str]) -> Optional[str]:
        text = str(value or '').strip().upper()
        if not text:
            return None
        if text in self.tiers:
            return text
        if text[0] in self.tiers:
            return text[0]
        return None

    def resolve(self, billboard: BillboardRecord, default_tier: Optional[str] = None) -> tuple[str, str]:
        """Return (tier, method); default_tier overrides the configured fallback."""
        tier = self._match(billboard.price_tier)
        if tier:
            return tier, 'explicit'
        tier = self._match(billboard.level)
        if tier:
            return tier, 'level'
        return default_tier or self.default_tier, 'default'
