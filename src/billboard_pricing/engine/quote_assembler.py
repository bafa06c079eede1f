"""
Quote Assembler - turns a billboard selection into a priced quote.

For each billboard:
1. Resolve the pricing zone from its municipality
2. Resolve the price key (customer category, or the billboard's tier)
3. Derive the base (one-period) and final (discounted) prices
4. Optionally add the one-off installation charge

The package discount is applied exactly once: by percentage in category
mode, and through the duration bucket's stored price in tier mode.
"""
import logging
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional
from uuid import uuid4

from ..policy.zone_resolver import TierResolver, ZoneResolver
from .errors import UnpricedItemError, ValidationError
from .models import (
    BillboardRecord,
    CategorySelection,
    CustomerInfo,
    DurationPackage,
    PricingSelection,
    Quote,
    QuoteLineItem,
    TierSelection,
)
from .pricing_engine import PriceDerivationEngine, duration_months, round_amount, round_price

logger = logging.getLogger(__name__)


class QuoteAssembler:
    """Assembles quotes from billboards, a pricing selection and a package."""

    def __init__(
        self,
        engine: PriceDerivationEngine,
        zone_resolver: ZoneResolver,
        tier_resolver: Optional[TierResolver] = None,
        tax_rate: float = 0.0,
        currency: str = '',
        validity_days: int = 30,
        block_unpriced: bool = False,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.engine = engine
        self.zone_resolver = zone_resolver
        self.tier_resolver = tier_resolver or TierResolver(engine.store.tiers)
        self.tax_rate = tax_rate
        self.currency = currency
        self.validity_days = validity_days
        self.block_unpriced = block_unpriced
        self.clock = clock

    def assemble(
        self,
        billboards: Iterable[BillboardRecord],
        selection: PricingSelection,
        package: DurationPackage,
        customer: Optional[CustomerInfo] = None,
        include_installation: bool = False,
    ) -> Quote:
        """
        Price every billboard and aggregate the totals.

        Raises:
            ValidationError: invalid package or unknown customer category
            NoZonesConfiguredError: the store has no zones at all
            UnpricedItemError: a line is unpriced and quoting is blocked
        """
        if package.duration_value <= 0:
            raise ValidationError(f"Duration must be positive, got {package.duration_value}")
        if isinstance(selection, CategorySelection):
            if selection.category not in self.engine.store.categories:
                raise ValidationError(
                    f"Unknown customer category '{selection.category}'. "
                    f"Valid: {list(self.engine.store.categories)}"
                )
            mode = 'category'
        elif isinstance(selection, TierSelection):
            if selection.default_tier not in self.engine.store.tiers:
                raise ValidationError(
                    f"Unknown default tier '{selection.default_tier}'. "
                    f"Valid: {list(self.engine.store.tiers)}"
                )
            mode = 'tier'
        else:
            raise TypeError(f"Unsupported pricing selection: {selection!r}")

        created = self.clock()
        quote = Quote(
            quote_id=f"Q-{created:%Y%m%d%H%M%S}-{uuid4().hex[:6]}",
            customer=customer or CustomerInfo(),
            package=package,
            pricing_mode=mode,
            items=[],
            tax_rate=self.tax_rate,
            currency=self.currency,
            created_at=created.isoformat(timespec='seconds'),
            valid_until=(created + timedelta(days=self.validity_days)).isoformat(timespec='seconds'),
        )
        quote.add_trace("Package", package.unit_label or f"{package.duration_value} period(s)",
                        f"{package.discount_percent:g}%")

        for billboard in billboards:
            if mode == 'category':
                item = self._category_line(billboard, selection.category, package)
            else:
                item = self._tier_line(billboard, selection, package)

            if include_installation:
                item.installation_price = self._installation_price(item.size, item.zone)
                item.add_trace("Installation", "One-off, zone-scaled", str(item.installation_price))

            item.line_total = round_amount(item.final_price * item.duration + item.installation_price)
            quote.items.append(item)

        self._check_unpriced(quote)
        self._aggregate(quote)
        logger.info(
            "Assembled quote %s: %d item(s), total %s %s",
            quote.quote_id, len(quote.items), quote.total, quote.currency
        )
        return quote

    def _resolve_zone(self, billboard: BillboardRecord) -> tuple[str, str, Optional[str]]:
        """Return (zone, method, warning) for the billboard's municipality."""
        resolution = self.zone_resolver.resolve(billboard.municipality)
        warning = None
        if resolution.method in ('default', 'first_known'):
            warning = (
                f"Municipality '{billboard.municipality}' has no pricing zone; "
                f"priced as '{resolution.zone}'"
            )
        return resolution.zone, resolution.method, warning

    def _category_line(self, billboard: BillboardRecord, category: str,
                       package: DurationPackage) -> QuoteLineItem:
        zone, method, zone_warning = self._resolve_zone(billboard)
        derived = self.engine.resolve_category(billboard.size, zone, category)

        base = derived.price
        final = round_amount(base * (1 - package.discount_percent / 100))

        item = QuoteLineItem(
            billboard_id=billboard.billboard_id,
            name=billboard.name,
            size=derived.size,
            zone=zone,
            price_key=category,
            base_price=base,
            final_price=final,
            duration=duration_months(package.duration_value, self.engine.store.buckets),
            discount_percent=package.discount_percent,
            line_total=0.0,
            priced=derived.priced,
        )
        if zone_warning:
            item.add_warning(zone_warning)
        item.add_trace("Zone", f"Resolved from '{billboard.municipality}' ({method})", zone)
        item.trace.extend(derived.trace)
        item.add_trace("Discount", f"{package.discount_percent:g}% package discount", str(final))
        return item

    def _tier_line(self, billboard: BillboardRecord, selection: TierSelection,
                   package: DurationPackage) -> QuoteLineItem:
        zone, method, zone_warning = self._resolve_zone(billboard)
        tier, tier_method = self.tier_resolver.resolve(billboard, default_tier=selection.default_tier)

        base_derived = self.engine.resolve_tier(billboard.size, zone, tier, 1)
        final_derived = self.engine.resolve_tier(billboard.size, zone, tier, package.duration_value)
        base = base_derived.price
        final = final_derived.price

        # Discount is embedded in the bucket price; report the effective rate
        effective = round_amount((base - final) / base * 100) if base else 0.0

        item = QuoteLineItem(
            billboard_id=billboard.billboard_id,
            name=billboard.name,
            size=final_derived.size,
            zone=zone,
            price_key=tier,
            base_price=base,
            final_price=final,
            duration=duration_months(package.duration_value, self.engine.store.buckets),
            discount_percent=effective,
            line_total=0.0,
            priced=base_derived.priced and final_derived.priced,
        )
        if zone_warning:
            item.add_warning(zone_warning)
        if base and abs(effective - package.discount_percent) >= 0.5:
            item.add_warning(
                f"Effective discount {effective:g}% differs from the package's "
                f"nominal {package.discount_percent:g}%"
            )
        item.add_trace("Zone", f"Resolved from '{billboard.municipality}' ({method})", zone)
        item.add_trace("Tier", f"Resolved ({tier_method})", tier)
        item.trace.extend(final_derived.trace)
        return item

    def _installation_price(self, size: str, zone: str) -> int:
        base = self.engine.store.get_installation_price(size)
        return round_price(base * self.engine.multipliers.multiplier_for(zone))

    def _check_unpriced(self, quote: Quote):
        unpriced = [item.billboard_id for item in quote.items if not item.priced]
        if not unpriced:
            return
        message = f"{len(unpriced)} billboard(s) have no configured price: {', '.join(unpriced)}"
        if self.block_unpriced:
            raise UnpricedItemError(message, unpriced)
        logger.warning("Quote %s: %s", quote.quote_id, message)
        quote.add_warning(message)

    def _aggregate(self, quote: Quote):
        subtotal = sum(item.base_price * item.duration for item in quote.items)
        discount = sum((item.base_price - item.final_price) * item.duration for item in quote.items)
        installation = sum(item.installation_price for item in quote.items)

        taxable = subtotal - discount + installation
        quote.subtotal = round_amount(subtotal)
        quote.total_discount = round_amount(discount)
        quote.installation_total = round_amount(installation)
        quote.tax = round_amount(taxable * self.tax_rate)
        quote.total = round_amount(taxable + quote.tax)

        quote.add_trace("Subtotal", "Σ base × duration", str(quote.subtotal))
        quote.add_trace("Discount", "Σ (base − final) × duration", str(quote.total_discount))
        if installation:
            quote.add_trace("Installation", "Σ installation", str(quote.installation_total))
        quote.add_trace("Tax", f"Rate {self.tax_rate:g}", str(quote.tax))
        quote.add_trace("Total", "Subtotal − discount + installation + tax", str(quote.total))
