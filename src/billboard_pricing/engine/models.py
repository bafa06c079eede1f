"""
Data models for the pricing engine.

Uses dataclasses for structured, type-safe data representation.
"""
import copy
from dataclasses import dataclass, field, asdict
from typing import Optional, Union


CUSTOMER_CATEGORIES = ('individual', 'marketer', 'company')
PRICE_TIERS = ('A', 'B')
DURATION_BUCKETS = (1, 3, 6, 12)


@dataclass
class TraceStep:
    """A single step in the pricing resolution trace."""
    step: str
    description: str
    value: Optional[str] = None


@dataclass
class Municipality:
    """A municipality and the multiplier applied to prices in its zone."""
    name: str
    multiplier: float = 1.0
    region: Optional[str] = None
    city: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'Municipality':
        return cls(
            name=str(data['name']).strip(),
            multiplier=float(data.get('multiplier', 1.0)),
            region=data.get('region') or None,
            city=data.get('city') or None,
        )


@dataclass(frozen=True)
class CategoryView:
    """Customer-category view: one canonical rental period per category."""
    category: str


@dataclass(frozen=True)
class TierDurationView:
    """Tier/duration view: price list A/B for one duration bucket."""
    tier: str
    bucket: int


PriceView = Union[CategoryView, TierDurationView]


@dataclass
class PriceTable:
    """
    Complete price table for one zone.

    category_prices: category → size → price
    tier_prices: tier → bucket → size → price
    applied_multiplier: multiplier already baked into the stored prices
    """
    name: str
    category_prices: dict[str, dict[str, float]] = field(default_factory=dict)
    tier_prices: dict[str, dict[int, dict[str, float]]] = field(default_factory=dict)
    applied_multiplier: float = 1.0

    def sizes(self) -> set[str]:
        """All sizes referenced anywhere in the table."""
        found = set()
        for prices in self.category_prices.values():
            found.update(prices)
        for buckets in self.tier_prices.values():
            for prices in buckets.values():
                found.update(prices)
        return found

    def copy(self, name: Optional[str] = None) -> 'PriceTable':
        clone = copy.deepcopy(self)
        if name is not None:
            clone.name = name
        return clone

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'applied_multiplier': self.applied_multiplier,
            'category_prices': {c: dict(p) for c, p in self.category_prices.items()},
            # JSON object keys are strings
            'tier_prices': {
                tier: {str(bucket): dict(p) for bucket, p in buckets.items()}
                for tier, buckets in self.tier_prices.items()
            },
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PriceTable':
        return cls(
            name=str(data['name']),
            applied_multiplier=float(data.get('applied_multiplier', 1.0)),
            category_prices={
                str(c): {str(s): v for s, v in prices.items()}
                for c, prices in (data.get('category_prices') or {}).items()
            },
            tier_prices={
                str(tier): {
                    int(bucket): {str(s): v for s, v in prices.items()}
                    for bucket, prices in buckets.items()
                }
                for tier, buckets in (data.get('tier_prices') or {}).items()
            },
        )


@dataclass
class DurationPackage:
    """A sellable rental term."""
    duration_value: int
    unit_label: str
    discount_percent: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> 'DurationPackage':
        return cls(
            duration_value=int(data['duration_value']),
            unit_label=str(data.get('unit_label', '')),
            discount_percent=float(data.get('discount_percent', 0.0)),
        )


@dataclass
class BillboardRecord:
    """A single billboard row from the inventory feed."""
    billboard_id: str
    size: str
    municipality: str
    name: str = ''
    city: Optional[str] = None
    area: Optional[str] = None
    level: Optional[str] = None
    price_tier: Optional[str] = None  # explicit "A"/"B" tag


@dataclass
class CategorySelection:
    """Quote priced from the customer-category view."""
    category: str = 'individual'


@dataclass
class TierSelection:
    """Quote priced from the tier/duration view; untagged billboards fall back to default_tier."""
    default_tier: str = 'A'


PricingSelection = Union[CategorySelection, TierSelection]


@dataclass
class DerivedPrice:
    """A derived price together with whether it came from a configured entry."""
    price: int
    priced: bool
    zone: str
    size: str
    multiplier: float = 1.0
    trace: list[TraceStep] = field(default_factory=list)


@dataclass
class CustomerInfo:
    name: str = ''
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None


@dataclass
class QuoteLineItem:
    """A single billboard line in a quote."""
    billboard_id: str
    size: str
    zone: str
    price_key: str  # category name or tier letter
    base_price: float
    final_price: float
    duration: int  # months billed
    discount_percent: float
    line_total: float
    installation_price: float = 0.0
    priced: bool = True
    name: str = ''
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the trace for this line item."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a warning for this line item."""
        self.warnings.append(warning)


@dataclass
class Quote:
    """Complete result of a quote assembly."""
    quote_id: str
    customer: CustomerInfo
    package: DurationPackage
    pricing_mode: str  # "category" or "tier"
    items: list[QuoteLineItem]
    subtotal: float = 0.0
    total_discount: float = 0.0
    installation_total: float = 0.0
    tax_rate: float = 0.0
    tax: float = 0.0
    total: float = 0.0
    currency: str = ''
    created_at: str = ''
    valid_until: str = ''
    warnings: list[str] = field(default_factory=list)
    trace: list[TraceStep] = field(default_factory=list)

    @property
    def has_unpriced_items(self) -> bool:
        return any(not item.priced for item in self.items)

    def add_trace(self, step: str, description: str, value: str = None):
        """Add a step to the quote-level trace."""
        self.trace.append(TraceStep(step=step, description=description, value=value))

    def add_warning(self, warning: str):
        """Add a quote-level warning."""
        if warning not in self.warnings:
            self.warnings.append(warning)

    def to_dict(self) -> dict:
        """Plain structured data for rendering collaborators."""
        data = asdict(self)
        data['has_unpriced_items'] = self.has_unpriced_items
        return data
