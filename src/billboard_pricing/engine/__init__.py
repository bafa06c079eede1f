"""Engine subpackage - price store, derivation and zone fabrication."""
from .pricing_engine import PriceDerivationEngine, duration_bucket
from .price_store import PriceTableStore
from .multipliers import MunicipalityRegistry
from .models import CategoryView, TierDurationView, PriceTable, Quote, QuoteLineItem

__all__ = [
    'PriceDerivationEngine', 'duration_bucket', 'PriceTableStore', 'MunicipalityRegistry',
    'CategoryView', 'TierDurationView', 'PriceTable', 'Quote', 'QuoteLineItem',
]
