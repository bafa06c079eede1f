"""
Price reports - statistics and exports over the price table store.
"""
import logging
from pathlib import Path

import pandas as pd

from ..engine.multipliers import MunicipalityRegistry
from ..engine.price_store import PriceTableStore, size_sort_key

logger = logging.getLogger(__name__)


def zone_summary_frame(store: PriceTableStore, multipliers: MunicipalityRegistry) -> pd.DataFrame:
    """One row per zone with its multipliers and whether a municipality backs it."""
    rows = []
    for zone in store.sorted_zones():
        rows.append({
            'zone': zone,
            'multiplier': multipliers.multiplier_for(zone),
            'applied_multiplier': store.applied_multiplier(zone),
            'has_municipality': zone in multipliers,
        })
    return pd.DataFrame(rows, columns=['zone', 'multiplier', 'applied_multiplier', 'has_municipality'])


def average_tier_prices(store: PriceTableStore) -> dict[str, dict[str, float]]:
    """
    Average one-period stored price per tier and size, across zones.

    Zero entries are treated as unpriced and left out of the average.
    """
    df = store.to_frame()
    df = df[(df['view'] == 'tier') & (df['bucket'] == 1) & (df['price'] > 0)]
    if df.empty:
        return {}

    averages = df.groupby(['key', 'size'])['price'].mean().round(2)
    result: dict[str, dict[str, float]] = {}
    for (tier, size), value in averages.items():
        result.setdefault(tier, {})[size] = float(value)
    for tier in result:
        result[tier] = dict(sorted(result[tier].items(), key=lambda kv: size_sort_key(kv[0])))
    return result


def price_statistics(store: PriceTableStore, multipliers: MunicipalityRegistry) -> dict:
    """Headline numbers for the admin dashboard."""
    summary = zone_summary_frame(store, multipliers)
    df = store.to_frame()
    unpriced = int((df['price'] == 0).sum()) if not df.empty else 0

    return {
        'total_zones': len(summary),
        'total_sizes': len(store.list_sizes()),
        'total_municipalities': len(multipliers),
        'zones_with_municipality': int(summary['has_municipality'].sum()) if not summary.empty else 0,
        'unpriced_entries': unpriced,
        'average_prices': average_tier_prices(store),
        'monotonicity_warnings': len(store.check_duration_monotonicity()) if store.list_zones() else 0,
    }


def export_prices_csv(store: PriceTableStore, path: Path) -> Path:
    """Write the long-format price table to CSV (UTF-8 with BOM for Excel)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    store.to_frame().to_csv(path, index=False, encoding='utf-8-sig')
    logger.info("Exported prices to %s", path)
    return path
