"""
Seed data for a fresh pricing document.

Used when the persistence collaborator has nothing stored yet, and by the
zone fabricator when no zone exists to copy from.
"""
from typing import Optional

DEFAULT_SIZES = ['5x13', '4x12', '4x10', '3x8', '3x6', '3x4']

# Per-size baseline monthly price for a multiplier of 1.0
BASELINE_PRICES = {
    '5x13': 3500,
    '4x12': 2800,
    '4x10': 2200,
    '3x8': 1500,
    '3x6': 1000,
    '3x4': 800,
}
FALLBACK_BASELINE_PRICE = 1000

CATEGORY_FACTORS = {
    'marketer': 0.85,
    'individual': 1.00,
    'company': 1.15,
}

TIER_FACTORS = {
    'A': 1.0,
    'B': 1.2,
}

# Discount applied to the monthly price for each duration bucket
DURATION_DISCOUNT_LADDER = {
    1: 0.00,
    3: 0.05,
    6: 0.10,
    12: 0.20,
}

DEFAULT_PACKAGES = [
    {'duration_value': 1, 'unit_label': 'شهر واحد', 'discount_percent': 0},
    {'duration_value': 3, 'unit_label': '3 أشهر', 'discount_percent': 5},
    {'duration_value': 6, 'unit_label': '6 أشهر', 'discount_percent': 10},
    {'duration_value': 12, 'unit_label': 'سنة كاملة', 'discount_percent': 20},
]

DEFAULT_MUNICIPALITIES = [
    {'name': 'مصراتة', 'multiplier': 1.0, 'region': 'مصراتة', 'city': 'مصراتة'},
    {'name': 'زليتن', 'multiplier': 0.8, 'region': 'مصراتة', 'city': 'زليتن'},
    {'name': 'بنغازي', 'multiplier': 1.2, 'region': 'بنغازي', 'city': 'بنغازي'},
    {'name': 'طرابلس', 'multiplier': 1.0, 'region': 'طرابلس', 'city': 'طرابلس'},
    {'name': 'الخمس', 'multiplier': 0.9, 'region': 'مصراتة', 'city': 'الخمس'},
    {'name': 'سرت', 'multiplier': 0.85, 'region': 'سرت', 'city': 'سرت'},
]

# Installation is a one-off charge per billboard, scaled by the zone multiplier
DEFAULT_INSTALLATION_PRICES = {
    '5x13': 1500,
    '4x12': 1200,
    '4x10': 1000,
    '3x8': 800,
    '3x6': 600,
    '3x4': 500,
}

UNSPECIFIED_MARKERS = {'غير محدد', 'unspecified', 'n/a', 'na', '-', 'none'}


def baseline_price(size: str) -> int:
    return BASELINE_PRICES.get(size, FALLBACK_BASELINE_PRICE)


def build_default_document(currency: str = 'د.ل', sizes: Optional[list[str]] = None) -> dict:
    """
    A fresh pricing document: sizes, municipalities, packages and
    installation prices, but no zones. Zones are fabricated from the
    baseline on the first synchronization run.
    """
    sizes = list(sizes or DEFAULT_SIZES)
    return {
        'currency': currency,
        'sizes': sizes,
        'zones': {},
        'municipalities': [dict(m) for m in DEFAULT_MUNICIPALITIES],
        'packages': [dict(p) for p in DEFAULT_PACKAGES],
        'installation_prices': {
            size: DEFAULT_INSTALLATION_PRICES.get(size, 0) for size in sizes
        },
    }
