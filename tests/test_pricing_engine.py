import pytest

from billboard_pricing.engine.models import CategoryView
from billboard_pricing.engine.pricing_engine import (
    duration_bucket,
    duration_months,
    round_amount,
    round_price,
)

from conftest import make_table


@pytest.mark.parametrize("value,expected", [
    (2.5, 3),
    (3.5, 4),
    (2240.0, 2240),
    (2239.4999, 2239),
    (0.5, 1),
])
def test_round_price_half_up(value, expected):
    assert round_price(value) == expected


def test_round_amount():
    assert round_amount(2850.005) == 2850.01
    assert round_amount(9000) == 9000.0


@pytest.mark.parametrize("value,expected", [
    (1, 1), (2, 1), (3, 3), (5, 3), (6, 6), (11, 6), (12, 12),
    (30, 1), (90, 3), (180, 6), (365, 12),
    (0, 1), (-4, 1), ('abc', 1), (None, 1),
])
def test_duration_bucket(value, expected):
    assert duration_bucket(value) == expected


@pytest.mark.parametrize("value,expected", [
    (1, 1), (6, 6), (12, 12), (15, 1), (90, 3), (365, 12), (730, 24),
])
def test_duration_months(value, expected):
    assert duration_months(value) == expected


def test_category_price_with_neutral_multiplier(engine):
    assert engine.derive_category('4x12', 'مصراتة', 'individual') == 2800
    assert engine.derive_category('4x12', 'مصراتة', 'company') == 3200


def test_zliten_multiplier_applied(store, engine):
    store.add_zone(make_table('زليتن'))
    # Hand-entered 2800 in a zone with multiplier 0.8
    assert engine.derive_category('4x12', 'زليتن', 'individual') == 2240


def test_multiplier_change_reprices_immediately(store, registry, engine):
    store.add_zone(make_table('زليتن'))
    registry.update('زليتن', {'multiplier': 0.9})
    assert engine.derive_category('4x12', 'زليتن', 'individual') == 2520


def test_unknown_zone_derives_zero(registry, engine):
    assert registry.multiplier_for('غدامس') == 1.0
    assert engine.derive_category('4x12', 'غدامس', 'individual') == 0
    assert engine.derive_tier('4x12', 'غدامس', 'A', 3) == 0

    derived = engine.resolve_category('4x12', 'غدامس', 'individual')
    assert derived.priced is False
    assert 'zone not priced' in derived.trace[-1].description


def test_unknown_size_derives_zero(engine):
    derived = engine.resolve_category('9x9', 'مصراتة', 'individual')
    assert derived.price == 0
    assert not derived.priced


def test_stored_zero_is_unpriced(store, engine):
    store.add_size('5x13')
    derived = engine.resolve_category('5x13', 'مصراتة', 'individual')
    assert derived.price == 0
    assert not derived.priced


def test_tier_price_uses_duration_bucket(engine):
    assert engine.derive_tier('4x12', 'مصراتة', 'A', 1) == 2800
    assert engine.derive_tier('4x12', 'مصراتة', 'A', 3) == 2660
    assert engine.derive_tier('4x12', 'مصراتة', 'A', 365) == 2240
    assert engine.derive_tier('4x12', 'مصراتة', 'B', 7) == 3000


def test_discount_monotonic_across_buckets(engine):
    prices = [engine.derive_tier('4x12', 'مصراتة', tier, d) for tier in ('A', 'B') for d in (1, 3, 6, 12)]
    for tier_prices in (prices[:4], prices[4:]):
        assert tier_prices == sorted(tier_prices, reverse=True)


def test_derive_dispatches_on_key(engine):
    assert engine.derive('4x12', 'مصراتة', 'A', 3) == 2660
    assert engine.derive('4x12', 'مصراتة', 'company') == 3200
    # A category name with a duration still reads the category view
    assert engine.derive('4x12', 'مصراتة', 'marketer', 6) == 2400


def test_resolve_trace(engine):
    derived = engine.resolve('3x4', 'مصراتة', CategoryView('marketer'))
    steps = [t.step for t in derived.trace]
    assert steps == ['Lookup', 'Base Price', 'Multiplier', 'Final Price']
    assert derived.price == 700
    assert derived.priced


def test_resolve_tier_trace_starts_with_bucket(engine):
    derived = engine.resolve_tier('3x4', 'مصراتة', 'A', 180)
    assert derived.trace[0].step == 'Duration Bucket'
    assert derived.trace[0].value == '6'
    assert derived.price == 720
