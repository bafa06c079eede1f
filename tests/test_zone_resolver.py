import pytest

from billboard_pricing.engine.errors import NoZonesConfiguredError
from billboard_pricing.engine.price_store import PriceTableStore
from billboard_pricing.policy.zone_resolver import TierResolver, ZoneResolver

from conftest import billboard, make_table


@pytest.fixture
def zoned_store(store):
    store.add_zone(make_table('Tripoli'))
    return store


def test_exact_match(zoned_store):
    resolution = ZoneResolver(zoned_store).resolve('مصراتة')
    assert (resolution.zone, resolution.method) == ('مصراتة', 'exact')


def test_exact_match_ignores_surrounding_whitespace(zoned_store):
    assert ZoneResolver(zoned_store).resolve('  مصراتة ').zone == 'مصراتة'


def test_case_insensitive_match(zoned_store):
    resolution = ZoneResolver(zoned_store).resolve('TRIPOLI')
    assert (resolution.zone, resolution.method) == ('Tripoli', 'case_insensitive')


def test_alias_match(zoned_store):
    resolver = ZoneResolver(zoned_store, aliases={'Misrata': 'مصراتة'})
    resolution = resolver.resolve('misrata')
    assert (resolution.zone, resolution.method) == ('مصراتة', 'alias')


def test_alias_to_unknown_zone_is_ignored(zoned_store):
    resolver = ZoneResolver(zoned_store, aliases={'Misrata': 'غير موجودة'}, default_zone='Tripoli')
    assert resolver.resolve('Misrata').method == 'default'


def test_default_zone(zoned_store):
    resolution = ZoneResolver(zoned_store, default_zone='Tripoli').resolve('سبها')
    assert (resolution.zone, resolution.method) == ('Tripoli', 'default')


def test_first_known_zone_fallback(zoned_store):
    resolution = ZoneResolver(zoned_store).resolve('سبها')
    assert (resolution.zone, resolution.method) == ('Tripoli', 'first_known')


def test_no_substring_matching(zoned_store):
    resolver = ZoneResolver(zoned_store, default_zone='Tripoli')
    # Contains "مصراتة" but is a different municipality
    assert resolver.resolve('مصراتة الجديدة').zone == 'Tripoli'
    assert resolver.resolve('Trip').zone == 'Tripoli'
    assert resolver.resolve('Trip').method == 'default'


def test_empty_municipality_falls_back(zoned_store):
    assert ZoneResolver(zoned_store).resolve(None).method == 'first_known'


def test_no_zones_configured():
    with pytest.raises(NoZonesConfiguredError):
        ZoneResolver(PriceTableStore(sizes=['4x12'])).resolve('مصراتة')


@pytest.mark.parametrize("kwargs,expected", [
    ({'price_tier': 'b'}, ('B', 'explicit')),
    ({'price_tier': 'B', 'level': 'A'}, ('B', 'explicit')),
    ({'level': 'A'}, ('A', 'level')),
    ({'level': 'B+'}, ('B', 'level')),
    ({'level': 'C'}, ('A', 'default')),
    ({}, ('A', 'default')),
])
def test_tier_resolution(kwargs, expected):
    assert TierResolver().resolve(billboard('1', 'مصراتة', **kwargs)) == expected


def test_tier_resolution_default_override():
    resolver = TierResolver()
    assert resolver.resolve(billboard('1', 'مصراتة'), default_tier='B') == ('B', 'default')
    assert resolver.resolve(billboard('1', 'مصراتة', level='A'), default_tier='B') == ('A', 'level')
