import asyncio

import pytest

from billboard_pricing.engine.errors import (
    DuplicatePackageError,
    LastZoneError,
    UnknownZoneError,
    ZoneExistsError,
)
from billboard_pricing.engine.models import DurationPackage, Municipality, TierDurationView
from billboard_pricing.services.inventory import StaticInventoryFeed
from billboard_pricing.services.persistence import InMemoryRepository
from billboard_pricing.services.system import PricingSystem
from billboard_pricing.services.zone_service import ZoneAdminService


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def service(settings, repository):
    system = asyncio.run(PricingSystem.load(settings, repository, StaticInventoryFeed()))
    return ZoneAdminService(system)


def test_create_zone_from_baseline_is_persisted(service, repository):
    table = asyncio.run(service.create_zone('طرابلس'))

    assert table.category_prices['individual']['4x12'] == 2800
    assert repository.save_count == 1
    assert 'طرابلس' in repository.document['zones']
    assert service.list_zones() == [{
        'name': 'طرابلس', 'multiplier': 1.0, 'applied_multiplier': 1.0, 'has_municipality': True,
    }]


def test_create_existing_zone_rejected(service):
    asyncio.run(service.create_zone('طرابلس'))
    with pytest.raises(ZoneExistsError):
        asyncio.run(service.create_zone('طرابلس'))


def test_remove_last_zone_rejected(service, repository):
    asyncio.run(service.create_zone('طرابلس'))
    with pytest.raises(LastZoneError):
        asyncio.run(service.remove_zone('طرابلس'))
    assert repository.save_count == 1


def test_set_price_reports_monotonicity(service):
    asyncio.run(service.create_zone('طرابلس'))
    result = asyncio.run(service.set_price('طرابلس', TierDurationView('A', 12), '4x12', 5000))

    assert result.valid
    assert result.warnings
    assert service.get_zone('طرابلس').tier_prices['A'][12]['4x12'] == 5000


def test_set_price_unknown_zone(service):
    with pytest.raises(UnknownZoneError):
        asyncio.run(service.set_price('غدامس', TierDurationView('A', 1), '4x12', 100))


def test_add_and_remove_size(service, repository):
    assert asyncio.run(service.add_size('6x14')) is True
    assert asyncio.run(service.add_size('6x14')) is False
    assert repository.save_count == 1

    asyncio.run(service.remove_size('6x14'))
    assert '6x14' not in repository.document['sizes']


def test_set_installation_price(service, repository):
    asyncio.run(service.set_installation_price('3x4', 450))
    assert repository.document['installation_prices']['3x4'] == 450


def test_municipality_edits(service, repository):
    result = asyncio.run(service.add_municipality(Municipality('غدامس', 15.0)))
    assert result.warnings

    asyncio.run(service.update_municipality('غدامس', {'multiplier': 1.3}))
    assert service.system.municipalities.multiplier_for('غدامس') == 1.3

    asyncio.run(service.remove_municipality('غدامس'))
    names = {m['name'] for m in repository.document['municipalities']}
    assert 'غدامس' not in names


def test_package_edits(service):
    with pytest.raises(DuplicatePackageError):
        asyncio.run(service.add_package(DurationPackage(3, 'ثلاثة أشهر', 5)))

    result = asyncio.run(service.add_package(DurationPackage(24, 'سنتان', 15)))
    # 15% for 24 months is lower than 20% for 12 months
    assert result.warnings

    removed = asyncio.run(service.remove_package(24))
    assert removed.unit_label == 'سنتان'


def test_stats(service):
    asyncio.run(service.create_zone('طرابلس'))
    stats = service.get_stats()

    assert stats['total_zones'] == 1
    assert stats['total_sizes'] == 6
    assert stats['zones_with_municipality'] == 1
    assert stats['unpriced_entries'] == 0
    assert stats['average_prices']['A']['4x12'] == 2800
