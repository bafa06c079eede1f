import pytest

from billboard_pricing.engine.errors import ValidationError
from billboard_pricing.engine.models import Municipality
from billboard_pricing.engine.multipliers import MunicipalityRegistry, validate_multiplier


def test_unknown_zone_resolves_to_one(registry):
    assert registry.multiplier_for('مدينة غير معروفة') == 1.0
    assert registry.multiplier_for(None) == 1.0
    assert registry.get('مدينة غير معروفة') is None


def test_known_zone_multiplier(registry):
    assert registry.multiplier_for('زليتن') == 0.8
    assert registry.multiplier_for('بنغازي') == 1.2


def test_names_match_case_insensitively():
    registry = MunicipalityRegistry([Municipality('Tripoli', 1.1)])
    assert registry.multiplier_for('tripoli') == 1.1
    assert registry.multiplier_for(' TRIPOLI ') == 1.1
    assert 'tRiPoLi' in registry


@pytest.mark.parametrize("bad", [0, -1, 'abc', float('nan')])
def test_non_positive_or_invalid_multiplier_rejected(bad):
    registry = MunicipalityRegistry()
    with pytest.raises(ValidationError):
        registry.add(Municipality('Sabha', bad))
    assert len(registry) == 0


def test_out_of_range_multiplier_warns_but_is_accepted():
    registry = MunicipalityRegistry()
    check = registry.add(Municipality('Ghat', 12.0))
    assert check.valid
    assert check.warnings
    assert registry.multiplier_for('Ghat') == 12.0


def test_validate_multiplier_range():
    assert validate_multiplier(1.0).warnings == []
    assert validate_multiplier(0.05).warnings
    assert not validate_multiplier(0).valid


def test_duplicate_municipality_rejected(registry):
    with pytest.raises(ValidationError, match="already exists"):
        registry.add(Municipality('زليتن', 0.7))


def test_update_changes_multiplier(registry):
    registry.update('زليتن', {'multiplier': 0.9})
    assert registry.multiplier_for('زليتن') == 0.9
    assert registry.get('زليتن').region == 'مصراتة'


def test_update_rename(registry):
    registry.update('سرت', {'name': 'Sirte'})
    assert 'سرت' not in registry
    assert registry.multiplier_for('Sirte') == 0.85


def test_update_missing_municipality(registry):
    with pytest.raises(ValidationError, match="not found"):
        registry.update('Nowhere', {'multiplier': 1.5})


def test_update_rejects_bad_multiplier_without_change(registry):
    with pytest.raises(ValidationError):
        registry.update('زليتن', {'multiplier': -2})
    assert registry.multiplier_for('زليتن') == 0.8


def test_remove(registry):
    removed = registry.remove('الخمس')
    assert removed.multiplier == 0.9
    assert registry.multiplier_for('الخمس') == 1.0


def test_search_by_region(registry):
    names = {m.name for m in registry.search('مصراتة')}
    assert names == {'مصراتة', 'زليتن', 'الخمس'}


def test_document_round_trip(registry):
    restored = MunicipalityRegistry.from_document(registry.to_document())
    assert [m.to_dict() for m in restored.all()] == [m.to_dict() for m in registry.all()]
