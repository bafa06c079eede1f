import json
import logging

import pytest

from billboard_pricing.config import logging_config
from billboard_pricing.config.settings import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('PRICING_DATA_DIR', 'PRICING_DOCUMENT', 'INVENTORY_FILE', 'TAX_RATE', 'CURRENCY',
                 'DEFAULT_ZONE', 'TEMPLATE_ZONE', 'ZONE_ALIASES_FILE', 'QUOTE_VALIDITY_DAYS',
                 'BLOCK_UNPRICED_QUOTES', 'LOG_LEVEL'):
        monkeypatch.delenv(name, raising=False)


def test_defaults(tmp_path):
    settings = Settings.load(project_root=tmp_path, load_env=False)
    assert settings.data_dir == tmp_path / 'data'
    assert settings.pricing_document == tmp_path / 'data' / 'pricing.json'
    assert settings.tax_rate == 0.0
    assert settings.quote_validity_days == 30
    assert settings.block_unpriced_quotes is False
    assert settings.default_zone is None
    assert settings.zone_aliases == {}


def test_environment_overrides(tmp_path, monkeypatch):
    aliases = tmp_path / 'aliases.json'
    aliases.write_text(json.dumps({'Misrata': 'مصراتة'}), encoding='utf-8')
    monkeypatch.setenv('TAX_RATE', '0.15')
    monkeypatch.setenv('DEFAULT_ZONE', 'مصراتة')
    monkeypatch.setenv('BLOCK_UNPRICED_QUOTES', 'true')
    monkeypatch.setenv('QUOTE_VALIDITY_DAYS', '14')
    monkeypatch.setenv('ZONE_ALIASES_FILE', str(aliases))
    monkeypatch.setenv('INVENTORY_FILE', str(tmp_path / 'billboards.xlsx'))

    settings = Settings.load(project_root=tmp_path, load_env=False)

    assert settings.tax_rate == 0.15
    assert settings.default_zone == 'مصراتة'
    assert settings.block_unpriced_quotes is True
    assert settings.quote_validity_days == 14
    assert settings.zone_aliases == {'Misrata': 'مصراتة'}
    assert settings.inventory_file == tmp_path / 'billboards.xlsx'


@pytest.mark.parametrize("name,value", [
    ('TAX_RATE', 'ten percent'),
    ('TAX_RATE', '-0.1'),
    ('QUOTE_VALIDITY_DAYS', 'soon'),
])
def test_invalid_values_fail_fast(tmp_path, monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(RuntimeError):
        Settings.load(project_root=tmp_path, load_env=False)


def test_configure_logging_applies_level_once(tmp_path, monkeypatch):
    monkeypatch.setattr(logging_config, '_LOGGING_CONFIGURED', False)
    calls = []
    monkeypatch.setattr(logging, 'basicConfig', lambda **kwargs: calls.append(kwargs))

    settings = Settings.load(project_root=tmp_path, load_env=False)
    settings.log_level = 'debug'
    logging_config.configure_logging(settings)
    logging_config.configure_logging(settings)

    assert len(calls) == 1
    assert calls[0]['level'] == logging.DEBUG
    assert '%(name)s' in calls[0]['format']
