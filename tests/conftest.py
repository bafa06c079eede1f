import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from billboard_pricing.config.settings import Settings
from billboard_pricing.data.defaults import DEFAULT_MUNICIPALITIES
from billboard_pricing.engine.models import BillboardRecord, Municipality, PriceTable
from billboard_pricing.engine.multipliers import MunicipalityRegistry
from billboard_pricing.engine.price_store import PriceTableStore
from billboard_pricing.engine.pricing_engine import PriceDerivationEngine


def make_table(name: str, large: float = 2800, small: float = 800) -> PriceTable:
    """Hand-entered table over 4x12 and 3x4 with a sane duration ladder."""
    return PriceTable(
        name=name,
        category_prices={
            'individual': {'4x12': large, '3x4': small},
            'marketer': {'4x12': large - 400, '3x4': small - 100},
            'company': {'4x12': large + 400, '3x4': small + 100},
        },
        tier_prices={
            'A': {
                1: {'4x12': large, '3x4': small},
                3: {'4x12': large * 0.95, '3x4': small * 0.95},
                6: {'4x12': large * 0.9, '3x4': small * 0.9},
                12: {'4x12': large * 0.8, '3x4': small * 0.8},
            },
            'B': {
                1: {'4x12': 3360, '3x4': 960},
                3: {'4x12': 3200, '3x4': 900},
                6: {'4x12': 3000, '3x4': 860},
                12: {'4x12': 2700, '3x4': 770},
            },
        },
    )


def billboard(billboard_id: str, municipality: str, size: str = '4x12', **kwargs) -> BillboardRecord:
    return BillboardRecord(billboard_id=billboard_id, size=size, municipality=municipality, **kwargs)


@pytest.fixture
def store():
    return PriceTableStore(sizes=['4x12', '3x4'], zones=[make_table('مصراتة')])


@pytest.fixture
def registry():
    return MunicipalityRegistry(Municipality.from_dict(m) for m in DEFAULT_MUNICIPALITIES)


@pytest.fixture
def engine(store, registry):
    return PriceDerivationEngine(store, registry)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        project_root=tmp_path,
        data_dir=tmp_path,
        pricing_document=tmp_path / 'pricing.json',
    )
