"""
Inventory feed collaborators - read-only sources of billboard records.
"""
import asyncio
import logging
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from ..engine.errors import ExternalIOFailure
from ..engine.models import BillboardRecord

logger = logging.getLogger(__name__)

# Accepted column headers per field, English first, then the Arabic export headers
COLUMN_ALIASES = {
    'billboard_id': ['billboard_id', 'id', 'ر.م', 'رقم اللوحة'],
    'name': ['name', 'اسم لوحة', 'اسم اللوحة'],
    'size': ['size', 'حجم', 'الحجم', 'المقاس', 'المقاس مع الدغاية'],
    'municipality': ['municipality', 'البلدية'],
    'city': ['city', 'مدينة', 'المدينة'],
    'area': ['area', 'منطقة', 'المنطقة'],
    'level': ['level', 'مستوى', 'المستوى', 'تصنيف'],
    'price_tier': ['price_tier', 'فئة السعر'],
}


def normalize_inventory_size(value) -> str:
    """'12X4 ' → '12x4'. Does not validate."""
    text = str(value or '').strip()
    for mark in ('X', '×', '*'):
        text = text.replace(mark, 'x')
    return text.replace(' ', '')


class InventoryFeed:
    """Interface for the live billboard inventory."""

    async def fetch(self) -> list[BillboardRecord]:
        raise NotImplementedError


class StaticInventoryFeed(InventoryFeed):
    """Serves a fixed list of records."""

    def __init__(self, records: Optional[Iterable[BillboardRecord]] = None):
        self.records = list(records or [])

    async def fetch(self) -> list[BillboardRecord]:
        return list(self.records)


class SpreadsheetInventoryFeed(InventoryFeed):
    """
    Reads billboards from a CSV or Excel export.

    Column headers may be English or the Arabic headers of the inventory
    workbook; see COLUMN_ALIASES.
    """

    def __init__(self, path: Path, sheet_name=0):
        self.path = Path(path)
        self.sheet_name = sheet_name

    def _read_frame(self) -> pd.DataFrame:
        if self.path.suffix.lower() == '.csv':
            return pd.read_csv(self.path, dtype=str)
        return pd.read_excel(self.path, sheet_name=self.sheet_name, dtype=str)

    async def fetch(self) -> list[BillboardRecord]:
        try:
            df = await asyncio.to_thread(self._read_frame)
        except (OSError, ValueError, ImportError) as exc:
            raise ExternalIOFailure(f"Failed to read inventory {self.path}: {exc}") from exc

        records = records_from_frame(df)
        logger.info("Read %d billboard(s) from %s", len(records), self.path)
        return records


def _resolve_columns(columns: Iterable[str]) -> dict[str, str]:
    """Map field name → actual column header present in the frame."""
    present = {str(c).strip(): c for c in columns}
    mapping = {}
    for field_name, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in present:
                mapping[field_name] = present[alias]
                break
    return mapping


def records_from_frame(df: pd.DataFrame) -> list[BillboardRecord]:
    """Convert an inventory frame into BillboardRecords."""
    mapping = _resolve_columns(df.columns)
    if 'size' not in mapping or 'municipality' not in mapping:
        raise ExternalIOFailure(
            f"Inventory is missing required columns (size, municipality); found {list(df.columns)}"
        )

    df = df.fillna('')
    records = []
    for index, row in enumerate(df.to_dict(orient='records')):
        def value(field_name: str) -> str:
            column = mapping.get(field_name)
            return str(row[column]).strip() if column is not None else ''

        records.append(BillboardRecord(
            billboard_id=value('billboard_id') or f"BILLBOARD-{index + 1}",
            name=value('name'),
            size=normalize_inventory_size(value('size')),
            municipality=value('municipality'),
            city=value('city') or None,
            area=value('area') or None,
            level=value('level') or None,
            price_tier=value('price_tier') or None,
        ))
    return records
