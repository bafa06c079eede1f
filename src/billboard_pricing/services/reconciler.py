"""
Inventory-Zone Reconciler - keeps priced zones in step with the inventory.

A run moves through:
IDLE → EXTRACTING_MUNICIPALITIES → DIFFING → FABRICATING_MISSING_ZONES
→ PERSISTING → DONE, or FAILED from any state.

Re-running with no inventory change is a no-op: zones are only ever added,
never changed or removed.
"""
import asyncio
import logging
from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Callable, Iterable, Optional

from ..data.defaults import UNSPECIFIED_MARKERS
from ..engine.errors import ExternalIOFailure, PricingError
from ..engine.fabricator import ZoneFabricator
from ..engine.models import BillboardRecord
from ..engine.price_store import PriceTableStore, is_valid_size
from .inventory import InventoryFeed
from .persistence import PricingRepository

logger = logging.getLogger(__name__)


class SyncState(str, Enum):
    IDLE = 'idle'
    EXTRACTING_MUNICIPALITIES = 'extracting_municipalities'
    DIFFING = 'diffing'
    FABRICATING_MISSING_ZONES = 'fabricating_missing_zones'
    PERSISTING = 'persisting'
    DONE = 'done'
    FAILED = 'failed'


@dataclass
class SyncReport:
    """Outcome of an analysis or a synchronization run."""
    total_municipalities: int = 0
    existing_zone_names: list[str] = field(default_factory=list)
    missing_zone_names: list[str] = field(default_factory=list)
    newly_created_zone_names: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    success: bool = False
    state: SyncState = SyncState.IDLE

    @property
    def needs_sync(self) -> bool:
        return bool(set(self.missing_zone_names) - set(self.newly_created_zone_names))

    def to_dict(self) -> dict:
        data = asdict(self)
        data['state'] = self.state.value
        return data


@dataclass
class SizeSyncReport:
    sizes_found: list[str] = field(default_factory=list)
    sizes_added: list[str] = field(default_factory=list)
    invalid_sizes: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


def extract_municipalities(records: Iterable[BillboardRecord]) -> set[str]:
    """Distinct, trimmed, non-empty municipality names without sentinel markers."""
    markers = {m.casefold() for m in UNSPECIFIED_MARKERS}
    names = set()
    for record in records:
        name = str(record.municipality or '').strip()
        if name and name.casefold() not in markers:
            names.add(name)
    return names


class InventoryZoneReconciler:
    """Fabricates a price table for every inventory municipality that lacks one."""

    def __init__(
        self,
        store: PriceTableStore,
        fabricator: ZoneFabricator,
        feed: InventoryFeed,
        repository: PricingRepository,
        document_provider: Optional[Callable[[], dict]] = None,
    ):
        self.store = store
        self.fabricator = fabricator
        self.feed = feed
        self.repository = repository
        self.document_provider = document_provider or store.to_document
        self.state = SyncState.IDLE

    def _enter(self, report: SyncReport, state: SyncState):
        report.state = state
        self.state = state
        logger.debug("Zone sync → %s", state.value)

    async def _extract(self, report: SyncReport) -> set[str]:
        self._enter(report, SyncState.EXTRACTING_MUNICIPALITIES)
        records = await self.feed.fetch()
        names = extract_municipalities(records)
        report.total_municipalities = len(names)

        self._enter(report, SyncState.DIFFING)
        # Zone names compare case-insensitively, as in ZoneResolver
        existing = {zone.casefold() for zone in self.store.list_zones()}
        missing: dict[str, str] = {}
        for name in sorted(names):
            if name.casefold() not in existing:
                missing.setdefault(name.casefold(), name)
        report.existing_zone_names = sorted(n for n in names if n.casefold() in existing)
        report.missing_zone_names = sorted(missing.values())
        return names

    async def analyze(self) -> SyncReport:
        """Extract and diff only; the store is not touched."""
        report = SyncReport()
        try:
            await self._extract(report)
        except (ExternalIOFailure, asyncio.CancelledError):
            self._enter(report, SyncState.FAILED)
            logger.exception("Zone analysis failed")
            raise
        report.success = True
        self._enter(report, SyncState.DONE)
        return report

    async def run(self) -> SyncReport:
        """
        Full synchronization run.

        Per-zone fabrication failures are collected in `report.errors` and do
        not stop the run. Feed and persistence failures mark the run FAILED
        and propagate; zones already written to the store stay there.
        """
        report = SyncReport()
        try:
            await self._extract(report)

            if not report.missing_zone_names:
                logger.info(
                    "All %d municipalities already priced, nothing to sync",
                    report.total_municipalities
                )
            else:
                self._enter(report, SyncState.FABRICATING_MISSING_ZONES)
                for zone in report.missing_zone_names:
                    try:
                        self.fabricator.fabricate(zone)
                    except PricingError as exc:
                        logger.warning("Failed to create zone %s: %s", zone, exc)
                        report.errors.append(f"Failed to create zone {zone}: {exc}")
                        continue
                    report.newly_created_zone_names.append(zone)

                if report.newly_created_zone_names:
                    self._enter(report, SyncState.PERSISTING)
                    await self.repository.save(self.document_provider())
        except (ExternalIOFailure, asyncio.CancelledError):
            self._enter(report, SyncState.FAILED)
            logger.exception("Zone synchronization failed")
            raise

        report.success = True
        self._enter(report, SyncState.DONE)
        logger.info(
            "Zone sync done: %d municipalities, %d created, %d error(s)",
            report.total_municipalities, len(report.newly_created_zone_names), len(report.errors)
        )
        return report

    async def sync_sizes(self) -> SizeSyncReport:
        """Add every valid inventory size to the store. Additive and idempotent."""
        records = await self.feed.fetch()
        report = SizeSyncReport()
        found = sorted({str(r.size or '').strip() for r in records if str(r.size or '').strip()})

        for size in found:
            if not is_valid_size(size):
                report.invalid_sizes.append(size)
                continue
            report.sizes_found.append(size)
            if self.store.add_size(size):
                report.sizes_added.append(size)

        if report.invalid_sizes:
            logger.warning("Ignored invalid inventory sizes: %s", ", ".join(report.invalid_sizes))
        if report.sizes_added:
            await self.repository.save(self.document_provider())
        return report
