"""
Pricing System - wires the store, registry, engine and collaborators together.

Constructed once per process and passed to whoever needs it; nothing in the
engine reaches for a global instance.
"""
import logging
from typing import Optional

from ..config.settings import Settings, get_settings
from ..data.defaults import build_default_document
from ..engine.errors import ValidationError
from ..engine.fabricator import ZoneFabricator
from ..engine.models import DurationPackage
from ..engine.multipliers import MunicipalityRegistry
from ..engine.packages import DurationCatalog
from ..engine.price_store import PriceTableStore
from ..engine.pricing_engine import PriceDerivationEngine
from ..engine.quote_assembler import QuoteAssembler
from ..policy.zone_resolver import TierResolver, ZoneResolver
from .inventory import InventoryFeed, SpreadsheetInventoryFeed, StaticInventoryFeed
from .persistence import JsonFileRepository, PricingRepository
from .reconciler import InventoryZoneReconciler

logger = logging.getLogger(__name__)


class PricingSystem:
    """Dependency root for the pricing engine."""

    def __init__(
        self,
        settings: Settings,
        store: PriceTableStore,
        municipalities: MunicipalityRegistry,
        packages: DurationCatalog,
        repository: PricingRepository,
        feed: InventoryFeed,
        currency: Optional[str] = None,
    ):
        self.settings = settings
        self.store = store
        self.municipalities = municipalities
        self.packages = packages
        self.repository = repository
        self.feed = feed
        self.currency = currency or settings.currency

        self.engine = PriceDerivationEngine(store, municipalities)
        self.fabricator = ZoneFabricator(store, municipalities, settings.template_zone)
        self.zone_resolver = ZoneResolver(store, settings.zone_aliases, settings.default_zone)
        self.tier_resolver = TierResolver(store.tiers)
        self.assembler = QuoteAssembler(
            self.engine,
            self.zone_resolver,
            self.tier_resolver,
            tax_rate=settings.tax_rate,
            currency=self.currency,
            validity_days=settings.quote_validity_days,
            block_unpriced=settings.block_unpriced_quotes,
        )
        self.reconciler = InventoryZoneReconciler(
            store, self.fabricator, feed, repository, document_provider=self.to_document
        )

    @classmethod
    def from_document(
        cls,
        document: dict,
        settings: Settings,
        repository: PricingRepository,
        feed: InventoryFeed,
    ) -> 'PricingSystem':
        return cls(
            settings=settings,
            store=PriceTableStore.from_document(document),
            municipalities=MunicipalityRegistry.from_document(document.get('municipalities')),
            packages=DurationCatalog.from_document(document.get('packages')),
            repository=repository,
            feed=feed,
            currency=document.get('currency'),
        )

    @classmethod
    async def load(
        cls,
        settings: Optional[Settings] = None,
        repository: Optional[PricingRepository] = None,
        feed: Optional[InventoryFeed] = None,
    ) -> 'PricingSystem':
        """Load the stored document, seeding a fresh one when nothing is stored yet."""
        settings = settings or get_settings()
        repository = repository or JsonFileRepository(settings.pricing_document)
        if feed is None:
            if settings.inventory_file:
                feed = SpreadsheetInventoryFeed(settings.inventory_file)
            else:
                logger.warning("INVENTORY_FILE not set; zone sync will see an empty inventory")
                feed = StaticInventoryFeed()

        document = await repository.load()
        if document is None:
            logger.info("No pricing document stored yet, starting from defaults")
            document = build_default_document(currency=settings.currency)

        system = cls.from_document(document, settings, repository, feed)
        logger.info(
            "Pricing system ready: %d zone(s), %d size(s), %d municipality(ies)",
            len(system.store.list_zones()), len(system.store.list_sizes()), len(system.municipalities)
        )
        return system

    def to_document(self) -> dict:
        document = {'currency': self.currency}
        document.update(self.store.to_document())
        document['municipalities'] = self.municipalities.to_document()
        document['packages'] = self.packages.to_document()
        return document

    async def save(self) -> None:
        await self.repository.save(self.to_document())

    def package_for(self, duration_value: int) -> DurationPackage:
        package = self.packages.get(duration_value)
        if package is None:
            valid = [p.duration_value for p in self.packages.packages()]
            raise ValidationError(f"No package for duration {duration_value}. Valid: {valid}")
        return package
