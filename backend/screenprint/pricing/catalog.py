"""
Accès en lecture au catalogue tarifaire (tranches, tarifs d'impression, configuration).

Le catalogue est chargé en une fois sous forme d'instantané immuable, mis en
cache (TTL) et relu avec un nombre borné de tentatives en cas d'erreur
transitoire de la base.
"""
import logging
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from screenprint.core.cache import TTLCache
from screenprint.core.retry import retry_async
from screenprint.pricing.config import settings as pricing_settings
from screenprint.pricing.exceptions import ConfigurationGapException
from screenprint.pricing.interfaces.repositories import (
    AbstractPricingTierRepository,
    AbstractPrintPricingRepository,
    AbstractAppConfigRepository,
)
from screenprint.pricing.models import PricingTierRead, PrintPricingRead, AppConfigRead
from screenprint.pricing.tiers import find_tier_for_quantity, lowest_tier, sort_tiers

logger = logging.getLogger(__name__)

CATALOG_CACHE_KEY = "pricing_catalog"


@dataclass(frozen=True)
class CatalogSnapshot:
    tiers: List[PricingTierRead]
    print_pricing: List[PrintPricingRead]
    app_config: AppConfigRead
    _print_index: Dict[Tuple[uuid.UUID, int], PrintPricingRead] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        # dataclass gelée: on remplit l'index via object.__setattr__
        index = {(row.tier_id, row.num_colors): row for row in self.print_pricing}
        object.__setattr__(self, "_print_index", index)
        object.__setattr__(self, "tiers", sort_tiers(self.tiers))

    @property
    def deposit_percentage(self) -> Decimal:
        return self.app_config.deposit_percentage

    @property
    def min_order_quantity(self) -> int:
        return self.app_config.min_order_quantity

    def tier_for_quantity(self, quantity: int) -> PricingTierRead:
        return find_tier_for_quantity(self.tiers, quantity)

    def lowest_tier(self) -> PricingTierRead:
        return lowest_tier(self.tiers)

    def print_pricing_for(self, tier: PricingTierRead, num_colors: int) -> PrintPricingRead:
        row = self._print_index.get((tier.id, num_colors))
        if row is None:
            logger.critical(f"[PricingCatalog] Aucun tarif d'impression pour la tranche '{tier.name}' et {num_colors} couleur(s).")
            raise ConfigurationGapException(
                f"Aucun tarif d'impression pour la tranche '{tier.name}' et {num_colors} couleur(s).",
                num_colors=num_colors,
            )
        return row


def default_app_config() -> AppConfigRead:
    return AppConfigRead(
        deposit_percentage=pricing_settings.DEFAULT_DEPOSIT_PERCENTAGE,
        min_order_quantity=pricing_settings.DEFAULT_MIN_ORDER_QUANTITY,
        max_ink_colors=pricing_settings.DEFAULT_MAX_INK_COLORS,
    )


class PricingCatalog:
    """Fournit l'instantané du catalogue tarifaire, depuis le cache ou la base."""

    def __init__(
        self,
        tier_repository: AbstractPricingTierRepository,
        print_pricing_repository: AbstractPrintPricingRepository,
        app_config_repository: AbstractAppConfigRepository,
        cache: Optional[TTLCache] = None,
    ):
        self.tier_repository = tier_repository
        self.print_pricing_repository = print_pricing_repository
        self.app_config_repository = app_config_repository
        self.cache = cache

    async def get_snapshot(self) -> CatalogSnapshot:
        if self.cache is not None:
            cached = self.cache.get(CATALOG_CACHE_KEY)
            if cached is not None:
                return cached

        snapshot = await retry_async(
            self._load,
            attempts=pricing_settings.CATALOG_RETRY_ATTEMPTS,
            delay=pricing_settings.CATALOG_RETRY_DELAY,
            label="chargement du catalogue tarifaire",
        )
        if self.cache is not None:
            self.cache.set(CATALOG_CACHE_KEY, snapshot)
        return snapshot

    async def _load(self) -> CatalogSnapshot:
        logger.debug("[PricingCatalog] Chargement du catalogue depuis la base")
        tiers = await self.tier_repository.list_all()
        rows = await self.print_pricing_repository.list_all()
        config = await self.app_config_repository.get()
        if config is None:
            logger.warning("[PricingCatalog] Aucune ligne app_config, utilisation des valeurs par défaut.")
            app_config = default_app_config()
        else:
            app_config = AppConfigRead.model_validate(config)
        return CatalogSnapshot(
            tiers=[PricingTierRead.model_validate(t) for t in tiers],
            print_pricing=[PrintPricingRead.model_validate(r) for r in rows],
            app_config=app_config,
        )

    def invalidate(self) -> None:
        if self.cache is not None:
            self.cache.invalidate(CATALOG_CACHE_KEY)
