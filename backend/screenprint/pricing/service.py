import logging
import uuid
from typing import List

from .catalog import PricingCatalog, default_app_config
from .exceptions import (
    PricingTierNotFoundException,
    TierInUseException,
    PrintPricingNotFoundException,
    DuplicatePrintPricingException,
    AppConfigUpdateException,
)
from .interfaces.repositories import (
    AbstractPricingTierRepository,
    AbstractPrintPricingRepository,
    AbstractAppConfigRepository,
)
from .models import (
    PricingTierCreate, PricingTierUpdate, PricingTierRead,
    PrintPricingCreate, PrintPricingUpdate, PrintPricingRead,
    AppConfigUpdate, AppConfigRead,
)
from .tiers import validate_tier_range, check_no_overlap, find_coverage_gaps

logger = logging.getLogger(__name__)


class PricingAdminService:
    """Administration des tranches de prix, des tarifs d'impression et de la configuration globale."""

    def __init__(
        self,
        tier_repository: AbstractPricingTierRepository,
        print_pricing_repository: AbstractPrintPricingRepository,
        app_config_repository: AbstractAppConfigRepository,
        catalog: PricingCatalog,
    ):
        self.tier_repository = tier_repository
        self.print_pricing_repository = print_pricing_repository
        self.app_config_repository = app_config_repository
        self.catalog = catalog
        logger.info("PricingAdminService initialisé.")

    # --- Tranches ---

    async def _tiers_changed(self) -> None:
        """Invalide le catalogue et signale les quantités non couvertes."""
        self.catalog.invalidate()
        problems = find_coverage_gaps(await self.tier_repository.list_all())
        if problems:
            logger.warning(f"[PricingAdminService] Couverture des tranches incomplète: {'; '.join(problems)}")

    async def list_tiers(self) -> List[PricingTierRead]:
        tiers = await self.tier_repository.list_all()
        return [PricingTierRead.model_validate(t) for t in tiers]

    async def create_tier(self, tier_data: PricingTierCreate) -> PricingTierRead:
        logger.info(f"[PricingAdminService] Création tranche '{tier_data.name}' [{tier_data.min_qty}, {tier_data.max_qty}]")
        validate_tier_range(tier_data.min_qty, tier_data.max_qty)
        existing = await self.tier_repository.list_all()
        check_no_overlap(tier_data.min_qty, tier_data.max_qty, existing)

        tier = await self.tier_repository.create(tier_data)
        await self._tiers_changed()
        logger.info(f"[PricingAdminService] Tranche {tier.id} créée.")
        return PricingTierRead.model_validate(tier)

    async def update_tier(self, tier_id: uuid.UUID, tier_data: PricingTierUpdate) -> PricingTierRead:
        logger.info(f"[PricingAdminService] Mise à jour tranche {tier_id}")
        current = await self.tier_repository.get_by_id(tier_id)
        if current is None:
            raise PricingTierNotFoundException(tier_id)

        values = tier_data.model_dump(exclude_unset=True)
        min_qty = values.get("min_qty", current.min_qty)
        max_qty = values.get("max_qty", current.max_qty)
        if "min_qty" in values or "max_qty" in values:
            validate_tier_range(min_qty, max_qty)
            others = [t for t in await self.tier_repository.list_all() if t.id != tier_id]
            check_no_overlap(min_qty, max_qty, others)

        tier = await self.tier_repository.update(tier_id, values)
        if tier is None:
            raise PricingTierNotFoundException(tier_id)
        await self._tiers_changed()
        return PricingTierRead.model_validate(tier)

    async def delete_tier(self, tier_id: uuid.UUID) -> None:
        logger.info(f"[PricingAdminService] Suppression tranche {tier_id}")
        if await self.tier_repository.get_by_id(tier_id) is None:
            raise PricingTierNotFoundException(tier_id)

        in_use = await self.tier_repository.count_garments_using_tier(tier_id)
        if in_use:
            logger.warning(f"[PricingAdminService] Tranche {tier_id} utilisée par {in_use} vêtement(s), suppression refusée.")
            raise TierInUseException(tier_id)

        await self.tier_repository.delete(tier_id)
        await self._tiers_changed()

    # --- Tarifs d'impression ---

    async def list_print_pricing(self) -> List[PrintPricingRead]:
        rows = await self.print_pricing_repository.list_all()
        return [PrintPricingRead.model_validate(r) for r in rows]

    async def create_print_pricing(self, pricing_data: PrintPricingCreate) -> PrintPricingRead:
        logger.info(f"[PricingAdminService] Création tarif impression tranche={pricing_data.tier_id} couleurs={pricing_data.num_colors}")
        if await self.tier_repository.get_by_id(pricing_data.tier_id) is None:
            raise PricingTierNotFoundException(pricing_data.tier_id)
        existing = await self.print_pricing_repository.get_by_tier_and_colors(pricing_data.tier_id, pricing_data.num_colors)
        if existing is not None:
            raise DuplicatePrintPricingException(pricing_data.tier_id, pricing_data.num_colors)

        row = await self.print_pricing_repository.create(pricing_data)
        self.catalog.invalidate()
        return PrintPricingRead.model_validate(row)

    async def update_print_pricing(self, print_pricing_id: uuid.UUID, pricing_data: PrintPricingUpdate) -> PrintPricingRead:
        logger.info(f"[PricingAdminService] Mise à jour tarif impression {print_pricing_id}")
        current = await self.print_pricing_repository.get_by_id(print_pricing_id)
        if current is None:
            raise PrintPricingNotFoundException(print_pricing_id)

        values = pricing_data.model_dump(exclude_unset=True)
        tier_id = values.get("tier_id", current.tier_id)
        num_colors = values.get("num_colors", current.num_colors)
        if "tier_id" in values and await self.tier_repository.get_by_id(tier_id) is None:
            raise PricingTierNotFoundException(tier_id)
        if "tier_id" in values or "num_colors" in values:
            clash = await self.print_pricing_repository.get_by_tier_and_colors(tier_id, num_colors)
            if clash is not None and clash.id != print_pricing_id:
                raise DuplicatePrintPricingException(tier_id, num_colors)

        row = await self.print_pricing_repository.update(print_pricing_id, values)
        if row is None:
            raise PrintPricingNotFoundException(print_pricing_id)
        self.catalog.invalidate()
        return PrintPricingRead.model_validate(row)

    async def delete_print_pricing(self, print_pricing_id: uuid.UUID) -> None:
        logger.info(f"[PricingAdminService] Suppression tarif impression {print_pricing_id}")
        deleted = await self.print_pricing_repository.delete(print_pricing_id)
        if not deleted:
            raise PrintPricingNotFoundException(print_pricing_id)
        self.catalog.invalidate()

    # --- Configuration globale ---

    async def get_app_config(self) -> AppConfigRead:
        config = await self.app_config_repository.get()
        if config is None:
            return default_app_config()
        return AppConfigRead.model_validate(config)

    async def update_app_config(self, config_data: AppConfigUpdate) -> AppConfigRead:
        values = config_data.model_dump(exclude_unset=True)
        logger.info(f"[PricingAdminService] Mise à jour app_config: {values}")
        if not values:
            return await self.get_app_config()
        try:
            config = await self.app_config_repository.upsert(values)
        except Exception as e:
            logger.error(f"[PricingAdminService] Erreur lors de la mise à jour de app_config: {e}", exc_info=True)
            raise AppConfigUpdateException(f"Erreur interne lors de la mise à jour de la configuration: {e}")
        self.catalog.invalidate()
        return AppConfigRead.model_validate(config)
