import logging
import uuid
from decimal import Decimal
from typing import List, Optional, Sequence

from screenprint.garments.exceptions import GarmentNotFoundException
from screenprint.garments.interfaces.repositories import AbstractGarmentRepository
from screenprint.pricing.catalog import PricingCatalog, CatalogSnapshot
from screenprint.pricing.utils import split_deposit
from .calculator import GarmentCost, PrintCost, garment_cost, print_cost
from .exceptions import MinimumQuantityException
from .models import (
    PrintConfig,
    GarmentQuantity,
    QuoteResponse,
    MultiGarmentQuoteResponse,
    GarmentBreakdownItem,
    CampaignPriceResponse,
)

logger = logging.getLogger(__name__)


class QuoteService:
    """Service applicatif de calcul des devis (un vêtement, multi-vêtements, campagnes)."""

    def __init__(self, garment_repository: AbstractGarmentRepository, catalog: PricingCatalog):
        self.garment_repository = garment_repository
        self.catalog = catalog
        logger.info("QuoteService initialisé.")

    async def _snapshot(self, snapshot: Optional[CatalogSnapshot]) -> CatalogSnapshot:
        if snapshot is not None:
            return snapshot
        return await self.catalog.get_snapshot()

    async def _active_base_cost(self, garment_id: uuid.UUID) -> Decimal:
        garment = await self.garment_repository.get_active(garment_id)
        if garment is None:
            raise GarmentNotFoundException(garment_id)
        return garment.base_cost

    @staticmethod
    def _check_minimum(quantity: int, snapshot: CatalogSnapshot) -> None:
        minimum = snapshot.min_order_quantity
        if quantity < minimum:
            raise MinimumQuantityException(quantity, minimum)

    async def calculate_garment_cost(
        self,
        garment_id: uuid.UUID,
        quantity: int,
        snapshot: Optional[CatalogSnapshot] = None,
    ) -> GarmentCost:
        """Coût vêtement pour `quantity` pièces. Le minimum de commande n'est pas vérifié ici."""
        snapshot = await self._snapshot(snapshot)
        base_cost = await self._active_base_cost(garment_id)
        return garment_cost(snapshot, base_cost, quantity)

    async def calculate_print_cost(
        self,
        total_quantity: int,
        print_config: PrintConfig,
        snapshot: Optional[CatalogSnapshot] = None,
    ) -> PrintCost:
        snapshot = await self._snapshot(snapshot)
        return print_cost(snapshot, total_quantity, print_config)

    async def calculate_quote(
        self,
        garment_id: uuid.UUID,
        quantity: int,
        print_config: PrintConfig,
        snapshot: Optional[CatalogSnapshot] = None,
    ) -> QuoteResponse:
        logger.debug(f"[QuoteService] Quote garment={garment_id} qty={quantity}")
        snapshot = await self._snapshot(snapshot)
        self._check_minimum(quantity, snapshot)

        garment = await self.calculate_garment_cost(garment_id, quantity, snapshot)
        printing = print_cost(snapshot, quantity, print_config)

        total = garment.total_cost + printing.total_cost
        deposit, balance = split_deposit(total, snapshot.deposit_percentage)
        return QuoteResponse(
            garment_cost=garment.total_cost,
            garment_cost_per_shirt=garment.cost_per_shirt,
            print_cost=printing.net_cost,
            print_cost_per_shirt=printing.cost_per_shirt,
            setup_fees=printing.setup_fees,
            total_screens=printing.total_screens,
            subtotal=total,
            total=total,
            per_shirt_price=total / quantity,
            deposit_amount=deposit,
            balance_due=balance,
        )

    async def calculate_multi_garment_quote(
        self,
        garments: Sequence[GarmentQuantity],
        print_config: PrintConfig,
        snapshot: Optional[CatalogSnapshot] = None,
    ) -> MultiGarmentQuoteResponse:
        """
        Devis pour plusieurs vêtements partageant une même impression.

        Chaque vêtement est tarifé à la tranche de la quantité totale; le
        coût d'impression est calculé une seule fois sur cette quantité.
        """
        snapshot = await self._snapshot(snapshot)
        lines = [line for line in garments if line.quantity > 0]
        total_quantity = sum(line.quantity for line in lines)
        logger.debug(f"[QuoteService] Multi-garment quote: {len(lines)} ligne(s), qty totale={total_quantity}")
        self._check_minimum(total_quantity, snapshot)

        records = await self.garment_repository.get_active_many(line.garment_id for line in lines)
        for line in lines:
            if line.garment_id not in records:
                raise GarmentNotFoundException(line.garment_id)

        tier = snapshot.tier_for_quantity(total_quantity)
        breakdown: List[GarmentBreakdownItem] = []
        garment_total = Decimal(0)
        for line in lines:
            record = records[line.garment_id]
            cost = garment_cost(snapshot, record.base_cost, line.quantity, tier=tier)
            garment_total += cost.total_cost
            breakdown.append(GarmentBreakdownItem(
                garment_id=line.garment_id,
                name=record.name,
                quantity=line.quantity,
                cost_per_shirt=cost.cost_per_shirt,
                total=cost.total_cost,
            ))

        printing = print_cost(snapshot, total_quantity, print_config, tier=tier)
        total = garment_total + printing.total_cost
        deposit, balance = split_deposit(total, snapshot.deposit_percentage)
        return MultiGarmentQuoteResponse(
            garment_cost=garment_total,
            # Moyenne pondérée sur l'ensemble des pièces
            garment_cost_per_shirt=garment_total / total_quantity,
            print_cost=printing.net_cost,
            print_cost_per_shirt=printing.cost_per_shirt,
            setup_fees=printing.setup_fees,
            total_screens=printing.total_screens,
            subtotal=total,
            total=total,
            per_shirt_price=total / total_quantity,
            deposit_amount=deposit,
            balance_due=balance,
            total_quantity=total_quantity,
            garment_breakdown=breakdown,
        )

    async def calculate_campaign_prices(
        self,
        garment_ids: Sequence[uuid.UUID],
        print_config: PrintConfig,
    ) -> CampaignPriceResponse:
        """
        Prix unitaire affiché pendant une campagne: tranche la plus basse,
        coût vêtement + coût d'impression par pièce, sans frais de setup.
        """
        snapshot = await self.catalog.get_snapshot()
        tier = snapshot.lowest_tier()
        records = await self.garment_repository.get_active_many(garment_ids)

        # Indépendant du vêtement: calculé une fois
        printing = print_cost(snapshot, tier.min_qty or 1, print_config, tier=tier)

        prices = {}
        missing: List[uuid.UUID] = []
        for garment_id in garment_ids:
            record = records.get(garment_id)
            if record is None:
                if garment_id not in missing:
                    missing.append(garment_id)
                continue
            cost = garment_cost(snapshot, record.base_cost, tier.min_qty or 1, tier=tier)
            prices[garment_id] = cost.cost_per_shirt + printing.cost_per_shirt

        if missing:
            logger.warning(f"[QuoteService] Vêtements introuvables pour la campagne: {missing}")
        return CampaignPriceResponse(prices=prices, missing_garments=missing)
