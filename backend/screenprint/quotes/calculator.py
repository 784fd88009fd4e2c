"""
Calculs de coût vêtement et impression.

Fonctions pures sur un instantané du catalogue: aucune lecture en base,
aucun arrondi intermédiaire (seuls l'acompte et les réductions sont
arrondis, par les appelants).
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from screenprint.pricing.catalog import CatalogSnapshot
from screenprint.pricing.models import PricingTierRead
from screenprint.pricing.utils import to_decimal
from screenprint.quotes.exceptions import QuoteValidationException, NoPrintLocationException
from screenprint.quotes.models import PrintConfig

logger = logging.getLogger(__name__)

HUNDRED = Decimal(100)


@dataclass(frozen=True)
class GarmentCost:
    total_cost: Decimal
    cost_per_shirt: Decimal
    tier_name: str


@dataclass(frozen=True)
class PrintCost:
    total_cost: Decimal
    cost_per_shirt: Decimal
    setup_fees: Decimal
    total_screens: int
    tier_name: str

    @property
    def net_cost(self) -> Decimal:
        """Coût d'impression hors frais de setup."""
        return self.total_cost - self.setup_fees


def _check_quantity(quantity: int) -> None:
    if quantity <= 0:
        raise QuoteValidationException(f"Quantity must be a positive integer (got {quantity}).")


def garment_cost(
    catalog: CatalogSnapshot,
    base_cost: Decimal,
    quantity: int,
    tier: Optional[PricingTierRead] = None,
) -> GarmentCost:
    """
    Coût vêtement: base_cost majoré de la marge de la tranche.

    La tranche est celle de `quantity` sauf si `tier` est fourni (prix de
    campagne, multi-vêtements au volume agrégé).
    """
    _check_quantity(quantity)
    if tier is None:
        tier = catalog.tier_for_quantity(quantity)
    markup = to_decimal(tier.garment_markup_percentage)
    cost_per_shirt = to_decimal(base_cost) * (1 + markup / HUNDRED)
    return GarmentCost(
        total_cost=cost_per_shirt * quantity,
        cost_per_shirt=cost_per_shirt,
        tier_name=tier.name,
    )


def print_cost(
    catalog: CatalogSnapshot,
    quantity: int,
    print_config: PrintConfig,
    tier: Optional[PricingTierRead] = None,
) -> PrintCost:
    """
    Coût d'impression pour la quantité totale de la commande.

    Par emplacement actif: tarif (tranche, nombre de couleurs) ajouté au coût
    par pièce, et un frais de setup par écran (une couleur = un écran).
    """
    _check_quantity(quantity)
    locations = print_config.enabled_locations()
    if not locations:
        raise NoPrintLocationException()
    if tier is None:
        tier = catalog.tier_for_quantity(quantity)

    cost_per_shirt = Decimal(0)
    setup_fees = Decimal(0)
    for location, config in locations.items():
        row = catalog.print_pricing_for(tier, config.num_colors)
        cost_per_shirt += to_decimal(row.cost_per_shirt)
        setup_fees += to_decimal(row.setup_fee_per_screen) * config.num_colors
        logger.debug(f"[PrintCost] {location.value}: {config.num_colors} couleur(s), {row.cost_per_shirt}/pièce")

    return PrintCost(
        total_cost=cost_per_shirt * quantity + setup_fees,
        cost_per_shirt=cost_per_shirt,
        setup_fees=setup_fees,
        total_screens=print_config.total_screens,
        tier_name=tier.name,
    )
