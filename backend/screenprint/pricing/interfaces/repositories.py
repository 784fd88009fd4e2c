import uuid
from abc import ABC, abstractmethod
from typing import Optional, List

from screenprint.pricing.models import (
    PricingTier, PricingTierCreate,
    PrintPricing, PrintPricingCreate,
    AppConfig,
)


class AbstractPricingTierRepository(ABC):
    """Interface abstraite pour le repository des tranches de prix."""

    @abstractmethod
    async def list_all(self) -> List[PricingTier]:
        """Liste toutes les tranches, triées par min_qty croissant."""
        pass

    @abstractmethod
    async def get_by_id(self, tier_id: uuid.UUID) -> Optional[PricingTier]:
        pass

    @abstractmethod
    async def create(self, tier_data: PricingTierCreate) -> PricingTier:
        pass

    @abstractmethod
    async def update(self, tier_id: uuid.UUID, values: dict) -> Optional[PricingTier]:
        pass

    @abstractmethod
    async def delete(self, tier_id: uuid.UUID) -> bool:
        pass

    @abstractmethod
    async def count_garments_using_tier(self, tier_id: uuid.UUID) -> int:
        """Nombre de vêtements (même désactivés) référençant la tranche."""
        pass


class AbstractPrintPricingRepository(ABC):
    """Interface abstraite pour le repository des tarifs d'impression."""

    @abstractmethod
    async def list_all(self) -> List[PrintPricing]:
        pass

    @abstractmethod
    async def get_by_id(self, print_pricing_id: uuid.UUID) -> Optional[PrintPricing]:
        pass

    @abstractmethod
    async def get_by_tier_and_colors(self, tier_id: uuid.UUID, num_colors: int) -> Optional[PrintPricing]:
        pass

    @abstractmethod
    async def create(self, pricing_data: PrintPricingCreate) -> PrintPricing:
        pass

    @abstractmethod
    async def update(self, print_pricing_id: uuid.UUID, values: dict) -> Optional[PrintPricing]:
        pass

    @abstractmethod
    async def delete(self, print_pricing_id: uuid.UUID) -> bool:
        pass


class AbstractAppConfigRepository(ABC):
    """Interface abstraite pour la configuration globale (ligne unique)."""

    @abstractmethod
    async def get(self) -> Optional[AppConfig]:
        pass

    @abstractmethod
    async def upsert(self, values: dict) -> AppConfig:
        """Met à jour la ligne existante ou la crée avec les valeurs fournies."""
        pass
