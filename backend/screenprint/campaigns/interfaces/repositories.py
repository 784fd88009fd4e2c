import uuid
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Tuple

from screenprint.campaigns.models import Campaign, CampaignOrder


class AbstractCampaignRepository(ABC):
    """Interface abstraite pour les campagnes et les commandes de leurs participants."""

    @abstractmethod
    async def slug_exists(self, slug: str) -> bool:
        pass

    @abstractmethod
    async def create(self, values: dict) -> Campaign:
        pass

    @abstractmethod
    async def get_by_slug(self, slug: str) -> Optional[Campaign]:
        pass

    @abstractmethod
    async def list(
        self,
        limit: int = 100,
        offset: int = 0,
        status: Optional[str] = None,
        organizer_email: Optional[str] = None,
    ) -> Tuple[List[Campaign], int]:
        pass

    @abstractmethod
    async def update_status(self, campaign_id: uuid.UUID, status: str) -> Optional[Campaign]:
        pass

    @abstractmethod
    async def claim_for_settlement(self, campaign_id: uuid.UUID, from_statuses: Iterable[str]) -> bool:
        """
        Passe la campagne à 'completed' si son statut est dans `from_statuses`.

        Un seul appel concurrent obtient True. Ne valide pas la transaction:
        l'appelant la valide avec la création de la commande de production.
        """
        pass

    @abstractmethod
    async def set_final_order(self, campaign_id: uuid.UUID, order_id: uuid.UUID) -> Optional[Campaign]:
        pass

    @abstractmethod
    async def create_orders(self, values: List[dict]) -> List[CampaignOrder]:
        """Insère toutes les lignes d'un passage de commande dans une seule transaction."""
        pass

    @abstractmethod
    async def get_order(self, campaign_id: uuid.UUID, order_id: uuid.UUID) -> Optional[CampaignOrder]:
        pass

    @abstractmethod
    async def list_orders(self, campaign_id: uuid.UUID, statuses: Optional[Iterable[str]] = None) -> List[CampaignOrder]:
        pass

    @abstractmethod
    async def update_order(self, order_id: uuid.UUID, values: dict) -> Optional[CampaignOrder]:
        pass
