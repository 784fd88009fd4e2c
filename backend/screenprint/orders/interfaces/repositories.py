import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Tuple

from screenprint.orders.models import PendingOrder, Order


class AbstractPendingOrderRepository(ABC):
    """Interface abstraite pour les commandes en attente de paiement."""

    @abstractmethod
    async def create(self, values: dict) -> PendingOrder:
        pass

    @abstractmethod
    async def get_by_id(self, pending_order_id: uuid.UUID) -> Optional[PendingOrder]:
        pass

    @abstractmethod
    async def delete(self, pending_order_id: uuid.UUID) -> bool:
        pass

    @abstractmethod
    async def claim_pending_order(self, pending_order_id: uuid.UUID, now: datetime) -> Optional[PendingOrder]:
        """
        Supprime et retourne la commande en attente en une seule opération atomique.

        Parmi plusieurs appels concurrents pour le même ID, un seul reçoit la
        ligne; les autres reçoivent None. Une commande expirée (expires_at <= now)
        n'est jamais retournée. Ne valide pas la transaction: l'appelant valide
        la suppression avec la création de la commande.
        """
        pass


class AbstractOrderRepository(ABC):
    """Interface abstraite pour les commandes."""

    @abstractmethod
    async def get_by_id(self, order_id: uuid.UUID) -> Optional[Order]:
        pass

    @abstractmethod
    async def get_by_payment_intent_id(self, payment_intent_id: str) -> Optional[Order]:
        pass

    @abstractmethod
    async def create(self, values: dict) -> Order:
        """
        Insère la commande et valide la transaction en cours.

        Lève DuplicatePaymentIntentException (après rollback) si une commande
        existe déjà pour le même payment_intent_id.
        """
        pass

    @abstractmethod
    async def list(self, limit: int = 100, offset: int = 0, status: Optional[str] = None) -> Tuple[List[Order], int]:
        """Commandes les plus récentes d'abord, et le nombre total pour le filtre."""
        pass

    @abstractmethod
    async def update_status(self, order_id: uuid.UUID, status: str) -> Optional[Order]:
        pass
