import uuid
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple

from screenprint.garments.models import Garment, GarmentCreate


class AbstractGarmentRepository(ABC):
    """Interface abstraite pour le repository des vêtements."""

    @abstractmethod
    async def get_by_id(self, garment_id: uuid.UUID) -> Optional[Garment]:
        """Récupère un vêtement, y compris s'il est supprimé."""
        pass

    @abstractmethod
    async def get_active(self, garment_id: uuid.UUID) -> Optional[Garment]:
        """Récupère un vêtement actif et non supprimé; None sinon."""
        pass

    @abstractmethod
    async def get_active_many(self, garment_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, Garment]:
        pass

    @abstractmethod
    async def list(self, limit: int = 100, offset: int = 0, include_inactive: bool = False) -> Tuple[List[Garment], int]:
        pass

    @abstractmethod
    async def create(self, garment_data: GarmentCreate) -> Garment:
        pass

    @abstractmethod
    async def update(self, garment_id: uuid.UUID, values: dict) -> Optional[Garment]:
        pass

    @abstractmethod
    async def soft_delete(self, garment_id: uuid.UUID) -> Optional[Garment]:
        """Désactive le vêtement et renseigne deleted_at (pas de suppression physique)."""
        pass
