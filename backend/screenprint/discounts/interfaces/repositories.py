import uuid
from abc import ABC, abstractmethod
from typing import List, Optional

from screenprint.discounts.models import DiscountCode, DiscountCodeCreate


class AbstractDiscountCodeRepository(ABC):
    """Interface abstraite pour le repository des codes de réduction."""

    @abstractmethod
    async def get_by_id(self, discount_code_id: uuid.UUID) -> Optional[DiscountCode]:
        pass

    @abstractmethod
    async def get_by_code(self, code: str) -> Optional[DiscountCode]:
        """Recherche exacte sur un code déjà normalisé (majuscules)."""
        pass

    @abstractmethod
    async def code_exists(self, code: str) -> bool:
        pass

    @abstractmethod
    async def list_all(self) -> List[DiscountCode]:
        pass

    @abstractmethod
    async def create(self, discount_data: DiscountCodeCreate) -> DiscountCode:
        pass

    @abstractmethod
    async def update(self, discount_code_id: uuid.UUID, values: dict) -> Optional[DiscountCode]:
        pass

    @abstractmethod
    async def delete(self, discount_code_id: uuid.UUID) -> bool:
        pass
