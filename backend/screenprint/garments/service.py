import logging
import uuid
from typing import List, Optional, TypeVar, Generic

from sqlmodel import SQLModel

from screenprint.pricing.interfaces.repositories import AbstractPricingTierRepository
from .exceptions import GarmentNotFoundException, InvalidGarmentPricingTierException, GarmentOperationFailedException
from .interfaces.repositories import AbstractGarmentRepository
from .models import GarmentCreate, GarmentUpdate, GarmentRead

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=SQLModel)
class PaginatedResponse(SQLModel, Generic[T]):
    items: List[T]
    total: int
class PaginatedGarmentResponse(PaginatedResponse[GarmentRead]): pass


class GarmentService:
    """Service applicatif pour le catalogue de vêtements."""

    def __init__(self, repository: AbstractGarmentRepository, tier_repository: AbstractPricingTierRepository):
        self.repository = repository
        self.tier_repository = tier_repository
        logger.info("GarmentService initialisé.")

    async def list_garments(self, limit: int = 100, offset: int = 0, include_inactive: bool = False) -> PaginatedGarmentResponse:
        garments, total = await self.repository.list(limit=limit, offset=offset, include_inactive=include_inactive)
        return PaginatedGarmentResponse(items=[GarmentRead.model_validate(g) for g in garments], total=total)

    async def get_garment(self, garment_id: uuid.UUID) -> GarmentRead:
        garment = await self.repository.get_by_id(garment_id)
        if garment is None or garment.deleted_at is not None:
            raise GarmentNotFoundException(garment_id)
        return GarmentRead.model_validate(garment)

    async def _check_tier(self, tier_id: Optional[uuid.UUID]) -> None:
        if tier_id is not None and await self.tier_repository.get_by_id(tier_id) is None:
            raise InvalidGarmentPricingTierException(tier_id)

    async def create_garment(self, garment_data: GarmentCreate) -> GarmentRead:
        logger.info(f"[GarmentService] Create garment: {garment_data.name}")
        await self._check_tier(garment_data.pricing_tier_id)
        try:
            garment = await self.repository.create(garment_data)
        except Exception as e:
            logger.error(f"[GarmentService] Error creating garment {garment_data.name}: {e}", exc_info=True)
            raise GarmentOperationFailedException(f"Erreur interne lors de la création du vêtement: {e}")
        logger.info(f"[GarmentService] Garment ID {garment.id} created.")
        return GarmentRead.model_validate(garment)

    async def update_garment(self, garment_id: uuid.UUID, garment_data: GarmentUpdate) -> GarmentRead:
        logger.info(f"[GarmentService] Update garment ID: {garment_id}")
        await self.get_garment(garment_id)
        values = garment_data.model_dump(exclude_unset=True)
        if "pricing_tier_id" in values:
            await self._check_tier(values["pricing_tier_id"])
        garment = await self.repository.update(garment_id, values)
        if garment is None:
            raise GarmentNotFoundException(garment_id)
        return GarmentRead.model_validate(garment)

    async def delete_garment(self, garment_id: uuid.UUID) -> None:
        """Suppression logique: le vêtement disparaît des devis mais reste lisible par les commandes."""
        logger.info(f"[GarmentService] Soft delete garment ID: {garment_id}")
        await self.get_garment(garment_id)
        await self.repository.soft_delete(garment_id)
