import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from screenprint.database import get_db_session
from screenprint.garments.interfaces.repositories import AbstractGarmentRepository
from screenprint.garments.repositories import SQLAlchemyGarmentRepository
from screenprint.garments.service import GarmentService
from screenprint.pricing.dependencies import PricingTierRepositoryDep

logger = logging.getLogger(__name__)

SessionDep = Annotated[AsyncSession, Depends(get_db_session)]

def get_garment_repository(session: SessionDep) -> AbstractGarmentRepository:
    """Fournit une instance du repository des vêtements."""
    logger.debug("Providing SQLAlchemyGarmentRepository")
    return SQLAlchemyGarmentRepository(db_session=session)

GarmentRepositoryDep = Annotated[AbstractGarmentRepository, Depends(get_garment_repository)]

def get_garment_service(
    repository: GarmentRepositoryDep,
    tier_repository: PricingTierRepositoryDep,
) -> GarmentService:
    logger.debug("Providing GarmentService")
    return GarmentService(repository=repository, tier_repository=tier_repository)

GarmentServiceDep = Annotated[GarmentService, Depends(get_garment_service)]
