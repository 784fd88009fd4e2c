import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from screenprint.campaigns.interfaces.repositories import AbstractCampaignRepository
from screenprint.campaigns.repositories import SQLAlchemyCampaignRepository
from screenprint.campaigns.service import CampaignService
from screenprint.database import get_db_session
from screenprint.garments.dependencies import GarmentRepositoryDep
from screenprint.orders.dependencies import OrderRepositoryDep
from screenprint.pricing.dependencies import PricingCatalogDep
from screenprint.quotes.dependencies import QuoteServiceDep

logger = logging.getLogger(__name__)

# Même session pour la réservation du règlement et la création de la commande
SessionDep = Annotated[AsyncSession, Depends(get_db_session)]

def get_campaign_repository(session: SessionDep) -> AbstractCampaignRepository:
    return SQLAlchemyCampaignRepository(db_session=session)

CampaignRepositoryDep = Annotated[AbstractCampaignRepository, Depends(get_campaign_repository)]

def get_campaign_service(
    repository: CampaignRepositoryDep,
    order_repository: OrderRepositoryDep,
    garment_repository: GarmentRepositoryDep,
    quote_service: QuoteServiceDep,
    catalog: PricingCatalogDep,
) -> CampaignService:
    """Fournit une instance du service de campagnes."""
    logger.debug("Providing CampaignService")
    return CampaignService(
        repository=repository,
        order_repository=order_repository,
        garment_repository=garment_repository,
        quote_service=quote_service,
        catalog=catalog,
    )

CampaignServiceDep = Annotated[CampaignService, Depends(get_campaign_service)]
