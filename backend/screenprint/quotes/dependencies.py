import logging
from typing import Annotated

from fastapi import Depends

from screenprint.garments.dependencies import GarmentRepositoryDep
from screenprint.pricing.dependencies import PricingCatalogDep
from screenprint.quotes.service import QuoteService

logger = logging.getLogger(__name__)

def get_quote_service(
    garment_repository: GarmentRepositoryDep,
    catalog: PricingCatalogDep,
) -> QuoteService:
    """Fournit une instance du service de devis."""
    logger.debug("Providing QuoteService")
    return QuoteService(garment_repository=garment_repository, catalog=catalog)

QuoteServiceDep = Annotated[QuoteService, Depends(get_quote_service)]
