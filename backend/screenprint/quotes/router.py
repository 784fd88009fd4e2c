import logging
from typing import Union

from fastapi import APIRouter, HTTPException, status

from screenprint.garments.exceptions import GarmentNotFoundException
from screenprint.pricing.exceptions import ConfigurationGapException
from .dependencies import QuoteServiceDep
from .exceptions import QuoteValidationException
from .models import (
    QuoteRequest,
    MultiGarmentQuoteRequest,
    QuoteResponse,
    MultiGarmentQuoteResponse,
    CampaignPriceRequest,
    CampaignPriceResponse,
)

logger = logging.getLogger(__name__)

quote_router = APIRouter(tags=["Quotes"])


def handle_quote_service_errors(e: Exception):
    if isinstance(e, QuoteValidationException):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, GarmentNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, ConfigurationGapException):
        # Déjà journalisé en critical au point de détection
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail={"reason": e.reason, "message": e.message})
    else:
        logger.error(f"[Quote API] Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to calculate quote")


@quote_router.post("/quote",
                   response_model=Union[MultiGarmentQuoteResponse, QuoteResponse],
                   summary="Calculer un devis (un ou plusieurs vêtements)")
async def calculate_quote(
    service: QuoteServiceDep,
    quote_in: Union[MultiGarmentQuoteRequest, QuoteRequest],
):
    try:
        if isinstance(quote_in, MultiGarmentQuoteRequest):
            logger.info(f"API calculate_quote (multi): {len(quote_in.garments)} vêtement(s)")
            return await service.calculate_multi_garment_quote(quote_in.garments, quote_in.print_config)
        logger.info(f"API calculate_quote: garment={quote_in.garment_id} qty={quote_in.quantity}")
        return await service.calculate_quote(quote_in.garment_id, quote_in.quantity, quote_in.print_config)
    except Exception as e:
        handle_quote_service_errors(e)


@quote_router.post("/campaigns/calculate-price",
                   response_model=CampaignPriceResponse,
                   summary="Prix unitaires de campagne (tranche la plus basse, hors setup)")
async def calculate_campaign_prices(service: QuoteServiceDep, request_in: CampaignPriceRequest):
    logger.info(f"API calculate_campaign_prices: {len(request_in.garment_ids)} vêtement(s)")
    try:
        return await service.calculate_campaign_prices(request_in.garment_ids, request_in.print_config)
    except Exception as e:
        handle_quote_service_errors(e)
