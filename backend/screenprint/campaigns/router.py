import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, HTTPException, status, Path, Query, Response

from screenprint.config import settings
from screenprint.garments.exceptions import GarmentNotFoundException
from screenprint.orders.exceptions import DuplicatePaymentIntentException, OrderDomainException
from screenprint.pricing.exceptions import ConfigurationGapException
from screenprint.quotes.exceptions import QuoteValidationException
from .dependencies import CampaignServiceDep
from .exceptions import (
    CampaignDomainException,
    CampaignNotFoundException,
    CampaignOrderNotFoundException,
    CampaignClosedException,
    EmptyCampaignException,
    InvalidCampaignException,
    InvalidCampaignSelectionException,
    InvalidCampaignStatusException,
    InvalidCampaignOrderStatusException,
)
from .models import (
    CampaignCreate,
    CampaignRead,
    CampaignOrderCreate,
    CampaignOrderRead,
    CampaignCheckoutResponse,
    CampaignOrderStatusUpdate,
    CampaignStats,
    CampaignSettleRequest,
    CampaignSettlementResponse,
)

logger = logging.getLogger(__name__)

campaign_router = APIRouter(
    prefix="/campaigns",
    tags=["Campaigns"]
)


def handle_campaign_service_errors(e: Exception):
    if isinstance(e, (CampaignNotFoundException, CampaignOrderNotFoundException, GarmentNotFoundException)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, (
        InvalidCampaignException,
        CampaignClosedException,
        InvalidCampaignSelectionException,
        InvalidCampaignOrderStatusException,
        EmptyCampaignException,
        QuoteValidationException,
    )):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, (InvalidCampaignStatusException, DuplicatePaymentIntentException)):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, ConfigurationGapException):
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, (CampaignDomainException, OrderDomainException)):
        logger.error(f"[Campaign API] Domain error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail={"reason": e.reason, "message": e.message})
    else:
        logger.error(f"[Campaign API] Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="An unexpected error occurred")

# --- Campagnes ---

@campaign_router.post("",
                      response_model=CampaignRead,
                      status_code=status.HTTP_201_CREATED,
                      summary="Créer une campagne de commande groupée")
async def create_campaign(service: CampaignServiceDep, campaign_in: CampaignCreate):
    logger.info(f"API create_campaign: name={campaign_in.name}")
    try:
        return await service.create_campaign(campaign_in)
    except Exception as e:
        handle_campaign_service_errors(e)

@campaign_router.get("", response_model=List[CampaignRead], summary="Lister les campagnes")
async def list_campaigns(
    response: Response,
    service: CampaignServiceDep,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    campaign_status: Optional[str] = Query(None, alias="status"),
    organizer_email: Optional[str] = Query(None),
):
    try:
        result = await service.list_campaigns(
            limit=limit, offset=offset, status=campaign_status, organizer_email=organizer_email
        )
        response.headers["X-Total-Count"] = str(result.total)
        return result.items
    except Exception as e:
        handle_campaign_service_errors(e)

@campaign_router.get("/{slug}", response_model=CampaignRead, summary="Lire une campagne")
async def get_campaign(service: CampaignServiceDep, slug: str = Path(..., min_length=1)):
    try:
        return await service.get_campaign(slug)
    except Exception as e:
        handle_campaign_service_errors(e)

@campaign_router.post("/{slug}/close", response_model=CampaignRead, summary="Clôturer une campagne")
async def close_campaign(service: CampaignServiceDep, slug: str = Path(..., min_length=1)):
    logger.info(f"API close_campaign: {slug}")
    try:
        return await service.close_campaign(slug)
    except Exception as e:
        handle_campaign_service_errors(e)

@campaign_router.get("/{slug}/stats", response_model=CampaignStats, summary="Statistiques d'une campagne")
async def get_campaign_stats(service: CampaignServiceDep, slug: str = Path(..., min_length=1)):
    try:
        return await service.get_stats(slug)
    except Exception as e:
        handle_campaign_service_errors(e)

# --- Commandes participants ---

@campaign_router.post("/{slug}/orders",
                      response_model=CampaignCheckoutResponse,
                      status_code=status.HTTP_201_CREATED,
                      summary="Commander dans une campagne (participant)")
async def place_campaign_order(
    service: CampaignServiceDep,
    order_in: CampaignOrderCreate,
    slug: str = Path(..., min_length=1),
):
    logger.info(f"API place_campaign_order: {slug} ({len(order_in.items)} ligne(s))")
    try:
        return await service.place_order(slug, order_in)
    except Exception as e:
        handle_campaign_service_errors(e)

@campaign_router.get("/{slug}/orders",
                     response_model=List[CampaignOrderRead],
                     summary="Lister les commandes des participants")
async def list_campaign_orders(service: CampaignServiceDep, slug: str = Path(..., min_length=1)):
    try:
        return await service.list_orders(slug)
    except Exception as e:
        handle_campaign_service_errors(e)

@campaign_router.patch("/{slug}/orders/{order_id}/status",
                       response_model=CampaignOrderRead,
                       summary="Modifier le statut d'une commande participant")
async def update_campaign_order_status(
    service: CampaignServiceDep,
    status_in: CampaignOrderStatusUpdate,
    slug: str = Path(..., min_length=1),
    order_id: uuid.UUID = Path(...),
):
    logger.info(f"API update_campaign_order_status: {slug}/{order_id} -> {status_in.status}")
    try:
        return await service.update_order_status(slug, order_id, status_in)
    except Exception as e:
        handle_campaign_service_errors(e)

# --- Règlement ---

@campaign_router.post("/{slug}/settle",
                      response_model=CampaignSettlementResponse,
                      status_code=status.HTTP_201_CREATED,
                      summary="Régler la campagne et créer la commande de production")
async def settle_campaign(
    service: CampaignServiceDep,
    settle_in: CampaignSettleRequest,
    slug: str = Path(..., min_length=1),
):
    logger.info(f"API settle_campaign: {slug}")
    try:
        return await service.settle_campaign(slug, settle_in)
    except Exception as e:
        handle_campaign_service_errors(e)
