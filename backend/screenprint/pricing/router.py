import logging
import uuid
from typing import List

from fastapi import APIRouter, HTTPException, status, Path, Response

from .dependencies import PricingAdminServiceDep
from .exceptions import (
    PricingDomainException,
    PricingTierNotFoundException,
    PrintPricingNotFoundException,
    InvalidPricingTierException,
    TierOverlapException,
    TierInUseException,
    DuplicatePrintPricingException,
    ConfigurationGapException,
)
from .models import (
    PricingTierCreate, PricingTierUpdate, PricingTierRead,
    PrintPricingCreate, PrintPricingUpdate, PrintPricingRead,
    AppConfigUpdate, AppConfigRead,
)

logger = logging.getLogger(__name__)

pricing_router = APIRouter(tags=["Pricing"])


def handle_pricing_service_errors(e: Exception):
    if isinstance(e, (PricingTierNotFoundException, PrintPricingNotFoundException)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, InvalidPricingTierException):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, (TierOverlapException, TierInUseException, DuplicatePrintPricingException)):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, ConfigurationGapException):
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, PricingDomainException):
        logger.error(f"[Pricing API] Domain error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail={"reason": e.reason, "message": e.message})
    else:
        logger.error(f"[Pricing API] Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error processing pricing request.")

# --- Tranches de prix (/pricing-tiers) ---

@pricing_router.get("/pricing-tiers", response_model=List[PricingTierRead], summary="Lister les tranches de prix")
async def list_pricing_tiers(service: PricingAdminServiceDep):
    try:
        return await service.list_tiers()
    except Exception as e:
        handle_pricing_service_errors(e)

@pricing_router.post("/pricing-tiers",
                     response_model=PricingTierRead,
                     status_code=status.HTTP_201_CREATED,
                     summary="Créer une tranche de prix")
async def create_pricing_tier(service: PricingAdminServiceDep, tier_in: PricingTierCreate):
    logger.info(f"API create_pricing_tier: {tier_in.name} [{tier_in.min_qty}, {tier_in.max_qty}]")
    try:
        return await service.create_tier(tier_in)
    except Exception as e:
        handle_pricing_service_errors(e)

@pricing_router.patch("/pricing-tiers/{tier_id}", response_model=PricingTierRead, summary="Modifier une tranche de prix")
async def update_pricing_tier(
    service: PricingAdminServiceDep,
    tier_in: PricingTierUpdate,
    tier_id: uuid.UUID = Path(...),
):
    logger.info(f"API update_pricing_tier: ID={tier_id}")
    try:
        return await service.update_tier(tier_id, tier_in)
    except Exception as e:
        handle_pricing_service_errors(e)

@pricing_router.delete("/pricing-tiers/{tier_id}",
                       status_code=status.HTTP_204_NO_CONTENT,
                       summary="Supprimer une tranche (refusé si utilisée par un vêtement)")
async def delete_pricing_tier(service: PricingAdminServiceDep, tier_id: uuid.UUID = Path(...)):
    logger.info(f"API delete_pricing_tier: ID={tier_id}")
    try:
        await service.delete_tier(tier_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        handle_pricing_service_errors(e)

# --- Tarifs d'impression (/print-pricing) ---

@pricing_router.get("/print-pricing", response_model=List[PrintPricingRead], summary="Lister les tarifs d'impression")
async def list_print_pricing(service: PricingAdminServiceDep):
    try:
        return await service.list_print_pricing()
    except Exception as e:
        handle_pricing_service_errors(e)

@pricing_router.post("/print-pricing",
                     response_model=PrintPricingRead,
                     status_code=status.HTTP_201_CREATED,
                     summary="Créer un tarif d'impression")
async def create_print_pricing(service: PricingAdminServiceDep, pricing_in: PrintPricingCreate):
    try:
        return await service.create_print_pricing(pricing_in)
    except Exception as e:
        handle_pricing_service_errors(e)

@pricing_router.patch("/print-pricing/{print_pricing_id}", response_model=PrintPricingRead, summary="Modifier un tarif d'impression")
async def update_print_pricing(
    service: PricingAdminServiceDep,
    pricing_in: PrintPricingUpdate,
    print_pricing_id: uuid.UUID = Path(...),
):
    try:
        return await service.update_print_pricing(print_pricing_id, pricing_in)
    except Exception as e:
        handle_pricing_service_errors(e)

@pricing_router.delete("/print-pricing/{print_pricing_id}",
                       status_code=status.HTTP_204_NO_CONTENT,
                       summary="Supprimer un tarif d'impression")
async def delete_print_pricing(service: PricingAdminServiceDep, print_pricing_id: uuid.UUID = Path(...)):
    try:
        await service.delete_print_pricing(print_pricing_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        handle_pricing_service_errors(e)

# --- Configuration globale (/app-config) ---

@pricing_router.get("/app-config", response_model=AppConfigRead, summary="Lire la configuration globale")
async def get_app_config(service: PricingAdminServiceDep):
    try:
        return await service.get_app_config()
    except Exception as e:
        handle_pricing_service_errors(e)

@pricing_router.patch("/app-config", response_model=AppConfigRead, summary="Modifier la configuration globale")
async def update_app_config(service: PricingAdminServiceDep, config_in: AppConfigUpdate):
    logger.info(f"API update_app_config: {config_in.model_dump(exclude_unset=True)}")
    try:
        return await service.update_app_config(config_in)
    except Exception as e:
        handle_pricing_service_errors(e)
