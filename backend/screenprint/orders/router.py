import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, HTTPException, status, Path, Query, Response

from screenprint.config import settings
from screenprint.discounts.exceptions import DiscountCodeInvalidException
from screenprint.garments.exceptions import GarmentNotFoundException
from screenprint.pricing.exceptions import ConfigurationGapException
from screenprint.quotes.exceptions import QuoteValidationException
from .dependencies import OrderServiceDep
from .exceptions import (
    OrderDomainException,
    OrderNotFoundException,
    PendingOrderNotFoundException,
    InvalidPendingOrderException,
    InvalidOrderStatusException,
)
from .models import PendingOrderCreate, PendingOrderRead, OrderRead, CreateOrderFromPendingRequest, OrderStatusUpdate

logger = logging.getLogger(__name__)

order_router = APIRouter(tags=["Orders"])


def handle_order_service_errors(e: Exception):
    if isinstance(e, (OrderNotFoundException, PendingOrderNotFoundException, GarmentNotFoundException)):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, (QuoteValidationException, DiscountCodeInvalidException, InvalidPendingOrderException, InvalidOrderStatusException)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, ConfigurationGapException):
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, OrderDomainException):
        logger.error(f"[Order API] Domain error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail={"reason": e.reason, "message": e.message})
    else:
        logger.error(f"[Order API] Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to create order")

# --- Commandes en attente (/pending-orders) ---

@order_router.post("/pending-orders",
                   response_model=PendingOrderRead,
                   status_code=status.HTTP_201_CREATED,
                   summary="Créer une commande en attente de paiement")
async def create_pending_order(service: OrderServiceDep, order_in: PendingOrderCreate):
    try:
        return await service.create_pending_order(order_in)
    except Exception as e:
        handle_order_service_errors(e)

@order_router.get("/pending-orders/{pending_order_id}", response_model=PendingOrderRead, summary="Lire une commande en attente")
async def get_pending_order(service: OrderServiceDep, pending_order_id: uuid.UUID = Path(...)):
    try:
        return await service.get_pending_order(pending_order_id)
    except Exception as e:
        handle_order_service_errors(e)

@order_router.delete("/pending-orders/{pending_order_id}",
                     status_code=status.HTTP_204_NO_CONTENT,
                     summary="Abandonner une commande en attente")
async def delete_pending_order(service: OrderServiceDep, pending_order_id: uuid.UUID = Path(...)):
    try:
        await service.delete_pending_order(pending_order_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        handle_order_service_errors(e)

# --- Commandes (/orders) ---

@order_router.get("/orders",
                  response_model=List[OrderRead],
                  summary="Lister les commandes (administration)")
async def list_orders(
    response: Response,
    service: OrderServiceDep,
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    order_status: Optional[str] = Query(None, alias="status"),
):
    logger.info(f"API list_orders: limit={limit}, offset={offset}, status={order_status}")
    try:
        result = await service.list_orders(limit=limit, offset=offset, status=order_status)
        response.headers["X-Total-Count"] = str(result.total)
        return result.items
    except Exception as e:
        handle_order_service_errors(e)

@order_router.post("/orders/from-pending",
                   response_model=OrderRead,
                   summary="Créer la commande après paiement (idempotent)")
async def create_order_from_pending(
    response: Response,
    service: OrderServiceDep,
    request_in: CreateOrderFromPendingRequest,
):
    logger.info(f"API create_order_from_pending: pending={request_in.pending_order_id} payment_intent={request_in.payment_intent_id}")
    try:
        order, created = await service.create_order_from_pending(request_in.pending_order_id, request_in.payment_intent_id)
        response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
        return order
    except Exception as e:
        handle_order_service_errors(e)

@order_router.get("/orders/by-payment-intent/{payment_intent_id}",
                  response_model=OrderRead,
                  summary="Retrouver une commande par payment intent")
async def get_order_by_payment_intent(service: OrderServiceDep, payment_intent_id: str = Path(..., min_length=1)):
    try:
        return await service.get_order_by_payment_intent(payment_intent_id)
    except Exception as e:
        handle_order_service_errors(e)

@order_router.get("/orders/{order_id}", response_model=OrderRead, summary="Lire une commande")
async def get_order(service: OrderServiceDep, order_id: uuid.UUID = Path(...)):
    try:
        return await service.get_order(order_id)
    except Exception as e:
        handle_order_service_errors(e)

@order_router.patch("/orders/{order_id}/status", response_model=OrderRead, summary="Modifier le statut d'une commande")
async def update_order_status(
    service: OrderServiceDep,
    status_in: OrderStatusUpdate,
    order_id: uuid.UUID = Path(...),
):
    logger.info(f"API update_order_status: ID={order_id} -> {status_in.status}")
    try:
        return await service.update_order_status(order_id, status_in.status)
    except Exception as e:
        handle_order_service_errors(e)
