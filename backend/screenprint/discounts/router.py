import logging
import uuid
from typing import List

from fastapi import APIRouter, HTTPException, status, Path, Response
from fastapi.responses import JSONResponse

from .dependencies import DiscountServiceDep
from .exceptions import (
    DiscountDomainException,
    DiscountCodeInvalidException,
    DiscountCodeNotFoundException,
    DuplicateDiscountCodeException,
    InvalidDiscountValueException,
)
from .models import (
    DiscountCodeCreate,
    DiscountCodeUpdate,
    DiscountCodeRead,
    DiscountValidationRequest,
    DiscountValidationResponse,
)

logger = logging.getLogger(__name__)

discount_router = APIRouter(
    prefix="/discount-codes",
    tags=["Discount Codes"]
)

def handle_discount_service_errors(e: Exception):
    if isinstance(e, DiscountCodeNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, (InvalidDiscountValueException, DiscountCodeInvalidException)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, DuplicateDiscountCodeException):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, DiscountDomainException):
        logger.error(f"[Discount API] Domain error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail={"reason": e.reason, "message": e.message})
    else:
        logger.error(f"[Discount API] Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to process discount code request.")

@discount_router.post("/validate",
                      response_model=DiscountValidationResponse,
                      summary="Valider un code de réduction pour un sous-total")
async def validate_discount_code(service: DiscountServiceDep, validation_in: DiscountValidationRequest):
    logger.info(f"API validate_discount_code: code={validation_in.code!r} subtotal={validation_in.subtotal}")
    try:
        return await service.validate_code(validation_in.code, validation_in.subtotal)
    except DiscountCodeInvalidException as e:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"valid": False, "error": e.message, "reason": e.reason},
        )
    except Exception as e:
        handle_discount_service_errors(e)

@discount_router.get("", response_model=List[DiscountCodeRead], summary="Lister les codes de réduction")
async def list_discount_codes(service: DiscountServiceDep):
    try:
        return await service.list_codes()
    except Exception as e:
        handle_discount_service_errors(e)

@discount_router.post("",
                      response_model=DiscountCodeRead,
                      status_code=status.HTTP_201_CREATED,
                      summary="Créer un code de réduction")
async def create_discount_code(service: DiscountServiceDep, discount_in: DiscountCodeCreate):
    logger.info(f"API create_discount_code: {discount_in.code}")
    try:
        return await service.create_code(discount_in)
    except Exception as e:
        handle_discount_service_errors(e)

@discount_router.patch("/{discount_code_id}", response_model=DiscountCodeRead, summary="Modifier un code de réduction")
async def update_discount_code(
    service: DiscountServiceDep,
    discount_in: DiscountCodeUpdate,
    discount_code_id: uuid.UUID = Path(...),
):
    try:
        return await service.update_code(discount_code_id, discount_in)
    except Exception as e:
        handle_discount_service_errors(e)

@discount_router.delete("/{discount_code_id}",
                        status_code=status.HTTP_204_NO_CONTENT,
                        summary="Supprimer un code de réduction")
async def delete_discount_code(service: DiscountServiceDep, discount_code_id: uuid.UUID = Path(...)):
    try:
        await service.delete_code(discount_code_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        handle_discount_service_errors(e)
