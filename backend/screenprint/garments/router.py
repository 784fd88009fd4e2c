import logging
import uuid
from typing import List, Annotated, Tuple

from fastapi import APIRouter, Depends, HTTPException, status, Query, Path, Response

from screenprint.config import settings
from .dependencies import GarmentServiceDep
from .exceptions import GarmentNotFoundException, InvalidGarmentPricingTierException, GarmentDomainException
from .models import GarmentCreate, GarmentUpdate, GarmentRead

logger = logging.getLogger(__name__)

garment_router = APIRouter(
    prefix="/garments",
    tags=["Garments"]
)

def get_pagination_params(
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0)
) -> Tuple[int, int]:
    return limit, offset

PaginationParams = Annotated[Tuple[int, int], Depends(get_pagination_params)]

def handle_garment_service_errors(e: Exception):
    if isinstance(e, GarmentNotFoundException):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, InvalidGarmentPricingTierException):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"reason": e.reason, "message": e.message})
    elif isinstance(e, GarmentDomainException):
        logger.error(f"[Garment API] Domain error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail={"reason": e.reason, "message": e.message})
    else:
        logger.error(f"[Garment API] Unexpected error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Internal server error processing garment request.")

@garment_router.get("",
                    response_model=List[GarmentRead],
                    summary="Lister les vêtements")
async def list_garments(
    response: Response,
    service: GarmentServiceDep,
    pagination: PaginationParams,
    include_inactive: bool = Query(False),
):
    limit, offset = pagination
    logger.info(f"API list_garments: limit={limit}, offset={offset}, include_inactive={include_inactive}")
    try:
        result = await service.list_garments(limit=limit, offset=offset, include_inactive=include_inactive)
        response.headers["X-Total-Count"] = str(result.total)
        return result.items
    except Exception as e:
        handle_garment_service_errors(e)

@garment_router.post("",
                     response_model=GarmentRead,
                     status_code=status.HTTP_201_CREATED,
                     summary="Créer un vêtement")
async def create_garment(service: GarmentServiceDep, garment_in: GarmentCreate):
    logger.info(f"API create_garment: name={garment_in.name}")
    try:
        return await service.create_garment(garment_in)
    except Exception as e:
        handle_garment_service_errors(e)

@garment_router.get("/{garment_id}", response_model=GarmentRead, summary="Récupérer un vêtement par ID")
async def get_garment(service: GarmentServiceDep, garment_id: uuid.UUID = Path(...)):
    try:
        return await service.get_garment(garment_id)
    except Exception as e:
        handle_garment_service_errors(e)

@garment_router.patch("/{garment_id}", response_model=GarmentRead, summary="Modifier un vêtement")
async def update_garment(
    service: GarmentServiceDep,
    garment_in: GarmentUpdate,
    garment_id: uuid.UUID = Path(...),
):
    logger.info(f"API update_garment: ID={garment_id}")
    try:
        return await service.update_garment(garment_id, garment_in)
    except Exception as e:
        handle_garment_service_errors(e)

@garment_router.delete("/{garment_id}",
                       status_code=status.HTTP_204_NO_CONTENT,
                       summary="Supprimer (logiquement) un vêtement")
async def delete_garment(service: GarmentServiceDep, garment_id: uuid.UUID = Path(...)):
    logger.info(f"API delete_garment: ID={garment_id}")
    try:
        await service.delete_garment(garment_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    except Exception as e:
        handle_garment_service_errors(e)
