import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from screenprint.database import get_db_session
from screenprint.discounts.interfaces.repositories import AbstractDiscountCodeRepository
from screenprint.discounts.repositories import SQLAlchemyDiscountCodeRepository
from screenprint.discounts.service import DiscountService

logger = logging.getLogger(__name__)

SessionDep = Annotated[AsyncSession, Depends(get_db_session)]

def get_discount_code_repository(session: SessionDep) -> AbstractDiscountCodeRepository:
    return SQLAlchemyDiscountCodeRepository(db_session=session)

DiscountCodeRepositoryDep = Annotated[AbstractDiscountCodeRepository, Depends(get_discount_code_repository)]

def get_discount_service(repository: DiscountCodeRepositoryDep) -> DiscountService:
    logger.debug("Providing DiscountService")
    return DiscountService(repository=repository)

DiscountServiceDep = Annotated[DiscountService, Depends(get_discount_service)]
