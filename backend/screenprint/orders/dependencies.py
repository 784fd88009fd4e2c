import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from screenprint.database import get_db_session
from screenprint.discounts.dependencies import DiscountServiceDep
from screenprint.orders.interfaces.repositories import AbstractPendingOrderRepository, AbstractOrderRepository
from screenprint.orders.repositories import SQLAlchemyPendingOrderRepository, SQLAlchemyOrderRepository
from screenprint.orders.service import OrderService
from screenprint.pricing.dependencies import PricingCatalogDep
from screenprint.quotes.dependencies import QuoteServiceDep

logger = logging.getLogger(__name__)

# Une seule session par requête: la réclamation de la commande en attente
# et l'insertion de la commande partagent la même transaction
SessionDep = Annotated[AsyncSession, Depends(get_db_session)]

def get_pending_order_repository(session: SessionDep) -> AbstractPendingOrderRepository:
    return SQLAlchemyPendingOrderRepository(db_session=session)

def get_order_repository(session: SessionDep) -> AbstractOrderRepository:
    return SQLAlchemyOrderRepository(db_session=session)

PendingOrderRepositoryDep = Annotated[AbstractPendingOrderRepository, Depends(get_pending_order_repository)]
OrderRepositoryDep = Annotated[AbstractOrderRepository, Depends(get_order_repository)]

def get_order_service(
    pending_repository: PendingOrderRepositoryDep,
    order_repository: OrderRepositoryDep,
    quote_service: QuoteServiceDep,
    discount_service: DiscountServiceDep,
    catalog: PricingCatalogDep,
) -> OrderService:
    """Fournit une instance du service de commandes."""
    logger.debug("Providing OrderService")
    return OrderService(
        pending_repository=pending_repository,
        order_repository=order_repository,
        quote_service=quote_service,
        discount_service=discount_service,
        catalog=catalog,
    )

OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
