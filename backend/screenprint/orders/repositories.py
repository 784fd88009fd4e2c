import logging
import uuid
from datetime import datetime
from typing import List, Optional, Tuple

from fastcrud import FastCRUD
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from screenprint.orders.exceptions import DuplicatePaymentIntentException, OrderCreationFailedException
from screenprint.orders.interfaces.repositories import AbstractPendingOrderRepository, AbstractOrderRepository
from screenprint.orders.models import PendingOrder, Order

logger = logging.getLogger(__name__)


class SQLAlchemyPendingOrderRepository(AbstractPendingOrderRepository):
    """Implémentation SQLAlchemy des commandes en attente."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def create(self, values: dict) -> PendingOrder:
        pending = PendingOrder(**values)
        self.db.add(pending)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(pending)
        logger.debug(f"[PendingOrderRepository] Pending order {pending.id} created")
        return pending

    async def get_by_id(self, pending_order_id: uuid.UUID) -> Optional[PendingOrder]:
        return await self.db.get(PendingOrder, pending_order_id)

    async def delete(self, pending_order_id: uuid.UUID) -> bool:
        result = await self.db.execute(
            delete(PendingOrder)
            .where(PendingOrder.id == pending_order_id)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount > 0

    async def claim_pending_order(self, pending_order_id: uuid.UUID, now: datetime) -> Optional[PendingOrder]:
        # DELETE ... RETURNING: la suppression fait office de verrou
        stmt = (
            delete(PendingOrder)
            .where(PendingOrder.id == pending_order_id, PendingOrder.expires_at > now)
            .returning(PendingOrder)
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        claimed = result.scalars().first()
        if claimed is not None:
            # La ligne n'existe plus: la retirer de l'identity map de la session
            self.db.expunge(claimed)
        logger.debug(f"[PendingOrderRepository] Claim {pending_order_id}: {'ok' if claimed else 'absent'}")
        return claimed


class SQLAlchemyOrderRepository(AbstractOrderRepository):
    """Implémentation SQLAlchemy des commandes."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.crud = FastCRUD(Order)

    async def get_by_id(self, order_id: uuid.UUID) -> Optional[Order]:
        return await self.db.get(Order, order_id)

    async def get_by_payment_intent_id(self, payment_intent_id: str) -> Optional[Order]:
        result = await self.db.execute(select(Order).where(Order.payment_intent_id == payment_intent_id))
        return result.scalars().first()

    async def create(self, values: dict) -> Order:
        order = Order(**values)
        self.db.add(order)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            if values.get("payment_intent_id") is None:
                logger.error(f"[OrderRepository] Integrity error creating order: {e}", exc_info=True)
                raise OrderCreationFailedException(f"Erreur d'intégrité lors de la création de la commande: {e}")
            logger.warning(f"[OrderRepository] Integrity error creating order (payment_intent={values.get('payment_intent_id')}): {e}")
            raise DuplicatePaymentIntentException(values.get("payment_intent_id"))
        await self.db.refresh(order)
        logger.info(f"[OrderRepository] Order {order.id} created")
        return order

    async def update_status(self, order_id: uuid.UUID, status: str) -> Optional[Order]:
        order = await self.db.get(Order, order_id)
        if order is None:
            return None
        order.status = status
        await self.db.commit()
        await self.db.refresh(order)
        logger.info(f"[OrderRepository] Order {order_id} status -> {status}")
        return order

    async def list(self, limit: int = 100, offset: int = 0, status: Optional[str] = None) -> Tuple[List[Order], int]:
        logger.debug(f"[OrderRepository] Listing orders: limit={limit}, offset={offset}, status={status}")
        query = select(Order).order_by(Order.created_at.desc()).offset(offset).limit(limit)
        if status:
            query = query.where(Order.status == status)
            total = await self.crud.count(db=self.db, status=status)
        else:
            total = await self.crud.count(db=self.db)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total
