import logging
import uuid
from typing import Dict, Iterable, List, Optional, Tuple

from fastcrud import FastCRUD
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from screenprint.core.clock import utc_now
from screenprint.garments.interfaces.repositories import AbstractGarmentRepository
from screenprint.garments.models import Garment, GarmentCreate

logger = logging.getLogger(__name__)


class SQLAlchemyGarmentRepository(AbstractGarmentRepository):
    """Implémentation SQLAlchemy du repository des vêtements."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.crud = FastCRUD(Garment)

    async def get_by_id(self, garment_id: uuid.UUID) -> Optional[Garment]:
        logger.debug(f"[GarmentRepository] Getting garment by ID: {garment_id}")
        return await self.db.get(Garment, garment_id)

    async def get_active(self, garment_id: uuid.UUID) -> Optional[Garment]:
        result = await self.db.execute(
            select(Garment).where(
                Garment.id == garment_id,
                Garment.active.is_(True),
                Garment.deleted_at.is_(None),
            )
        )
        return result.scalars().first()

    async def get_active_many(self, garment_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, Garment]:
        ids = list(set(garment_ids))
        if not ids:
            return {}
        result = await self.db.execute(
            select(Garment).where(
                Garment.id.in_(ids),
                Garment.active.is_(True),
                Garment.deleted_at.is_(None),
            )
        )
        return {g.id: g for g in result.scalars().all()}

    async def list(self, limit: int = 100, offset: int = 0, include_inactive: bool = False) -> Tuple[List[Garment], int]:
        logger.debug(f"[GarmentRepository] Listing garments: limit={limit}, offset={offset}, include_inactive={include_inactive}")
        query = select(Garment).order_by(Garment.name).offset(offset).limit(limit)
        if include_inactive:
            total = await self.crud.count(db=self.db)
        else:
            query = query.where(Garment.active.is_(True))
            total = await self.crud.count(db=self.db, active=True)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def create(self, garment_data: GarmentCreate) -> Garment:
        logger.debug(f"[GarmentRepository] Creating garment: {garment_data.name}")
        db_garment = Garment(**garment_data.model_dump())
        self.db.add(db_garment)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(db_garment)
        return db_garment

    async def update(self, garment_id: uuid.UUID, values: dict) -> Optional[Garment]:
        logger.debug(f"[GarmentRepository] Updating garment ID: {garment_id} with {values}")
        db_garment = await self.db.get(Garment, garment_id)
        if db_garment is None:
            return None
        for field, value in values.items():
            setattr(db_garment, field, value)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(db_garment)
        return db_garment

    async def soft_delete(self, garment_id: uuid.UUID) -> Optional[Garment]:
        logger.debug(f"[GarmentRepository] Soft-deleting garment ID: {garment_id}")
        return await self.update(garment_id, {"active": False, "deleted_at": utc_now()})
