import logging
import uuid
from typing import List, Optional

from fastcrud import FastCRUD
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from screenprint.discounts.exceptions import DuplicateDiscountCodeException
from screenprint.discounts.interfaces.repositories import AbstractDiscountCodeRepository
from screenprint.discounts.models import DiscountCode, DiscountCodeCreate

logger = logging.getLogger(__name__)


class SQLAlchemyDiscountCodeRepository(AbstractDiscountCodeRepository):
    """Implémentation SQLAlchemy du repository des codes de réduction."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.crud = FastCRUD(DiscountCode)

    async def get_by_id(self, discount_code_id: uuid.UUID) -> Optional[DiscountCode]:
        return await self.db.get(DiscountCode, discount_code_id)

    async def get_by_code(self, code: str) -> Optional[DiscountCode]:
        logger.debug(f"[DiscountCodeRepository] Getting discount code: {code}")
        result = await self.db.execute(select(DiscountCode).where(DiscountCode.code == code))
        return result.scalars().first()

    async def code_exists(self, code: str) -> bool:
        return await self.crud.exists(db=self.db, code=code)

    async def list_all(self) -> List[DiscountCode]:
        result = await self.db.execute(select(DiscountCode).order_by(DiscountCode.created_at.desc()))
        return list(result.scalars().all())

    async def create(self, discount_data: DiscountCodeCreate) -> DiscountCode:
        logger.debug(f"[DiscountCodeRepository] Creating discount code: {discount_data.code}")
        db_code = DiscountCode(**discount_data.model_dump())
        self.db.add(db_code)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"[DiscountCodeRepository] Integrity error creating code {discount_data.code}: {e}")
            raise DuplicateDiscountCodeException(discount_data.code)
        await self.db.refresh(db_code)
        return db_code

    async def update(self, discount_code_id: uuid.UUID, values: dict) -> Optional[DiscountCode]:
        db_code = await self.db.get(DiscountCode, discount_code_id)
        if db_code is None:
            return None
        for field, value in values.items():
            setattr(db_code, field, value)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"[DiscountCodeRepository] Integrity error updating code {discount_code_id}: {e}")
            raise DuplicateDiscountCodeException(values.get("code", db_code.code))
        await self.db.refresh(db_code)
        return db_code

    async def delete(self, discount_code_id: uuid.UUID) -> bool:
        db_code = await self.db.get(DiscountCode, discount_code_id)
        if db_code is None:
            return False
        await self.db.delete(db_code)
        await self.db.commit()
        return True
