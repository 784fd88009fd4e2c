# screenprint/pricing/repositories.py
import logging
import uuid
from typing import List, Optional

from fastcrud import FastCRUD
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from screenprint.garments.models import Garment
from screenprint.pricing.exceptions import DuplicatePrintPricingException
from screenprint.pricing.interfaces.repositories import (
    AbstractPricingTierRepository,
    AbstractPrintPricingRepository,
    AbstractAppConfigRepository,
)
from screenprint.pricing.models import (
    PricingTier, PricingTierCreate,
    PrintPricing, PrintPricingCreate,
    AppConfig,
)

logger = logging.getLogger(__name__)


class SQLAlchemyPricingTierRepository(AbstractPricingTierRepository):
    """Implémentation SQLAlchemy du repository des tranches de prix."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.garment_crud = FastCRUD(Garment)

    async def list_all(self) -> List[PricingTier]:
        logger.debug("[PricingTierRepository] Listing all pricing tiers")
        result = await self.db.execute(select(PricingTier).order_by(PricingTier.min_qty))
        return list(result.scalars().all())

    async def get_by_id(self, tier_id: uuid.UUID) -> Optional[PricingTier]:
        logger.debug(f"[PricingTierRepository] Getting tier by ID: {tier_id}")
        return await self.db.get(PricingTier, tier_id)

    async def create(self, tier_data: PricingTierCreate) -> PricingTier:
        logger.debug(f"[PricingTierRepository] Creating tier: {tier_data.name}")
        db_tier = PricingTier(**tier_data.model_dump())
        self.db.add(db_tier)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(db_tier)
        return db_tier

    async def update(self, tier_id: uuid.UUID, values: dict) -> Optional[PricingTier]:
        logger.debug(f"[PricingTierRepository] Updating tier ID: {tier_id} with {values}")
        db_tier = await self.db.get(PricingTier, tier_id)
        if db_tier is None:
            return None
        for field, value in values.items():
            setattr(db_tier, field, value)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(db_tier)
        return db_tier

    async def delete(self, tier_id: uuid.UUID) -> bool:
        logger.debug(f"[PricingTierRepository] Deleting tier ID: {tier_id}")
        db_tier = await self.db.get(PricingTier, tier_id)
        if db_tier is None:
            return False
        # Les tarifs d'impression de la tranche disparaissent avec elle
        rows = await self.db.execute(select(PrintPricing).where(PrintPricing.tier_id == tier_id))
        for row in rows.scalars().all():
            await self.db.delete(row)
        await self.db.delete(db_tier)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        return True

    async def count_garments_using_tier(self, tier_id: uuid.UUID) -> int:
        return await self.garment_crud.count(db=self.db, pricing_tier_id=tier_id)


class SQLAlchemyPrintPricingRepository(AbstractPrintPricingRepository):
    """Implémentation SQLAlchemy du repository des tarifs d'impression."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def list_all(self) -> List[PrintPricing]:
        logger.debug("[PrintPricingRepository] Listing all print pricing rows")
        result = await self.db.execute(
            select(PrintPricing).order_by(PrintPricing.tier_id, PrintPricing.num_colors)
        )
        return list(result.scalars().all())

    async def get_by_id(self, print_pricing_id: uuid.UUID) -> Optional[PrintPricing]:
        return await self.db.get(PrintPricing, print_pricing_id)

    async def get_by_tier_and_colors(self, tier_id: uuid.UUID, num_colors: int) -> Optional[PrintPricing]:
        result = await self.db.execute(
            select(PrintPricing).where(
                PrintPricing.tier_id == tier_id,
                PrintPricing.num_colors == num_colors,
            )
        )
        return result.scalars().first()

    async def create(self, pricing_data: PrintPricingCreate) -> PrintPricing:
        logger.debug(f"[PrintPricingRepository] Creating print pricing tier={pricing_data.tier_id} colors={pricing_data.num_colors}")
        db_pricing = PrintPricing(**pricing_data.model_dump())
        self.db.add(db_pricing)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"[PrintPricingRepository] Integrity error creating print pricing: {e}")
            raise DuplicatePrintPricingException(pricing_data.tier_id, pricing_data.num_colors)
        await self.db.refresh(db_pricing)
        return db_pricing

    async def update(self, print_pricing_id: uuid.UUID, values: dict) -> Optional[PrintPricing]:
        db_pricing = await self.db.get(PrintPricing, print_pricing_id)
        if db_pricing is None:
            return None
        for field, value in values.items():
            setattr(db_pricing, field, value)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"[PrintPricingRepository] Integrity error updating print pricing {print_pricing_id}: {e}")
            raise DuplicatePrintPricingException(db_pricing.tier_id, db_pricing.num_colors)
        await self.db.refresh(db_pricing)
        return db_pricing

    async def delete(self, print_pricing_id: uuid.UUID) -> bool:
        db_pricing = await self.db.get(PrintPricing, print_pricing_id)
        if db_pricing is None:
            return False
        await self.db.delete(db_pricing)
        await self.db.commit()
        return True


class SQLAlchemyAppConfigRepository(AbstractAppConfigRepository):
    """Implémentation SQLAlchemy de la configuration globale."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session

    async def get(self) -> Optional[AppConfig]:
        result = await self.db.execute(select(AppConfig).limit(1))
        return result.scalars().first()

    async def upsert(self, values: dict) -> AppConfig:
        config = await self.get()
        if config is None:
            logger.info("[AppConfigRepository] Aucune ligne app_config, création.")
            config = AppConfig(**values)
            self.db.add(config)
        else:
            for field, value in values.items():
                setattr(config, field, value)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(config)
        return config
