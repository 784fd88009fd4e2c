import logging
import uuid
from typing import Iterable, List, Optional, Tuple

from fastcrud import FastCRUD
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from screenprint.campaigns.interfaces.repositories import AbstractCampaignRepository
from screenprint.campaigns.models import Campaign, CampaignOrder

logger = logging.getLogger(__name__)


class SQLAlchemyCampaignRepository(AbstractCampaignRepository):
    """Implémentation SQLAlchemy des campagnes."""

    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.crud = FastCRUD(Campaign)

    async def slug_exists(self, slug: str) -> bool:
        return await self.crud.exists(db=self.db, slug=slug)

    async def create(self, values: dict) -> Campaign:
        campaign = Campaign(**values)
        self.db.add(campaign)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(campaign)
        logger.info(f"[CampaignRepository] Campaign {campaign.slug} created")
        return campaign

    async def get_by_slug(self, slug: str) -> Optional[Campaign]:
        logger.debug(f"[CampaignRepository] Getting campaign by slug: {slug}")
        result = await self.db.execute(select(Campaign).where(Campaign.slug == slug))
        return result.scalars().first()

    async def list(
        self,
        limit: int = 100,
        offset: int = 0,
        status: Optional[str] = None,
        organizer_email: Optional[str] = None,
    ) -> Tuple[List[Campaign], int]:
        filters = {}
        query = select(Campaign).order_by(Campaign.created_at.desc()).offset(offset).limit(limit)
        if status:
            query = query.where(Campaign.status == status)
            filters["status"] = status
        if organizer_email:
            query = query.where(Campaign.organizer_email == organizer_email)
            filters["organizer_email"] = organizer_email
        total = await self.crud.count(db=self.db, **filters)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def update_status(self, campaign_id: uuid.UUID, status: str) -> Optional[Campaign]:
        campaign = await self.db.get(Campaign, campaign_id)
        if campaign is None:
            return None
        campaign.status = status
        await self.db.commit()
        await self.db.refresh(campaign)
        logger.info(f"[CampaignRepository] Campaign {campaign_id} status -> {status}")
        return campaign

    async def claim_for_settlement(self, campaign_id: uuid.UUID, from_statuses: Iterable[str]) -> bool:
        # UPDATE conditionnel: la ligne verrouillée désigne l'unique règlement
        result = await self.db.execute(
            update(Campaign)
            .where(Campaign.id == campaign_id, Campaign.status.in_(list(from_statuses)))
            .values(status="completed")
            .execution_options(synchronize_session=False)
        )
        claimed = result.rowcount > 0
        logger.debug(f"[CampaignRepository] Settlement claim {campaign_id}: {'ok' if claimed else 'refusé'}")
        return claimed

    async def set_final_order(self, campaign_id: uuid.UUID, order_id: uuid.UUID) -> Optional[Campaign]:
        campaign = await self.db.get(Campaign, campaign_id)
        if campaign is None:
            return None
        campaign.final_order_id = order_id
        campaign.status = "completed"
        await self.db.commit()
        await self.db.refresh(campaign)
        return campaign

    async def create_orders(self, values: List[dict]) -> List[CampaignOrder]:
        orders = [CampaignOrder(**row) for row in values]
        self.db.add_all(orders)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        for order in orders:
            await self.db.refresh(order)
        return orders

    async def get_order(self, campaign_id: uuid.UUID, order_id: uuid.UUID) -> Optional[CampaignOrder]:
        result = await self.db.execute(
            select(CampaignOrder).where(CampaignOrder.id == order_id, CampaignOrder.campaign_id == campaign_id)
        )
        return result.scalars().first()

    async def list_orders(self, campaign_id: uuid.UUID, statuses: Optional[Iterable[str]] = None) -> List[CampaignOrder]:
        query = select(CampaignOrder).where(CampaignOrder.campaign_id == campaign_id).order_by(CampaignOrder.created_at.desc())
        if statuses is not None:
            query = query.where(CampaignOrder.status.in_(list(statuses)))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def update_order(self, order_id: uuid.UUID, values: dict) -> Optional[CampaignOrder]:
        order = await self.db.get(CampaignOrder, order_id)
        if order is None:
            return None
        for field, value in values.items():
            setattr(order, field, value)
        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(order)
        return order
