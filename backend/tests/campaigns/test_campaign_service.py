import asyncio
import random
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace
from typing import Dict, List, Optional, Sequence
from unittest.mock import AsyncMock

import pytest

from screenprint.campaigns.exceptions import (
    CampaignClosedException,
    EmptyCampaignException,
    InvalidCampaignException,
    InvalidCampaignSelectionException,
    InvalidCampaignStatusException,
    InvalidCampaignOrderStatusException,
)
from screenprint.campaigns.interfaces.repositories import AbstractCampaignRepository
from screenprint.campaigns.models import (
    Campaign,
    CampaignOrder,
    CampaignCreate,
    CampaignOrderCreate,
    CampaignOrderStatusUpdate,
    CampaignSettleRequest,
)
from screenprint.campaigns.service import CampaignService
from screenprint.garments.exceptions import GarmentNotFoundException
from screenprint.orders.interfaces.repositories import AbstractOrderRepository
from screenprint.orders.models import Order, CampaignPricingBreakdown
from screenprint.quotes.exceptions import MinimumQuantityException
from screenprint.quotes.service import QuoteService

NOW = datetime(2026, 6, 1, 12, 0)
TEE_ID = uuid.uuid4()
HOODIE_ID = uuid.uuid4()
GARMENTS = {
    TEE_ID: SimpleNamespace(id=TEE_ID, name="Classic Tee", base_cost=Decimal("10.00"), available_colors=["Black", "White"]),
    HOODIE_ID: SimpleNamespace(id=HOODIE_ID, name="Premium Hoodie", base_cost=Decimal("20.00"), available_colors=["Heather Grey"]),
}
FRONT_TWO = {"locations": {"front": {"enabled": True, "num_colors": 2}}}
TEE_PRICE = Decimal("18.00")
HOODIE_PRICE = Decimal("33.00")


class InMemoryCampaignRepository(AbstractCampaignRepository):
    """Chaque appel rend la main à la boucle, comme un aller-retour base."""

    def __init__(self):
        self.campaigns: Dict[uuid.UUID, Campaign] = {}
        self.orders: Dict[uuid.UUID, CampaignOrder] = {}

    async def slug_exists(self, slug: str) -> bool:
        await asyncio.sleep(0)
        return any(c.slug == slug for c in self.campaigns.values())

    async def create(self, values: dict) -> Campaign:
        await asyncio.sleep(0)
        campaign = Campaign(**values)
        self.campaigns[campaign.id] = campaign
        return campaign

    async def get_by_slug(self, slug: str) -> Optional[Campaign]:
        await asyncio.sleep(0)
        return next((c for c in self.campaigns.values() if c.slug == slug), None)

    async def list(self, limit: int = 100, offset: int = 0, status: Optional[str] = None, organizer_email: Optional[str] = None):
        await asyncio.sleep(0)
        rows = [
            c for c in self.campaigns.values()
            if (status is None or c.status == status) and (organizer_email is None or c.organizer_email == organizer_email)
        ]
        return rows[offset:offset + limit], len(rows)

    async def update_status(self, campaign_id: uuid.UUID, status: str) -> Optional[Campaign]:
        await asyncio.sleep(0)
        campaign = self.campaigns.get(campaign_id)
        if campaign is not None:
            campaign.status = status
        return campaign

    async def claim_for_settlement(self, campaign_id: uuid.UUID, from_statuses: Sequence[str]) -> bool:
        await asyncio.sleep(0)
        campaign = self.campaigns.get(campaign_id)
        if campaign is None or campaign.status not in from_statuses:
            return False
        campaign.status = "completed"
        return True

    async def set_final_order(self, campaign_id: uuid.UUID, order_id: uuid.UUID) -> Optional[Campaign]:
        await asyncio.sleep(0)
        campaign = self.campaigns.get(campaign_id)
        if campaign is not None:
            campaign.final_order_id = order_id
            campaign.status = "completed"
        return campaign

    async def create_orders(self, rows: List[dict]) -> List[CampaignOrder]:
        await asyncio.sleep(0)
        orders = [CampaignOrder(**row) for row in rows]
        for order in orders:
            self.orders[order.id] = order
        return orders

    async def get_order(self, campaign_id: uuid.UUID, order_id: uuid.UUID) -> Optional[CampaignOrder]:
        await asyncio.sleep(0)
        order = self.orders.get(order_id)
        return order if order is not None and order.campaign_id == campaign_id else None

    async def list_orders(self, campaign_id: uuid.UUID, statuses: Optional[Sequence[str]] = None) -> List[CampaignOrder]:
        await asyncio.sleep(0)
        return [
            o for o in self.orders.values()
            if o.campaign_id == campaign_id and (statuses is None or o.status in statuses)
        ]

    async def update_order(self, order_id: uuid.UUID, values: dict) -> Optional[CampaignOrder]:
        await asyncio.sleep(0)
        order = self.orders.get(order_id)
        if order is not None:
            for key, value in values.items():
                setattr(order, key, value)
        return order


class InMemoryOrderRepository(AbstractOrderRepository):

    def __init__(self):
        self.rows: Dict[uuid.UUID, Order] = {}

    async def get_by_id(self, order_id: uuid.UUID) -> Optional[Order]:
        return self.rows.get(order_id)

    async def get_by_payment_intent_id(self, payment_intent_id: str) -> Optional[Order]:
        return next((o for o in self.rows.values() if o.payment_intent_id == payment_intent_id), None)

    async def create(self, values: dict) -> Order:
        await asyncio.sleep(0)
        order = Order(**values)
        self.rows[order.id] = order
        return order

    async def update_status(self, order_id: uuid.UUID, status: str) -> Optional[Order]:
        order = self.rows.get(order_id)
        if order is not None:
            order.status = status
        return order

    async def list(self, limit: int = 100, offset: int = 0, status: Optional[str] = None):
        rows = [o for o in self.rows.values() if status is None or o.status == status]
        return rows[offset:offset + limit], len(rows)


@pytest.fixture
def campaign_repository():
    return InMemoryCampaignRepository()


@pytest.fixture
def order_repository():
    return InMemoryOrderRepository()


@pytest.fixture
def service(campaign_repository, order_repository, catalog_snapshot):
    catalog = AsyncMock()
    catalog.get_snapshot.return_value = catalog_snapshot
    garment_repository = AsyncMock()
    garment_repository.get_active.side_effect = lambda garment_id: GARMENTS.get(garment_id)
    garment_repository.get_active_many.side_effect = lambda ids: {i: GARMENTS[i] for i in ids if i in GARMENTS}
    return CampaignService(
        repository=campaign_repository,
        order_repository=order_repository,
        garment_repository=garment_repository,
        quote_service=QuoteService(garment_repository=garment_repository, catalog=catalog),
        catalog=catalog,
        clock=lambda: NOW,
    )


def campaign_in(**overrides) -> CampaignCreate:
    data = {
        "name": "Club de Foot 2026",
        "deadline": NOW + timedelta(days=14),
        "payment_style": "everyone_pays",
        "print_config": FRONT_TWO,
        "garments": {TEE_ID: {"colors": ["Black"]}},
        "organizer_email": "coach@club.org",
        "organizer_name": "Coach",
    }
    data.update(overrides)
    return CampaignCreate(**data)


def participant(quantity: int = 1, garment_id: uuid.UUID = TEE_ID, color: str = "Black", size: str = "M", name: str = "Alex"):
    return CampaignOrderCreate(
        participant_name=name,
        participant_email=f"{name.lower()}@club.org",
        items=[{"garment_id": garment_id, "size": size, "color": color, "quantity": quantity}],
    )


async def fill(service, slug: str, quantities: List[int], garment_id: uuid.UUID = TEE_ID, color: str = "Black", pay: bool = True):
    for index, quantity in enumerate(quantities):
        checkout = await service.place_order(slug, participant(quantity, garment_id, color, name=f"P{index}"))
        if pay:
            for order in checkout.orders:
                await service.update_order_status(slug, order.id, CampaignOrderStatusUpdate(status="paid", payment_intent_id=f"pi_{order.id}"))


# --- Création ---

@pytest.mark.asyncio
async def test_create_campaign_stores_lowest_tier_price(service):
    campaign = await service.create_campaign(campaign_in())
    assert campaign.status == "active"
    assert campaign.slug.startswith("club-de-foot-2026-")
    assert campaign.garment_configs[TEE_ID].price == TEE_PRICE
    assert campaign.garment_configs[TEE_ID].colors == ["Black"]


@pytest.mark.asyncio
async def test_create_campaign_defaults_to_all_garment_colors(service):
    campaign = await service.create_campaign(campaign_in(garments={TEE_ID: {}, HOODIE_ID: {}}))
    assert campaign.garment_configs[TEE_ID].colors == ["Black", "White"]
    assert campaign.garment_configs[HOODIE_ID].price == HOODIE_PRICE


@pytest.mark.asyncio
async def test_create_campaign_rejects_past_deadline(service):
    with pytest.raises(InvalidCampaignException):
        await service.create_campaign(campaign_in(deadline=NOW - timedelta(minutes=1)))


@pytest.mark.asyncio
async def test_create_campaign_rejects_unknown_garment_and_color(service):
    with pytest.raises(GarmentNotFoundException):
        await service.create_campaign(campaign_in(garments={uuid.uuid4(): {}}))
    with pytest.raises(InvalidCampaignException):
        await service.create_campaign(campaign_in(garments={TEE_ID: {"colors": ["Neon Pink"]}}))


# --- Commandes participants ---

@pytest.mark.asyncio
async def test_place_order_prices_at_campaign_price(service):
    campaign = await service.create_campaign(campaign_in())
    checkout = await service.place_order(campaign.slug, participant(quantity=3))

    assert checkout.requires_payment is True
    assert checkout.amount_due == Decimal("54.00")
    assert checkout.orders[0].unit_price == TEE_PRICE
    assert checkout.orders[0].status == "pending"


@pytest.mark.asyncio
async def test_organizer_pays_orders_are_confirmed_without_payment(service):
    campaign = await service.create_campaign(campaign_in(payment_style="organizer_pays"))
    checkout = await service.place_order(campaign.slug, participant(quantity=2))

    assert checkout.requires_payment is False
    assert checkout.amount_due == Decimal("0.00")
    assert checkout.orders[0].status == "confirmed"


@pytest.mark.asyncio
async def test_place_order_never_exceeds_advertised_price(service, catalog_snapshot):
    campaign = await service.create_campaign(campaign_in())
    for tier in catalog_snapshot.tiers:
        tier.garment_markup_percentage += Decimal("20")

    checkout = await service.place_order(campaign.slug, participant())
    assert checkout.orders[0].unit_price == TEE_PRICE


@pytest.mark.asyncio
async def test_place_order_rejects_selection_outside_campaign(service):
    campaign = await service.create_campaign(campaign_in())
    with pytest.raises(InvalidCampaignSelectionException):
        await service.place_order(campaign.slug, participant(color="White"))
    with pytest.raises(InvalidCampaignSelectionException):
        await service.place_order(campaign.slug, participant(garment_id=HOODIE_ID, color="Heather Grey"))


@pytest.mark.asyncio
async def test_place_order_after_close_is_rejected(service):
    campaign = await service.create_campaign(campaign_in())
    await service.close_campaign(campaign.slug)
    with pytest.raises(CampaignClosedException):
        await service.place_order(campaign.slug, participant())
    with pytest.raises(InvalidCampaignStatusException):
        await service.close_campaign(campaign.slug)


@pytest.mark.asyncio
async def test_place_order_after_deadline_is_rejected(service):
    campaign = await service.create_campaign(campaign_in())
    service.clock = lambda: NOW + timedelta(days=15)
    with pytest.raises(CampaignClosedException):
        await service.place_order(campaign.slug, participant())


# --- Statuts et statistiques ---

@pytest.mark.asyncio
async def test_mark_paid_records_amount(service):
    campaign = await service.create_campaign(campaign_in())
    checkout = await service.place_order(campaign.slug, participant(quantity=2))

    updated = await service.update_order_status(
        campaign.slug, checkout.orders[0].id, CampaignOrderStatusUpdate(status="paid", payment_intent_id="pi_1")
    )
    assert updated.status == "paid"
    assert updated.amount_paid == Decimal("36.00")
    assert updated.payment_intent_id == "pi_1"


@pytest.mark.asyncio
async def test_status_update_rules(service):
    campaign = await service.create_campaign(campaign_in())
    checkout = await service.place_order(campaign.slug, participant())
    order_id = checkout.orders[0].id

    with pytest.raises(InvalidCampaignOrderStatusException):
        await service.update_order_status(campaign.slug, order_id, CampaignOrderStatusUpdate(status="confirmed"))
    with pytest.raises(InvalidCampaignOrderStatusException):
        await service.update_order_status(campaign.slug, order_id, CampaignOrderStatusUpdate(status="shipped"))

    await service.update_order_status(campaign.slug, order_id, CampaignOrderStatusUpdate(status="cancelled"))
    with pytest.raises(InvalidCampaignOrderStatusException):
        await service.update_order_status(campaign.slug, order_id, CampaignOrderStatusUpdate(status="paid"))


@pytest.mark.asyncio
async def test_stats_count_only_paid_orders(service):
    campaign = await service.create_campaign(campaign_in(garments={TEE_ID: {}}))
    await fill(service, campaign.slug, [2, 3])
    await service.place_order(campaign.slug, participant(quantity=5, color="White"))

    stats = await service.get_stats(campaign.slug)
    assert stats.order_count == 2
    assert stats.total_quantity == 5
    assert stats.color_breakdown == {"Black": 5}
    assert stats.garment_breakdown == {TEE_ID: 5}
    assert stats.total_revenue == Decimal("90.00")


# --- Règlement ---

@pytest.mark.asyncio
async def test_settlement_keeps_campaign_price_when_quote_is_higher(service, campaign_repository, order_repository):
    campaign = await service.create_campaign(campaign_in())
    await fill(service, campaign.slug, [10, 10, 10])

    result = await service.settle_campaign(campaign.slug, CampaignSettleRequest())

    # Devis réel à 30 pièces: 590.00, supérieur aux 30 x 18.00 encaissés
    assert result.order.total_cost == Decimal("540.00")
    assert result.settled_price_per_shirt == Decimal("18")
    assert result.refund_due == Decimal("0.00")
    assert result.order.color_size_quantities == {"Black": {"M": 30}}
    assert result.order.deposit_paid is True
    assert result.order.balance_due == Decimal("0.00")
    assert isinstance(result.order.pricing_breakdown, CampaignPricingBreakdown)
    assert result.order.pricing_breakdown.quoted_total == Decimal("590.00")
    assert result.campaign.status == "completed"
    assert result.campaign.final_order_id == result.order.id
    assert len(order_repository.rows) == 1


@pytest.mark.asyncio
async def test_settlement_passes_volume_savings_on(service):
    campaign = await service.create_campaign(campaign_in())
    await fill(service, campaign.slug, [50] * 4)

    result = await service.settle_campaign(campaign.slug, CampaignSettleRequest())

    assert result.order.total_quantity == 200
    assert result.order.total_cost == Decimal("3100.00")
    assert result.settled_price_per_shirt == Decimal("15.5")
    assert result.refund_due == Decimal("500.00")


@pytest.mark.asyncio
async def test_settled_price_never_above_campaign_price(service):
    rng = random.Random(20260601)
    for _ in range(15):
        campaign = await service.create_campaign(campaign_in())
        quantities = [rng.randint(1, 40) for _ in range(rng.randint(3, 12))]
        if sum(quantities) < 24:
            quantities.append(24)
        await fill(service, campaign.slug, quantities)

        result = await service.settle_campaign(campaign.slug, CampaignSettleRequest())

        assert result.order.total_quantity == sum(quantities)
        assert result.settled_price_per_shirt <= TEE_PRICE
        assert result.order.total_cost <= TEE_PRICE * sum(quantities)


@pytest.mark.asyncio
async def test_multi_garment_settlement(service):
    campaign = await service.create_campaign(campaign_in(garments={TEE_ID: {}, HOODIE_ID: {}}))
    await fill(service, campaign.slug, [20])
    await fill(service, campaign.slug, [30], garment_id=HOODIE_ID, color="Heather Grey")

    result = await service.settle_campaign(campaign.slug, CampaignSettleRequest())

    # Tranche 48-71: 280 + 840 + 50 x 2.75 + 50 de setup
    assert result.order.total_cost == Decimal("1307.50")
    assert result.order.garment_id is None
    assert set(result.order.selected_garments) == {str(TEE_ID), str(HOODIE_ID)}
    assert result.refund_due == Decimal("42.50")


@pytest.mark.asyncio
async def test_organizer_pays_settlement_splits_deposit(service):
    campaign = await service.create_campaign(campaign_in(payment_style="organizer_pays"))
    await fill(service, campaign.slug, [15, 15], pay=False)

    result = await service.settle_campaign(campaign.slug, CampaignSettleRequest(payment_intent_id="pi_org"))

    assert result.order.total_cost == Decimal("540.00")
    assert result.order.deposit_amount == Decimal("270.00")
    assert result.order.balance_due == Decimal("270.00")
    assert result.order.deposit_paid is True
    assert result.refund_due == Decimal("0.00")


@pytest.mark.asyncio
async def test_settlement_requires_counted_orders(service):
    campaign = await service.create_campaign(campaign_in())
    await fill(service, campaign.slug, [30], pay=False)
    with pytest.raises(EmptyCampaignException):
        await service.settle_campaign(campaign.slug, CampaignSettleRequest())


@pytest.mark.asyncio
async def test_settlement_below_minimum_quantity(service):
    campaign = await service.create_campaign(campaign_in())
    await fill(service, campaign.slug, [5, 5])
    with pytest.raises(MinimumQuantityException):
        await service.settle_campaign(campaign.slug, CampaignSettleRequest())


@pytest.mark.asyncio
async def test_campaign_is_settled_once(service, order_repository):
    campaign = await service.create_campaign(campaign_in())
    await fill(service, campaign.slug, [30])

    results = await asyncio.gather(
        service.settle_campaign(campaign.slug, CampaignSettleRequest()),
        service.settle_campaign(campaign.slug, CampaignSettleRequest()),
        return_exceptions=True,
    )

    errors = [r for r in results if isinstance(r, Exception)]
    assert len(errors) == 1
    assert isinstance(errors[0], InvalidCampaignStatusException)
    assert len(order_repository.rows) == 1

    with pytest.raises(InvalidCampaignStatusException):
        await service.settle_campaign(campaign.slug, CampaignSettleRequest())
    with pytest.raises(CampaignClosedException):
        await service.place_order(campaign.slug, participant())
