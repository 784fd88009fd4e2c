import logging
import uuid
from collections import Counter
from datetime import datetime
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from screenprint.core.clock import utc_now, to_naive_utc
from screenprint.garments.exceptions import GarmentNotFoundException
from screenprint.garments.interfaces.repositories import AbstractGarmentRepository
from screenprint.orders.config import INITIAL_ORDER_STATUS
from screenprint.orders.interfaces.repositories import AbstractOrderRepository
from screenprint.orders.models import CampaignPricingBreakdown, OrderRead, count_quantities
from screenprint.pricing.catalog import PricingCatalog
from screenprint.pricing.utils import round_cents, split_deposit, to_decimal
from screenprint.quotes.models import PrintConfig, GarmentQuantity
from screenprint.quotes.service import QuoteService
from .config import (
    CAMPAIGN_STATUS,
    SETTLEABLE_CAMPAIGN_STATUS,
    PARTICIPANT_ORDER_STATUS,
    INITIAL_PARTICIPANT_STATUS,
    COUNTED_PARTICIPANT_STATUS,
    SLUG_ATTEMPTS,
)
from .exceptions import (
    CampaignNotFoundException,
    CampaignOrderNotFoundException,
    CampaignClosedException,
    CampaignOperationFailedException,
    EmptyCampaignException,
    InvalidCampaignException,
    InvalidCampaignSelectionException,
    InvalidCampaignStatusException,
    InvalidCampaignOrderStatusException,
)
from .interfaces.repositories import AbstractCampaignRepository
from .models import (
    Campaign,
    CampaignCreate,
    CampaignRead,
    PaginatedCampaignResponse,
    CampaignOrderCreate,
    CampaignOrderRead,
    CampaignCheckoutResponse,
    CampaignOrderStatusUpdate,
    CampaignStats,
    CampaignSettleRequest,
    CampaignSettlementResponse,
)
from .utils import generate_slug, aggregate_participant_orders

logger = logging.getLogger(__name__)


class CampaignService:
    """
    Campagnes de commande groupée.

    Les participants paient un prix unitaire provisoire (tranche la plus
    basse, hors setup). Au règlement, la quantité agrégée est re-tarifée
    comme un devis multi-vêtements et le montant retenu est le plus petit
    des deux: le prix ne peut que baisser.
    """

    def __init__(
        self,
        repository: AbstractCampaignRepository,
        order_repository: AbstractOrderRepository,
        garment_repository: AbstractGarmentRepository,
        quote_service: QuoteService,
        catalog: PricingCatalog,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.order_repository = order_repository
        self.garment_repository = garment_repository
        self.quote_service = quote_service
        self.catalog = catalog
        self.clock = clock
        logger.info("CampaignService initialisé.")

    async def _get(self, slug: str) -> Campaign:
        campaign = await self.repository.get_by_slug(slug)
        if campaign is None:
            raise CampaignNotFoundException(slug)
        return campaign

    async def _unique_slug(self, name: str) -> str:
        for _ in range(SLUG_ATTEMPTS):
            slug = generate_slug(name)
            if not await self.repository.slug_exists(slug):
                return slug
            logger.debug(f"[CampaignService] Slug déjà pris: {slug}")
        raise CampaignOperationFailedException(f"Impossible de générer un slug unique pour '{name}'.")

    async def _current_prices(self, garment_ids: List[uuid.UUID], print_config: PrintConfig) -> Dict[uuid.UUID, Decimal]:
        """Prix unitaires de campagne actuels, arrondis au centime."""
        result = await self.quote_service.calculate_campaign_prices(garment_ids, print_config)
        return {garment_id: round_cents(price) for garment_id, price in result.prices.items()}

    # --- Campagnes ---

    async def create_campaign(self, campaign_in: CampaignCreate) -> CampaignRead:
        logger.info(f"[CampaignService] Création campagne '{campaign_in.name}' pour {campaign_in.organizer_email}")
        deadline = to_naive_utc(campaign_in.deadline)
        if deadline <= self.clock():
            raise InvalidCampaignException("Campaign deadline must be in the future.")

        garment_ids = list(campaign_in.garments.keys())
        prices = await self._current_prices(garment_ids, campaign_in.print_config)
        records = await self.garment_repository.get_active_many(garment_ids)
        for garment_id in garment_ids:
            if garment_id not in prices or garment_id not in records:
                raise GarmentNotFoundException(garment_id)

        garment_configs = {}
        for garment_id, selection in campaign_in.garments.items():
            available = list(records[garment_id].available_colors or [])
            colors = selection.colors or available
            unknown = [color for color in colors if available and color not in available]
            if unknown:
                raise InvalidCampaignException(f"Colors not available for garment {garment_id}: {', '.join(unknown)}")
            garment_configs[str(garment_id)] = {"price": str(prices[garment_id]), "colors": colors}

        campaign = await self.repository.create({
            "slug": await self._unique_slug(campaign_in.name),
            "name": campaign_in.name,
            "deadline": deadline,
            "payment_style": campaign_in.payment_style,
            "status": "active",
            "print_config": campaign_in.print_config.model_dump(mode="json"),
            "garment_configs": garment_configs,
            "organizer_name": campaign_in.organizer_name,
            "organizer_email": str(campaign_in.organizer_email),
        })
        return CampaignRead.model_validate(campaign)

    async def get_campaign(self, slug: str) -> CampaignRead:
        return CampaignRead.model_validate(await self._get(slug))

    async def list_campaigns(
        self,
        limit: int,
        offset: int,
        status: Optional[str] = None,
        organizer_email: Optional[str] = None,
    ) -> PaginatedCampaignResponse:
        if status is not None and status not in CAMPAIGN_STATUS:
            raise InvalidCampaignException(f"Unknown campaign status: {status}.")
        campaigns, total = await self.repository.list(
            limit=limit, offset=offset, status=status, organizer_email=organizer_email
        )
        return PaginatedCampaignResponse(items=[CampaignRead.model_validate(c) for c in campaigns], total=total)

    async def close_campaign(self, slug: str) -> CampaignRead:
        campaign = await self._get(slug)
        if campaign.status != "active":
            raise InvalidCampaignStatusException(f"Only an active campaign can be closed (status: {campaign.status}).")
        updated = await self.repository.update_status(campaign.id, "closed")
        logger.info(f"[CampaignService] Campagne {slug} clôturée")
        return CampaignRead.model_validate(updated)

    # --- Commandes participants ---

    async def place_order(self, slug: str, order_in: CampaignOrderCreate) -> CampaignCheckoutResponse:
        campaign = await self._get(slug)
        if campaign.status != "active" or campaign.deadline <= self.clock():
            raise CampaignClosedException(slug)

        configs = campaign.garment_configs or {}
        for item in order_in.items:
            config = configs.get(str(item.garment_id))
            if config is None:
                raise InvalidCampaignSelectionException(f"Invalid garment selection: {item.garment_id}")
            if config.get("colors") and item.color not in config["colors"]:
                raise InvalidCampaignSelectionException(f"Invalid color selection: {item.color}")

        garment_ids = list(dict.fromkeys(item.garment_id for item in order_in.items))
        current = await self._current_prices(garment_ids, PrintConfig.model_validate(campaign.print_config))

        status = INITIAL_PARTICIPANT_STATUS[campaign.payment_style]
        rows = []
        amount_due = Decimal("0.00")
        for item in order_in.items:
            if item.garment_id not in current:
                raise InvalidCampaignSelectionException(f"Garment {item.garment_id} is no longer available.")
            # Jamais plus que le prix affiché à la création de la campagne
            unit_price = min(current[item.garment_id], to_decimal(configs[str(item.garment_id)]["price"]))
            amount_due += unit_price * item.quantity
            rows.append({
                "campaign_id": campaign.id,
                "participant_name": order_in.participant_name,
                "participant_email": str(order_in.participant_email),
                "garment_id": item.garment_id,
                "size": item.size,
                "color": item.color,
                "quantity": item.quantity,
                "unit_price": unit_price,
                "status": status,
            })

        orders = await self.repository.create_orders(rows)
        requires_payment = campaign.payment_style == "everyone_pays"
        logger.info(f"[CampaignService] {len(orders)} ligne(s) pour {order_in.participant_email} sur {slug} ({amount_due})")
        return CampaignCheckoutResponse(
            orders=[CampaignOrderRead.model_validate(o) for o in orders],
            requires_payment=requires_payment,
            amount_due=amount_due if requires_payment else Decimal("0.00"),
        )

    async def list_orders(self, slug: str) -> List[CampaignOrderRead]:
        campaign = await self._get(slug)
        orders = await self.repository.list_orders(campaign.id)
        return [CampaignOrderRead.model_validate(o) for o in orders]

    async def update_order_status(
        self,
        slug: str,
        order_id: uuid.UUID,
        status_in: CampaignOrderStatusUpdate,
    ) -> CampaignOrderRead:
        new_status = status_in.status
        if new_status not in PARTICIPANT_ORDER_STATUS:
            raise InvalidCampaignOrderStatusException(f"Unknown campaign order status: {new_status}.")

        campaign = await self._get(slug)
        if campaign.status == "completed":
            raise InvalidCampaignStatusException("This campaign has already been settled.")
        allowed = {"pending", "cancelled", *COUNTED_PARTICIPANT_STATUS[campaign.payment_style]}
        if new_status not in allowed:
            raise InvalidCampaignOrderStatusException(
                f"Status '{new_status}' is not used by '{campaign.payment_style}' campaigns."
            )

        order = await self.repository.get_order(campaign.id, order_id)
        if order is None:
            raise CampaignOrderNotFoundException(order_id)
        if order.status == "cancelled" and new_status != "cancelled":
            raise InvalidCampaignOrderStatusException("A cancelled campaign order cannot be reopened.")

        values = {"status": new_status}
        if new_status == "paid":
            values["amount_paid"] = round_cents(to_decimal(order.unit_price) * order.quantity)
            if status_in.payment_intent_id:
                values["payment_intent_id"] = status_in.payment_intent_id
        updated = await self.repository.update_order(order.id, values)
        if updated is None:
            raise CampaignOrderNotFoundException(order_id)
        logger.info(f"[CampaignService] Commande participant {order_id} -> {new_status}")
        return CampaignOrderRead.model_validate(updated)

    async def get_stats(self, slug: str) -> CampaignStats:
        campaign = await self._get(slug)
        orders = await self.repository.list_orders(campaign.id, COUNTED_PARTICIPANT_STATUS[campaign.payment_style])

        sizes: Counter = Counter()
        colors: Counter = Counter()
        garments: Counter = Counter()
        for order in orders:
            sizes[order.size] += order.quantity
            colors[order.color] += order.quantity
            garments[order.garment_id] += order.quantity

        total_revenue = None
        if campaign.payment_style == "everyone_pays":
            total_revenue = sum((to_decimal(o.amount_paid or 0) for o in orders), Decimal("0.00"))
        return CampaignStats(
            order_count=len(orders),
            total_quantity=sum(sizes.values()),
            size_breakdown=dict(sizes),
            color_breakdown=dict(colors),
            garment_breakdown=dict(garments),
            total_revenue=total_revenue,
        )

    # --- Règlement ---

    async def settle_campaign(self, slug: str, settle_in: CampaignSettleRequest) -> CampaignSettlementResponse:
        """
        Crée la commande de production à partir des commandes participants.

        La quantité agrégée est re-tarifée à sa tranche réelle (setup
        compris); le total facturé est le minimum entre ce devis et la
        somme des prix de campagne. Une campagne n'est réglée qu'une fois.
        """
        logger.info(f"[CampaignService] Règlement de la campagne {slug}")
        campaign = await self._get(slug)
        if campaign.status not in SETTLEABLE_CAMPAIGN_STATUS:
            raise InvalidCampaignStatusException(f"Campaign {slug} cannot be settled (status: {campaign.status}).")

        orders = await self.repository.list_orders(campaign.id, COUNTED_PARTICIPANT_STATUS[campaign.payment_style])
        if not orders:
            raise EmptyCampaignException(slug)

        grouped = aggregate_participant_orders(orders)
        lines = [
            GarmentQuantity(garment_id=garment_id, quantity=count_quantities(color_sizes))
            for garment_id, color_sizes in grouped.items()
        ]
        snapshot = await self.catalog.get_snapshot()
        print_config = PrintConfig.model_validate(campaign.print_config)
        quote = await self.quote_service.calculate_multi_garment_quote(lines, print_config, snapshot=snapshot)

        campaign_total = sum((to_decimal(o.unit_price) * o.quantity for o in orders), Decimal("0.00"))
        total = round_cents(min(quote.total, campaign_total))
        settled_price = total / quote.total_quantity

        refund_due = Decimal("0.00")
        if campaign.payment_style == "everyone_pays":
            # Les participants ont déjà tout réglé
            deposit, balance = total, Decimal("0.00")
            deposit_paid = True
            collected = sum((to_decimal(o.amount_paid or 0) for o in orders), Decimal("0.00"))
            refund_due = max(collected - total, Decimal("0.00"))
        else:
            deposit, balance = split_deposit(total, snapshot.deposit_percentage)
            deposit_paid = settle_in.payment_intent_id is not None

        breakdown = CampaignPricingBreakdown(
            garment_cost_per_shirt=quote.garment_cost_per_shirt,
            print_cost_per_shirt=quote.print_cost_per_shirt,
            setup_fees=quote.setup_fees,
            total_screens=quote.total_screens,
            per_shirt_total=settled_price,
            quoted_total=quote.total,
            campaign_total=campaign_total,
            garment_breakdown=quote.garment_breakdown,
        )
        single_garment_id = next(iter(grouped)) if len(grouped) == 1 else None
        values = {
            "customer_name": campaign.organizer_name or campaign.organizer_email,
            "email": campaign.organizer_email,
            "shipping_address": settle_in.shipping_address,
            "garment_id": single_garment_id,
            "color_size_quantities": grouped[single_garment_id] if single_garment_id else None,
            "selected_garments": None if single_garment_id else {
                str(garment_id): {"color_size_quantities": color_sizes}
                for garment_id, color_sizes in grouped.items()
            },
            "total_quantity": quote.total_quantity,
            "print_config": campaign.print_config,
            "total_cost": total,
            "deposit_amount": deposit,
            "deposit_paid": deposit_paid,
            "balance_due": balance,
            "pricing_breakdown": breakdown.model_dump(mode="json"),
            "status": INITIAL_ORDER_STATUS,
            "payment_intent_id": settle_in.payment_intent_id,
        }

        if not await self.repository.claim_for_settlement(campaign.id, SETTLEABLE_CAMPAIGN_STATUS):
            raise InvalidCampaignStatusException(f"Campaign {slug} has already been settled.")
        order = await self.order_repository.create(values)
        campaign = await self.repository.set_final_order(campaign.id, order.id)

        logger.info(
            f"[CampaignService] Campagne {slug} réglée: commande {order.id}, "
            f"{quote.total_quantity} pièce(s), {total} (devis {quote.total}, campagne {campaign_total})"
        )
        return CampaignSettlementResponse(
            campaign=CampaignRead.model_validate(campaign),
            order=OrderRead.model_validate(order),
            settled_price_per_shirt=settled_price,
            refund_due=refund_due,
        )
