import logging
import uuid
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, Optional, Tuple

from screenprint.core.clock import utc_now
from screenprint.core.retry import retry_async
from screenprint.discounts.service import DiscountService
from screenprint.pricing.catalog import PricingCatalog, CatalogSnapshot
from screenprint.pricing.config import settings as pricing_settings
from screenprint.pricing.utils import round_cents, split_deposit, to_decimal
from screenprint.quotes.models import PrintConfig, GarmentQuantity, QuoteResponse
from screenprint.quotes.service import QuoteService
from .config import (
    INITIAL_ORDER_STATUS,
    ALLOWED_ORDER_STATUS,
    FINAL_ORDER_STATUS,
    ORDER_STATUS_DISPLAY,
    PENDING_ORDER_TTL_HOURS,
    CLAIM_LOOKUP_ATTEMPTS,
    CLAIM_LOOKUP_DELAY,
)
from .exceptions import (
    OrderNotFoundException,
    PendingOrderNotFoundException,
    DuplicatePaymentIntentException,
    InvalidPendingOrderException,
    InvalidOrderStatusException,
)
from .interfaces.repositories import AbstractPendingOrderRepository, AbstractOrderRepository
from .models import (
    PendingOrder,
    PendingOrderCreate,
    PendingOrderRead,
    OrderRead,
    PaginatedOrderResponse,
    SinglePricingBreakdown,
    MultiPricingBreakdown,
    count_quantities,
)

logger = logging.getLogger(__name__)


class OrderService:
    """
    Commandes en attente et création des commandes après paiement.

    La création depuis une commande en attente est idempotente: la
    suppression atomique de la commande en attente désigne l'unique appel
    qui crée la commande; les autres retrouvent la commande par payment intent.
    """

    def __init__(
        self,
        pending_repository: AbstractPendingOrderRepository,
        order_repository: AbstractOrderRepository,
        quote_service: QuoteService,
        discount_service: DiscountService,
        catalog: PricingCatalog,
        clock: Callable[[], datetime] = utc_now,
        discount_base: str = pricing_settings.DISCOUNT_BASE,
        lookup_attempts: int = CLAIM_LOOKUP_ATTEMPTS,
        lookup_delay: float = CLAIM_LOOKUP_DELAY,
    ):
        self.pending_repository = pending_repository
        self.order_repository = order_repository
        self.quote_service = quote_service
        self.discount_service = discount_service
        self.catalog = catalog
        self.clock = clock
        self.discount_base = discount_base
        self.lookup_attempts = lookup_attempts
        self.lookup_delay = lookup_delay
        logger.info("OrderService initialisé.")

    # --- Prix ---

    async def _price(
        self,
        snapshot: CatalogSnapshot,
        garment_id: Optional[uuid.UUID],
        color_size_quantities: Optional[Dict[str, Any]],
        selected_garments: Optional[Dict[str, Any]],
        print_config: PrintConfig,
    ) -> Tuple[QuoteResponse, int, Any]:
        """Recalcule le devis et construit l'instantané `pricing_breakdown`."""
        if selected_garments:
            try:
                lines = [
                    GarmentQuantity(
                        garment_id=uuid.UUID(str(gid)),
                        quantity=count_quantities(selection.get("color_size_quantities")),
                    )
                    for gid, selection in selected_garments.items()
                ]
            except (ValueError, AttributeError) as e:
                raise InvalidPendingOrderException(f"Sélection de vêtements invalide: {e}")
            quote = await self.quote_service.calculate_multi_garment_quote(lines, print_config, snapshot=snapshot)
            breakdown = MultiPricingBreakdown(
                garment_cost_per_shirt=quote.garment_cost_per_shirt,
                print_cost_per_shirt=quote.print_cost_per_shirt,
                setup_fees=quote.setup_fees,
                total_screens=quote.total_screens,
                per_shirt_total=quote.per_shirt_price,
                garment_breakdown=quote.garment_breakdown,
            )
            return quote, quote.total_quantity, breakdown

        quantity = count_quantities(color_size_quantities)
        quote = await self.quote_service.calculate_quote(garment_id, quantity, print_config, snapshot=snapshot)
        breakdown = SinglePricingBreakdown(
            garment_cost_per_shirt=quote.garment_cost_per_shirt,
            print_cost_per_shirt=quote.print_cost_per_shirt,
            setup_fees=quote.setup_fees,
            total_screens=quote.total_screens,
            per_shirt_total=quote.per_shirt_price,
        )
        return quote, quantity, breakdown

    def discountable_amount(self, quote: QuoteResponse) -> Decimal:
        """Montant sur lequel porte une réduction, selon PRICING_DISCOUNT_BASE."""
        if self.discount_base == "total_excluding_setup_fees":
            return quote.total - quote.setup_fees
        return quote.total

    # --- Commandes en attente ---

    async def create_pending_order(self, order_data: PendingOrderCreate) -> PendingOrderRead:
        logger.info(f"[OrderService] Création commande en attente pour {order_data.email}")
        snapshot = await self.catalog.get_snapshot()

        selected = None
        if order_data.is_multi_garment:
            selected = {
                str(gid): selection.model_dump(mode="json")
                for gid, selection in order_data.selected_garments.items()
            }
        quote, _, _ = await self._price(
            snapshot,
            order_data.garment_id,
            order_data.color_size_quantities,
            selected,
            order_data.print_config,
        )

        discount_code = None
        discount_amount = None
        if order_data.discount_code:
            applied = await self.discount_service.apply_discount(order_data.discount_code, self.discountable_amount(quote))
            discount_code = applied.code
            discount_amount = applied.discount_amount

        now = self.clock()
        pending = await self.pending_repository.create({
            "customer_name": order_data.customer_name,
            "email": str(order_data.email),
            "phone": order_data.phone,
            "shipping_address": order_data.shipping_address,
            "organization_name": order_data.organization_name,
            "need_by_date": order_data.need_by_date,
            "garment_id": None if selected else order_data.garment_id,
            "color_size_quantities": None if selected else order_data.color_size_quantities,
            "selected_garments": selected,
            "print_config": order_data.print_config.model_dump(mode="json"),
            "discount_code": discount_code,
            "discount_amount": discount_amount,
            "payment_intent_id": order_data.payment_intent_id,
            "created_at": now,
            "expires_at": now + timedelta(hours=PENDING_ORDER_TTL_HOURS),
        })
        logger.info(f"[OrderService] Commande en attente {pending.id} créée (total devis {quote.total}).")
        return PendingOrderRead.model_validate(pending)

    async def get_pending_order(self, pending_order_id: uuid.UUID) -> PendingOrderRead:
        pending = await self.pending_repository.get_by_id(pending_order_id)
        if pending is None or pending.expires_at <= self.clock():
            raise PendingOrderNotFoundException(pending_order_id)
        return PendingOrderRead.model_validate(pending)

    async def delete_pending_order(self, pending_order_id: uuid.UUID) -> None:
        logger.info(f"[OrderService] Suppression commande en attente {pending_order_id}")
        if not await self.pending_repository.delete(pending_order_id):
            raise PendingOrderNotFoundException(pending_order_id)

    # --- Commandes ---

    async def get_order(self, order_id: uuid.UUID) -> OrderRead:
        order = await self.order_repository.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundException(order_id)
        return OrderRead.model_validate(order)

    async def list_orders(self, limit: int, offset: int, status: Optional[str] = None) -> PaginatedOrderResponse:
        if status is not None and status not in ALLOWED_ORDER_STATUS:
            raise InvalidOrderStatusException(f"Statut de commande inconnu: {status}.")
        orders, total = await self.order_repository.list(limit=limit, offset=offset, status=status)
        return PaginatedOrderResponse(items=[OrderRead.model_validate(o) for o in orders], total=total)

    async def get_order_by_payment_intent(self, payment_intent_id: str) -> OrderRead:
        order = await self.order_repository.get_by_payment_intent_id(payment_intent_id)
        if order is None:
            raise OrderNotFoundException(payment_intent_id)
        return OrderRead.model_validate(order)

    async def update_order_status(self, order_id: uuid.UUID, new_status: str) -> OrderRead:
        logger.info(f"[OrderService] MAJ statut commande {order_id} vers '{new_status}'")
        if new_status not in ALLOWED_ORDER_STATUS:
            raise InvalidOrderStatusException(f"Statut de commande inconnu: {new_status}.")

        order = await self.order_repository.get_by_id(order_id)
        if order is None:
            raise OrderNotFoundException(order_id)
        if order.status in FINAL_ORDER_STATUS and new_status != order.status:
            logger.warning(f"[OrderService] MAJ statut interdite de '{order.status}' vers '{new_status}' pour commande {order_id}.")
            raise InvalidOrderStatusException(
                f"Impossible de changer le statut de '{ORDER_STATUS_DISPLAY.get(order.status, order.status)}' "
                f"à '{ORDER_STATUS_DISPLAY.get(new_status, new_status)}'."
            )

        updated = await self.order_repository.update_status(order_id, new_status)
        if updated is None:
            raise OrderNotFoundException(order_id)
        return OrderRead.model_validate(updated)

    async def _order_after_lost_claim(self, pending_order_id: uuid.UUID, payment_intent_id: Optional[str]) -> OrderRead:
        """La commande en attente a déjà été consommée: retrouver la commande créée par l'autre appel."""
        if not payment_intent_id:
            raise PendingOrderNotFoundException(pending_order_id)

        async def lookup() -> OrderRead:
            order = await self.order_repository.get_by_payment_intent_id(payment_intent_id)
            if order is None:
                raise PendingOrderNotFoundException(pending_order_id)
            return OrderRead.model_validate(order)

        return await retry_async(
            lookup,
            attempts=self.lookup_attempts,
            delay=self.lookup_delay,
            backoff=1.0,
            retry_on=(PendingOrderNotFoundException,),
            label=f"commande pour payment intent {payment_intent_id}",
        )

    async def create_order_from_pending(
        self,
        pending_order_id: uuid.UUID,
        payment_intent_id: Optional[str] = None,
    ) -> Tuple[OrderRead, bool]:
        """
        Crée la commande à partir d'une commande en attente, au plus une fois.

        Retourne (commande, créée). `créée` vaut False quand la commande
        existait déjà pour ce payment intent.
        """
        logger.info(f"[OrderService] Commande depuis pending {pending_order_id} (payment_intent={payment_intent_id})")
        if payment_intent_id:
            existing = await self.order_repository.get_by_payment_intent_id(payment_intent_id)
            if existing is not None:
                logger.info(f"[OrderService] Commande {existing.id} déjà créée pour {payment_intent_id}")
                return OrderRead.model_validate(existing), False

        pending = await self.pending_repository.claim_pending_order(pending_order_id, self.clock())
        if pending is None:
            logger.info(f"[OrderService] Pending {pending_order_id} déjà consommée ou absente")
            return await self._order_after_lost_claim(pending_order_id, payment_intent_id), False

        payment_intent_id = payment_intent_id or pending.payment_intent_id
        values = await self._build_order_values(pending, payment_intent_id)
        try:
            order = await self.order_repository.create(values)
        except DuplicatePaymentIntentException:
            existing = await self.order_repository.get_by_payment_intent_id(payment_intent_id)
            if existing is None:
                raise
            logger.info(f"[OrderService] Conflit d'insertion résolu: commande {existing.id}")
            return OrderRead.model_validate(existing), False

        logger.info(f"[OrderService] Commande {order.id} créée depuis pending {pending_order_id}")
        return OrderRead.model_validate(order), True

    async def _build_order_values(self, pending: PendingOrder, payment_intent_id: Optional[str]) -> Dict[str, Any]:
        snapshot = await self.catalog.get_snapshot()
        print_config = PrintConfig.model_validate(pending.print_config)
        quote, total_quantity, breakdown = await self._price(
            snapshot,
            pending.garment_id,
            pending.color_size_quantities,
            pending.selected_garments,
            print_config,
        )

        discount = min(to_decimal(pending.discount_amount or 0), self.discountable_amount(quote))
        # Montant facturé: arrondi au centime avant la répartition acompte/solde
        total = round_cents(quote.total - discount)
        deposit, balance = split_deposit(total, snapshot.deposit_percentage)

        return {
            "customer_name": pending.customer_name,
            "email": pending.email,
            "phone": pending.phone,
            "shipping_address": pending.shipping_address,
            "organization_name": pending.organization_name,
            "need_by_date": pending.need_by_date,
            "garment_id": pending.garment_id,
            "color_size_quantities": pending.color_size_quantities,
            "selected_garments": pending.selected_garments,
            "total_quantity": total_quantity,
            "print_config": pending.print_config,
            "total_cost": total,
            "deposit_amount": deposit,
            "deposit_paid": True,
            "balance_due": balance,
            "discount_code": pending.discount_code,
            "discount_amount": discount if discount > 0 else None,
            "pricing_breakdown": breakdown.model_dump(mode="json"),
            "status": INITIAL_ORDER_STATUS,
            "payment_intent_id": payment_intent_id,
        }
