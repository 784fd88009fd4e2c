import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, List

from screenprint.core.clock import utc_now

from .exceptions import (
    DiscountCodeInvalidException,
    DiscountCodeInactiveException,
    DiscountCodeExpiredException,
    DiscountCodeNotFoundException,
    DuplicateDiscountCodeException,
    InvalidDiscountValueException,
)
from .interfaces.repositories import AbstractDiscountCodeRepository
from .models import (
    DiscountCode,
    DiscountCodeCreate,
    DiscountCodeUpdate,
    DiscountCodeRead,
    DiscountType,
    AppliedDiscount,
    DiscountValidationResponse,
    normalize_code,
)
from .utils import compute_discount_amount, discount_message

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # Les dates sans fuseau (SQLite) sont stockées en UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class DiscountService:
    """Validation, application et administration des codes de réduction."""

    def __init__(self, repository: AbstractDiscountCodeRepository, clock: Callable[[], datetime] = utc_now):
        self.repository = repository
        self.clock = clock
        logger.info("DiscountService initialisé.")

    async def get_usable_code(self, code: str) -> DiscountCode:
        """Retourne le code s'il existe, est actif et non expiré; lève sinon."""
        normalized = normalize_code(code)
        discount_code = await self.repository.get_by_code(normalized)
        if discount_code is None:
            logger.info(f"[DiscountService] Code inconnu: {normalized}")
            raise DiscountCodeInvalidException()
        if not discount_code.active:
            raise DiscountCodeInactiveException()
        if discount_code.expires_at is not None and _as_utc(discount_code.expires_at) < _as_utc(self.clock()):
            raise DiscountCodeExpiredException()
        return discount_code

    async def apply_discount(self, code: str, subtotal: Decimal) -> AppliedDiscount:
        discount_code = await self.get_usable_code(code)
        amount = compute_discount_amount(discount_code.discount_type, discount_code.discount_value, subtotal)
        logger.debug(f"[DiscountService] {discount_code.code} appliqué sur {subtotal}: -{amount}")
        return AppliedDiscount(
            code=discount_code.code,
            discount_type=discount_code.discount_type,
            discount_value=discount_code.discount_value,
            discount_amount=amount,
        )

    async def validate_code(self, code: str, subtotal: Decimal) -> DiscountValidationResponse:
        discount_code = await self.get_usable_code(code)
        amount = compute_discount_amount(discount_code.discount_type, discount_code.discount_value, subtotal)
        applied = AppliedDiscount(
            code=discount_code.code,
            discount_type=discount_code.discount_type,
            discount_value=discount_code.discount_value,
            discount_amount=amount,
        )
        return DiscountValidationResponse(
            valid=True,
            discount=applied,
            discount_code_id=discount_code.id,
            message=discount_message(applied.discount_type, applied.discount_value, amount),
        )

    # --- Administration ---

    async def list_codes(self) -> List[DiscountCodeRead]:
        codes = await self.repository.list_all()
        return [DiscountCodeRead.model_validate(c) for c in codes]

    async def create_code(self, discount_data: DiscountCodeCreate) -> DiscountCodeRead:
        logger.info(f"[DiscountService] Création du code {discount_data.code}")
        if await self.repository.code_exists(discount_data.code):
            raise DuplicateDiscountCodeException(discount_data.code)
        created = await self.repository.create(discount_data)
        return DiscountCodeRead.model_validate(created)

    async def update_code(self, discount_code_id: uuid.UUID, discount_data: DiscountCodeUpdate) -> DiscountCodeRead:
        logger.info(f"[DiscountService] Mise à jour du code {discount_code_id}")
        current = await self.repository.get_by_id(discount_code_id)
        if current is None:
            raise DiscountCodeNotFoundException(discount_code_id)

        values = discount_data.model_dump(exclude_unset=True)
        if "code" in values:
            if not values["code"]:
                raise InvalidDiscountValueException("Code is required")
            clash = await self.repository.get_by_code(values["code"])
            if clash is not None and clash.id != discount_code_id:
                raise DuplicateDiscountCodeException(values["code"])

        discount_type = values.get("discount_type", current.discount_type)
        discount_value = values.get("discount_value", current.discount_value)
        if discount_type == DiscountType.PERCENTAGE and discount_value > 100:
            raise InvalidDiscountValueException("Percentage discount cannot exceed 100%")

        updated = await self.repository.update(discount_code_id, values)
        if updated is None:
            raise DiscountCodeNotFoundException(discount_code_id)
        return DiscountCodeRead.model_validate(updated)

    async def delete_code(self, discount_code_id: uuid.UUID) -> None:
        logger.info(f"[DiscountService] Suppression du code {discount_code_id}")
        if not await self.repository.delete(discount_code_id):
            raise DiscountCodeNotFoundException(discount_code_id)
