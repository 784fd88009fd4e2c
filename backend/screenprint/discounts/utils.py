from decimal import Decimal

from screenprint.pricing.utils import round_cents, to_decimal
from .models import DiscountType


def compute_discount_amount(discount_type: DiscountType, discount_value: Decimal, subtotal: Decimal) -> Decimal:
    """
    Montant de réduction pour un sous-total donné.

    Pourcentage: arrondi au centime. Montant fixe: plafonné au sous-total,
    jamais de total négatif.
    """
    subtotal = to_decimal(subtotal)
    value = to_decimal(discount_value)
    if discount_type == DiscountType.PERCENTAGE:
        return round_cents(subtotal * value / Decimal(100))
    return min(value, subtotal)


def discount_message(discount_type: DiscountType, discount_value: Decimal, discount_amount: Decimal) -> str:
    if discount_type == DiscountType.PERCENTAGE:
        return f"{to_decimal(discount_value).normalize():f}% discount applied!"
    return f"${round_cents(discount_amount)} discount applied!"
