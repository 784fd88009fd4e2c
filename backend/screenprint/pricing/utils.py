from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, Any, Tuple

from pydantic import PlainSerializer

CENT = Decimal("0.01")

# Montant exact en interne, nombre JSON dans les réponses
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def to_decimal(value: Any) -> Decimal:
    """Convertit int/float/str en Decimal sans passer par la représentation binaire du float."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_cents(amount: Decimal) -> Decimal:
    """Arrondi monétaire au centime (demi vers le haut, comme Math.round côté client)."""
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def split_deposit(total: Decimal, deposit_percentage: Decimal) -> Tuple[Decimal, Decimal]:
    """
    Sépare un total en (acompte, solde).

    Seul l'acompte est arrondi; le solde est la différence exacte, donc
    acompte + solde == total.
    """
    total = to_decimal(total)
    deposit = round_cents(total * to_decimal(deposit_percentage) / Decimal(100))
    return deposit, total - deposit
