"""
Recherche de tranche par quantité et contrôles de cohérence d'un ensemble de tranches.

Fonctions pures: elles travaillent sur des objets exposant `name`, `min_qty`
et `max_qty` (modèles SQLModel ou schémas Read).
"""
import logging
from typing import Iterable, List, Optional, Protocol, Sequence, TypeVar

from screenprint.pricing.exceptions import ConfigurationGapException, InvalidPricingTierException, TierOverlapException

logger = logging.getLogger(__name__)


class TierLike(Protocol):
    name: str
    min_qty: int
    max_qty: Optional[int]


T = TypeVar("T", bound=TierLike)


def tier_contains(tier: TierLike, quantity: int) -> bool:
    """Bornes inclusives des deux côtés; max_qty None = illimité."""
    if quantity < tier.min_qty:
        return False
    return tier.max_qty is None or quantity <= tier.max_qty


def ranges_overlap(min_a: int, max_a: Optional[int], min_b: int, max_b: Optional[int]) -> bool:
    """Deux intervalles entiers fermés [min, max] (max None = infini) se chevauchent-ils ?"""
    a_below_b = max_a is not None and max_a < min_b
    b_below_a = max_b is not None and max_b < min_a
    return not (a_below_b or b_below_a)


def sort_tiers(tiers: Iterable[T]) -> List[T]:
    return sorted(tiers, key=lambda t: t.min_qty)


def find_tier_for_quantity(tiers: Sequence[T], quantity: int) -> T:
    """
    Retourne l'unique tranche contenant `quantity`.

    Lève ConfigurationGapException si aucune tranche ne couvre la quantité
    ou si plusieurs tranches la couvrent (données admin incohérentes).
    """
    matches = [t for t in sort_tiers(tiers) if tier_contains(t, quantity)]
    if not matches:
        logger.critical(f"[Tiers] Aucune tranche de prix ne couvre la quantité {quantity}. Vérifier la configuration des tranches.")
        raise ConfigurationGapException(f"Aucune tranche de prix ne couvre la quantité {quantity}.", quantity=quantity)
    if len(matches) > 1:
        names = ", ".join(t.name for t in matches)
        logger.critical(f"[Tiers] Plusieurs tranches couvrent la quantité {quantity}: {names}")
        raise ConfigurationGapException(f"Tranches qui se chevauchent pour la quantité {quantity}: {names}.", quantity=quantity)
    return matches[0]


def lowest_tier(tiers: Sequence[T]) -> T:
    """Tranche au plus petit min_qty (base des prix de campagne)."""
    if not tiers:
        logger.critical("[Tiers] Aucune tranche de prix configurée.")
        raise ConfigurationGapException("Aucune tranche de prix configurée.")
    return sort_tiers(tiers)[0]


def validate_tier_range(min_qty: int, max_qty: Optional[int]) -> None:
    if min_qty < 0:
        raise InvalidPricingTierException("min_qty doit être positif ou nul.")
    if max_qty is not None and max_qty <= min_qty:
        raise InvalidPricingTierException("max_qty doit être strictement supérieur à min_qty.")


def check_no_overlap(min_qty: int, max_qty: Optional[int], existing: Iterable[TierLike]) -> None:
    """Lève TierOverlapException si [min_qty, max_qty] chevauche une tranche de `existing`."""
    for tier in sort_tiers(existing):
        if ranges_overlap(min_qty, max_qty, tier.min_qty, tier.max_qty):
            raise TierOverlapException(tier.name)


def find_coverage_gaps(tiers: Sequence[TierLike]) -> List[str]:
    """
    Liste les trous et chevauchements d'un ensemble de tranches, à partir du
    plus petit min_qty. Liste vide = toute quantité >= min couverte exactement une fois.
    """
    problems: List[str] = []
    ordered = sort_tiers(tiers)
    for previous, current in zip(ordered, ordered[1:]):
        if previous.max_qty is None:
            problems.append(f"'{previous.name}' est illimitée mais suivie de '{current.name}'")
        elif current.min_qty > previous.max_qty + 1:
            problems.append(f"trou entre {previous.max_qty} et {current.min_qty}")
        elif current.min_qty <= previous.max_qty:
            problems.append(f"'{previous.name}' et '{current.name}' se chevauchent")
    if ordered and ordered[-1].max_qty is not None:
        problems.append(f"aucune tranche au-delà de {ordered[-1].max_qty}")
    return problems
