import re
import secrets
import uuid
from collections import defaultdict
from typing import Dict, Iterable

from .config import SLUG_MAX_LENGTH


def generate_slug(name: str) -> str:
    """Slug partageable: nom normalisé suivi d'un suffixe aléatoire (ex: 'club-de-foot-3f9a1c')."""
    base = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")[:SLUG_MAX_LENGTH].strip("-")
    suffix = secrets.token_hex(3)
    return f"{base}-{suffix}" if base else suffix


def aggregate_participant_orders(orders: Iterable) -> Dict[uuid.UUID, Dict[str, Dict[str, int]]]:
    """
    Regroupe les commandes participants par vêtement, couleur puis taille.

    {garment_id: {"Black": {"M": 3, "L": 1}}}
    """
    grouped: Dict[uuid.UUID, Dict[str, Dict[str, int]]] = defaultdict(lambda: defaultdict(lambda: defaultdict(int)))
    for order in orders:
        grouped[order.garment_id][order.color][order.size] += order.quantity
    return {
        garment_id: {color: dict(sizes) for color, sizes in colors.items()}
        for garment_id, colors in grouped.items()
    }
