"""
Configuration spécifique au module Orders.
Statuts de commande et délais des commandes en attente de paiement.
"""

from typing import List, Dict

# Statut initial d'une commande créée après paiement de l'acompte
INITIAL_ORDER_STATUS: str = "pending_art_review"

ALLOWED_ORDER_STATUS: List[str] = [
    "pending_art_review",   # Maquette à valider
    "art_approved",         # Maquette validée
    "art_revision_needed",  # Retouche demandée
    "in_production",        # En production
    "balance_due",          # Solde à régler
    "ready_to_ship",        # Prête à expédier
    "completed",            # Terminée
    "cancelled",            # Annulée
]

ORDER_STATUS_DISPLAY: Dict[str, str] = {
    "pending_art_review": "Maquette en attente de validation",
    "art_approved": "Maquette validée",
    "art_revision_needed": "Retouche de maquette demandée",
    "in_production": "En production",
    "balance_due": "Solde à régler",
    "ready_to_ship": "Prête à expédier",
    "completed": "Terminée",
    "cancelled": "Annulée",
}

# Statuts finaux: plus aucun changement possible
FINAL_ORDER_STATUS: List[str] = ["completed", "cancelled"]

# Durée de vie d'une commande en attente (en heures)
PENDING_ORDER_TTL_HOURS: int = 24

# Perdant d'une course sur la même commande en attente: relecture bornée
# de la commande par payment intent avant de répondre 404
CLAIM_LOOKUP_ATTEMPTS: int = 5
CLAIM_LOOKUP_DELAY: float = 0.05
