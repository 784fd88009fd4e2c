"""
Configuration spécifique au module Campaigns.
Statuts des campagnes et des commandes participants.
"""

from typing import Dict, List

# 'organizer_pays': l'organisateur règle l'ensemble à la clôture
# 'everyone_pays': chaque participant paie sa part au passage de commande
PAYMENT_STYLES: List[str] = ["organizer_pays", "everyone_pays"]

CAMPAIGN_STATUS: List[str] = [
    "draft",      # En préparation
    "active",     # Ouverte aux commandes
    "closed",     # Date limite passée, plus de commandes
    "completed",  # Réglée: commande de production créée
]

# Statuts depuis lesquels une campagne peut être réglée
SETTLEABLE_CAMPAIGN_STATUS: List[str] = ["active", "closed"]

PARTICIPANT_ORDER_STATUS: List[str] = [
    "pending",    # En attente de paiement
    "paid",       # Payée (everyone_pays)
    "confirmed",  # Confirmée (organizer_pays)
    "cancelled",  # Annulée
]

# Statut d'une commande participant à sa création
INITIAL_PARTICIPANT_STATUS: Dict[str, str] = {
    "everyone_pays": "pending",
    "organizer_pays": "confirmed",
}

# Commandes participants comptées dans les statistiques et le règlement
COUNTED_PARTICIPANT_STATUS: Dict[str, List[str]] = {
    "everyone_pays": ["paid"],
    "organizer_pays": ["confirmed"],
}

SLUG_MAX_LENGTH: int = 50
SLUG_ATTEMPTS: int = 5
