"""Exceptions spécifiques au domaine Order."""
from typing import Any


class OrderDomainException(Exception):
    """Classe de base pour les exceptions du domaine Order."""
    reason: str = "order_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class OrderNotFoundException(OrderDomainException):
    """Levée lorsqu'une commande spécifique n'est pas trouvée."""
    reason = "order_not_found"

    def __init__(self, order_id: Any):
        super().__init__(f"Commande avec ID {order_id} non trouvée.")
        self.order_id = order_id

class PendingOrderNotFoundException(OrderDomainException):
    """Commande en attente absente, expirée ou déjà transformée en commande."""
    reason = "pending_order_not_found"

    def __init__(self, pending_order_id: Any):
        super().__init__(f"Pending order {pending_order_id} not found or already processed.")
        self.pending_order_id = pending_order_id

class InvalidPendingOrderException(OrderDomainException):
    """Contenu de commande invalide (aucune quantité, vêtement manquant...)."""
    reason = "invalid_pending_order"

class DuplicatePaymentIntentException(OrderDomainException):
    """Une commande existe déjà pour ce payment intent (index unique)."""
    reason = "duplicate_payment_intent"

    def __init__(self, payment_intent_id: str):
        super().__init__(f"Une commande existe déjà pour le payment intent {payment_intent_id}.")
        self.payment_intent_id = payment_intent_id

class OrderCreationFailedException(OrderDomainException):
    reason = "order_creation_failed"

class InvalidOrderStatusException(OrderDomainException):
    """Statut inconnu ou transition interdite."""
    reason = "invalid_order_status"
