"""Exceptions spécifiques au domaine Campaign."""
from typing import Any


class CampaignDomainException(Exception):
    """Classe de base pour les exceptions du domaine Campaign."""
    reason: str = "campaign_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class CampaignNotFoundException(CampaignDomainException):
    reason = "campaign_not_found"

    def __init__(self, slug: Any):
        super().__init__(f"Campaign {slug} not found.")
        self.slug = slug

class CampaignOrderNotFoundException(CampaignDomainException):
    reason = "campaign_order_not_found"

    def __init__(self, order_id: Any):
        super().__init__(f"Campaign order {order_id} not found.")
        self.order_id = order_id

class InvalidCampaignException(CampaignDomainException):
    """Données de campagne invalides (date limite, vêtements, couleurs...)."""
    reason = "invalid_campaign"

class CampaignClosedException(CampaignDomainException):
    """La campagne n'accepte plus de commandes (statut ou date limite)."""
    reason = "campaign_not_accepting_orders"

    def __init__(self, slug: Any):
        super().__init__("This campaign is no longer accepting orders")
        self.slug = slug

class InvalidCampaignSelectionException(CampaignDomainException):
    """Vêtement ou couleur hors de la sélection de la campagne."""
    reason = "invalid_campaign_selection"

class InvalidCampaignStatusException(CampaignDomainException):
    """Transition de statut de campagne interdite (clôture, règlement)."""
    reason = "invalid_campaign_status"

class InvalidCampaignOrderStatusException(CampaignDomainException):
    reason = "invalid_campaign_order_status"

class EmptyCampaignException(CampaignDomainException):
    reason = "campaign_has_no_orders"

    def __init__(self, slug: Any):
        super().__init__(f"No valid orders found for campaign {slug}.")
        self.slug = slug

class CampaignOperationFailedException(CampaignDomainException):
    reason = "campaign_operation_failed"
