"""Exceptions spécifiques au module Pricing (tranches, tarifs d'impression, configuration)."""

from typing import Optional, Any


class PricingDomainException(Exception):
    """Classe de base pour les exceptions du module Pricing."""
    reason: str = "pricing_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class PricingTierNotFoundException(PricingDomainException):
    """Levée lorsqu'une tranche de prix n'est pas trouvée."""
    reason = "pricing_tier_not_found"

    def __init__(self, tier_id: Any):
        super().__init__(f"Tranche de prix avec ID {tier_id} non trouvée.")
        self.tier_id = tier_id

class InvalidPricingTierException(PricingDomainException):
    """Levée lorsqu'une tranche a des bornes invalides (max_qty <= min_qty...)."""
    reason = "invalid_pricing_tier"

class TierOverlapException(PricingDomainException):
    """Levée lorsqu'une tranche chevauche une tranche existante."""
    reason = "pricing_tier_overlap"

    def __init__(self, tier_name: str):
        super().__init__(f"La plage de quantités chevauche la tranche existante: {tier_name}.")
        self.tier_name = tier_name

class TierInUseException(PricingDomainException):
    """Levée lors de la suppression d'une tranche encore assignée à des vêtements."""
    reason = "pricing_tier_in_use"

    def __init__(self, tier_id: Any):
        super().__init__(f"Impossible de supprimer la tranche {tier_id}: elle est assignée à un ou plusieurs vêtements.")
        self.tier_id = tier_id

class PrintPricingNotFoundException(PricingDomainException):
    reason = "print_pricing_not_found"

    def __init__(self, print_pricing_id: Any):
        super().__init__(f"Tarif d'impression avec ID {print_pricing_id} non trouvé.")
        self.print_pricing_id = print_pricing_id

class DuplicatePrintPricingException(PricingDomainException):
    """Levée si un tarif existe déjà pour ce couple (tranche, nombre de couleurs)."""
    reason = "duplicate_print_pricing"

    def __init__(self, tier_id: Any, num_colors: int):
        super().__init__(f"Un tarif d'impression existe déjà pour la tranche {tier_id} et {num_colors} couleur(s).")
        self.tier_id = tier_id
        self.num_colors = num_colors

class ConfigurationGapException(PricingDomainException):
    """
    Données tarifaires incomplètes: aucune tranche ne couvre une quantité, ou
    aucun tarif d'impression pour un couple (tranche, couleurs).
    Erreur interne (500): ne jamais substituer la tranche la plus proche.
    """
    reason = "pricing_configuration_gap"

    def __init__(self, message: str, quantity: Optional[int] = None, num_colors: Optional[int] = None):
        super().__init__(message)
        self.quantity = quantity
        self.num_colors = num_colors

class AppConfigUpdateException(PricingDomainException):
    reason = "app_config_update_failed"
