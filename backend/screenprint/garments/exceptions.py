from typing import Any


class GarmentDomainException(Exception):
    """Classe de base pour les exceptions du module Garments."""
    reason: str = "garment_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class GarmentNotFoundException(GarmentDomainException):
    """Levée lorsqu'un vêtement est absent ou supprimé."""
    reason = "garment_not_found"

    def __init__(self, garment_id: Any):
        super().__init__(f"Vêtement avec ID {garment_id} non trouvé.")
        self.garment_id = garment_id

class InvalidGarmentPricingTierException(GarmentDomainException):
    reason = "invalid_pricing_tier"

    def __init__(self, tier_id: Any):
        super().__init__(f"La tranche de prix {tier_id} n'existe pas.")
        self.tier_id = tier_id

class GarmentOperationFailedException(GarmentDomainException):
    reason = "garment_operation_failed"
