from typing import Any


class DiscountDomainException(Exception):
    """Classe de base pour les exceptions du module Discounts."""
    reason: str = "discount_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class DiscountCodeInvalidException(DiscountDomainException):
    """Code refusé à la validation (inconnu, inactif, expiré)."""
    reason = "invalid_discount_code"

    def __init__(self, message: str = "Invalid discount code"):
        super().__init__(message)

class DiscountCodeInactiveException(DiscountCodeInvalidException):
    reason = "discount_code_inactive"

    def __init__(self):
        super().__init__("This discount code is no longer active")

class DiscountCodeExpiredException(DiscountCodeInvalidException):
    reason = "discount_code_expired"

    def __init__(self):
        super().__init__("This discount code has expired")

class DiscountCodeNotFoundException(DiscountDomainException):
    """Code introuvable par ID (administration)."""
    reason = "discount_code_not_found"

    def __init__(self, discount_code_id: Any):
        super().__init__(f"Code de réduction avec ID {discount_code_id} non trouvé.")
        self.discount_code_id = discount_code_id

class DuplicateDiscountCodeException(DiscountDomainException):
    reason = "duplicate_discount_code"

    def __init__(self, code: str):
        super().__init__(f"A discount code with this code already exists: {code}")
        self.code = code

class InvalidDiscountValueException(DiscountDomainException):
    reason = "invalid_discount_value"
