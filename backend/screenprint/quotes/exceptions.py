"""Exceptions spécifiques au calcul des devis."""


class QuoteDomainException(Exception):
    """Classe de base pour les exceptions du module Quotes."""
    reason: str = "quote_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class QuoteValidationException(QuoteDomainException):
    """Requête de devis invalide (quantité, configuration d'impression...)."""
    reason = "invalid_quote_request"

class MinimumQuantityException(QuoteValidationException):
    reason = "quantity_below_minimum"

    def __init__(self, quantity: int, minimum: int):
        super().__init__(f"Minimum order quantity is {minimum} (requested: {quantity}).")
        self.quantity = quantity
        self.minimum = minimum

class NoPrintLocationException(QuoteValidationException):
    reason = "no_print_location"

    def __init__(self):
        super().__init__("At least one print location required.")
