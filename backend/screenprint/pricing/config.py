"""
Configuration pour le moteur de prix.

Les valeurs DEFAULT_* ne servent que si la ligne `app_config` est absente.
"""
from decimal import Decimal
from typing import Literal

from pydantic_settings import BaseSettings

class PricingSettings(BaseSettings):
    """Paramètres de configuration du moteur de prix."""

    # Valeurs de repli si app_config est vide
    DEFAULT_DEPOSIT_PERCENTAGE: Decimal = Decimal("50")
    DEFAULT_MIN_ORDER_QUANTITY: int = 24
    DEFAULT_MAX_INK_COLORS: int = 4

    # Paramètres de cache du catalogue (tranches + tarifs d'impression)
    CATALOG_CACHE_TTL: int = 300  # 5 minutes

    # Lectures catalogue: tentatives bornées sur erreurs transitoires
    CATALOG_RETRY_ATTEMPTS: int = 3
    CATALOG_RETRY_DELAY: float = 0.2

    # Base de calcul d'une réduction à la commande:
    #  - "total": total complet, frais de setup inclus
    #  - "total_excluding_setup_fees": vêtements + impression, hors frais de setup
    DISCOUNT_BASE: Literal["total", "total_excluding_setup_fees"] = "total"

    class Config:
        env_prefix = "PRICING_"
        case_sensitive = True

# Instance des paramètres
settings = PricingSettings()
