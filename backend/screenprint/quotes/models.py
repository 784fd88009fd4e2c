import uuid
from enum import Enum
from typing import Dict, List, Literal

from pydantic import BaseModel, Field

from screenprint.pricing.utils import Money

# --- Configuration d'impression ---

class PrintLocation(str, Enum):
    FRONT = "front"
    BACK = "back"
    LEFT_CHEST = "left_chest"
    RIGHT_CHEST = "right_chest"
    FULL_BACK = "full_back"

class LocationConfig(BaseModel):
    enabled: bool
    # Couleurs d'encre pour cet emplacement (un écran par couleur)
    num_colors: int = Field(..., ge=1, le=4)

class PrintConfig(BaseModel):
    locations: Dict[PrintLocation, LocationConfig] = Field(default_factory=dict)

    def enabled_locations(self) -> Dict[PrintLocation, LocationConfig]:
        return {loc: cfg for loc, cfg in self.locations.items() if cfg.enabled}

    @property
    def total_screens(self) -> int:
        return sum(cfg.num_colors for cfg in self.enabled_locations().values())

# --- Requêtes ---

class QuoteRequest(BaseModel):
    garment_id: uuid.UUID
    # Le minimum de commande est contrôlé par le service (configurable)
    quantity: int
    print_config: PrintConfig
    multi_garment: Literal[False] = False

class GarmentQuantity(BaseModel):
    garment_id: uuid.UUID
    quantity: int = Field(..., ge=0)

class MultiGarmentQuoteRequest(BaseModel):
    multi_garment: Literal[True]
    garments: List[GarmentQuantity] = Field(..., min_length=1)
    print_config: PrintConfig

class CampaignPriceRequest(BaseModel):
    garment_ids: List[uuid.UUID] = Field(..., min_length=1)
    print_config: PrintConfig

# --- Réponses ---

class QuoteResponse(BaseModel):
    garment_cost: Money
    garment_cost_per_shirt: Money
    # Hors frais de setup (reportés dans setup_fees)
    print_cost: Money
    print_cost_per_shirt: Money
    setup_fees: Money
    total_screens: int
    subtotal: Money
    total: Money
    per_shirt_price: Money
    deposit_amount: Money
    balance_due: Money

class GarmentBreakdownItem(BaseModel):
    garment_id: uuid.UUID
    name: str
    quantity: int
    cost_per_shirt: Money
    total: Money

class MultiGarmentQuoteResponse(QuoteResponse):
    total_quantity: int
    garment_breakdown: List[GarmentBreakdownItem]

class CampaignPriceResponse(BaseModel):
    prices: Dict[uuid.UUID, Money]
    missing_garments: List[uuid.UUID] = []
