import uuid
from typing import Optional, List, Dict, Any, Literal, Union, Annotated
from decimal import Decimal
from datetime import datetime, date

from pydantic import BaseModel, ConfigDict, EmailStr, Field as PydanticField, model_validator
from sqlalchemy import JSON
from sqlmodel import SQLModel, Field

from screenprint.core.clock import utc_now
from screenprint.pricing.utils import Money
from screenprint.quotes.models import PrintConfig, GarmentBreakdownItem

# Quantités par couleur puis par taille: {"Black": {"M": 10, "L": 14}}
ColorSizeQuantities = Dict[str, Dict[str, int]]


def count_quantities(color_size_quantities: Optional[Dict[str, Dict[str, int]]]) -> int:
    if not color_size_quantities:
        return 0
    return sum(qty or 0 for sizes in color_size_quantities.values() for qty in sizes.values())

# --- Instantané de prix stocké sur la commande ---

class SinglePricingBreakdown(BaseModel):
    kind: Literal["single"] = "single"
    garment_cost_per_shirt: Money
    print_cost_per_shirt: Money
    setup_fees: Money
    total_screens: int
    per_shirt_total: Money

class MultiPricingBreakdown(BaseModel):
    kind: Literal["multi"] = "multi"
    garment_cost_per_shirt: Money
    print_cost_per_shirt: Money
    setup_fees: Money
    total_screens: int
    per_shirt_total: Money
    garment_breakdown: List[GarmentBreakdownItem]

class CampaignPricingBreakdown(BaseModel):
    """Règlement d'une campagne: jamais plus cher que le prix affiché aux participants."""
    kind: Literal["campaign"] = "campaign"
    garment_cost_per_shirt: Money
    print_cost_per_shirt: Money
    setup_fees: Money
    total_screens: int
    per_shirt_total: Money
    quoted_total: Money
    campaign_total: Money
    garment_breakdown: List[GarmentBreakdownItem]

PricingBreakdown = Annotated[
    Union[SinglePricingBreakdown, MultiPricingBreakdown, CampaignPricingBreakdown],
    PydanticField(discriminator="kind"),
]

# --- Champs client communs ---

class CustomerInfo(SQLModel):
    customer_name: str = Field(..., max_length=255)
    email: str = Field(..., max_length=255, index=True)
    phone: Optional[str] = Field(default=None, max_length=50)
    shipping_address: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    organization_name: Optional[str] = Field(default=None, max_length=255)
    need_by_date: Optional[date] = Field(default=None)

# --- Modèles pour PendingOrder ---

class PendingOrder(CustomerInfo, table=True):
    """Commande provisoire créée avant paiement, consommée une seule fois."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    garment_id: Optional[uuid.UUID] = Field(default=None, foreign_key="garments.id")
    color_size_quantities: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    # {garment_id: {"color_size_quantities": {...}}}
    selected_garments: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    print_config: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    discount_code: Optional[str] = Field(default=None, max_length=50)
    discount_amount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    payment_intent_id: Optional[str] = Field(default=None, max_length=255, index=True)
    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    expires_at: datetime = Field(nullable=False, index=True)

    __tablename__ = "pending_orders"

class GarmentSelection(BaseModel):
    color_size_quantities: ColorSizeQuantities

class PendingOrderCreate(BaseModel):
    customer_name: str = PydanticField(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = None
    shipping_address: Optional[Dict[str, Any]] = None
    organization_name: Optional[str] = None
    need_by_date: Optional[date] = None
    garment_id: Optional[uuid.UUID] = None
    color_size_quantities: Optional[ColorSizeQuantities] = None
    selected_garments: Optional[Dict[uuid.UUID, GarmentSelection]] = None
    print_config: PrintConfig
    discount_code: Optional[str] = None
    payment_intent_id: Optional[str] = None

    @model_validator(mode="after")
    def check_garments(self) -> "PendingOrderCreate":
        if not self.selected_garments and not (self.garment_id and self.color_size_quantities):
            raise ValueError("Either garment_id with color_size_quantities or selected_garments must be provided")
        return self

    @property
    def is_multi_garment(self) -> bool:
        return bool(self.selected_garments)

class PendingOrderRead(BaseModel):
    id: uuid.UUID
    customer_name: str
    email: str
    phone: Optional[str] = None
    shipping_address: Optional[Dict[str, Any]] = None
    organization_name: Optional[str] = None
    need_by_date: Optional[date] = None
    garment_id: Optional[uuid.UUID] = None
    color_size_quantities: Optional[Dict[str, Any]] = None
    selected_garments: Optional[Dict[str, Any]] = None
    print_config: PrintConfig
    discount_code: Optional[str] = None
    discount_amount: Optional[Money] = None
    payment_intent_id: Optional[str] = None
    created_at: datetime
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)

# --- Modèles pour Order ---

class Order(CustomerInfo, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    garment_id: Optional[uuid.UUID] = Field(default=None, foreign_key="garments.id")
    color_size_quantities: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    selected_garments: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    total_quantity: int = Field(..., gt=0)
    print_config: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    total_cost: Decimal = Field(..., max_digits=12, decimal_places=2)
    deposit_amount: Decimal = Field(..., max_digits=12, decimal_places=2)
    deposit_paid: bool = Field(default=False)
    balance_due: Decimal = Field(..., max_digits=12, decimal_places=2)
    discount_code: Optional[str] = Field(default=None, max_length=50)
    discount_amount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    pricing_breakdown: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    status: str = Field(..., max_length=50)
    # Index unique: au plus une commande par paiement
    payment_intent_id: Optional[str] = Field(default=None, max_length=255, unique=True, index=True)
    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    updated_at: Optional[datetime] = Field(default=None, sa_column_kwargs={"onupdate": utc_now})

    __tablename__ = "orders"

class OrderRead(BaseModel):
    id: uuid.UUID
    customer_name: str
    email: str
    phone: Optional[str] = None
    shipping_address: Optional[Dict[str, Any]] = None
    organization_name: Optional[str] = None
    need_by_date: Optional[date] = None
    garment_id: Optional[uuid.UUID] = None
    color_size_quantities: Optional[Dict[str, Any]] = None
    selected_garments: Optional[Dict[str, Any]] = None
    total_quantity: int
    print_config: PrintConfig
    total_cost: Money
    deposit_amount: Money
    deposit_paid: bool
    balance_due: Money
    discount_code: Optional[str] = None
    discount_amount: Optional[Money] = None
    pricing_breakdown: PricingBreakdown
    status: str
    payment_intent_id: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class CreateOrderFromPendingRequest(BaseModel):
    pending_order_id: uuid.UUID
    payment_intent_id: Optional[str] = None

class OrderStatusUpdate(BaseModel):
    status: str = PydanticField(..., min_length=1, max_length=50)

class PaginatedOrderResponse(BaseModel):
    items: List[OrderRead]
    total: int
