import uuid
from typing import Optional, List, Dict, Any, Literal
from decimal import Decimal
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field as PydanticField
from sqlalchemy import JSON
from sqlmodel import SQLModel, Field

from screenprint.core.clock import utc_now
from screenprint.orders.models import OrderRead
from screenprint.pricing.utils import Money
from screenprint.quotes.models import PrintConfig

PaymentStyle = Literal["organizer_pays", "everyone_pays"]

# --- Modèles pour Campaign ---

class Campaign(SQLModel, table=True):
    """Commande groupée: les participants choisissent taille et couleur avant la clôture."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    slug: str = Field(..., max_length=100, unique=True, index=True)
    name: str = Field(..., max_length=255)
    deadline: datetime = Field(nullable=False, index=True)
    payment_style: str = Field(..., max_length=20)
    status: str = Field(default="active", max_length=20, index=True)
    print_config: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    # {garment_id: {"price": "18.00", "colors": ["Black", ...]}}
    garment_configs: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    organizer_name: Optional[str] = Field(default=None, max_length=255)
    organizer_email: str = Field(..., max_length=255, index=True)
    final_order_id: Optional[uuid.UUID] = Field(default=None, foreign_key="orders.id")
    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    updated_at: Optional[datetime] = Field(default=None, sa_column_kwargs={"onupdate": utc_now})

    __tablename__ = "campaigns"

class CampaignGarmentSelection(BaseModel):
    # Vide: toutes les couleurs du vêtement sont proposées
    colors: List[str] = []

class CampaignCreate(BaseModel):
    name: str = PydanticField(..., min_length=1, max_length=255)
    deadline: datetime
    payment_style: PaymentStyle = "everyone_pays"
    print_config: PrintConfig
    garments: Dict[uuid.UUID, CampaignGarmentSelection] = PydanticField(..., min_length=1)
    organizer_name: Optional[str] = PydanticField(default=None, max_length=255)
    organizer_email: EmailStr

class CampaignGarmentConfig(BaseModel):
    price: Money
    colors: List[str]

class CampaignRead(BaseModel):
    id: uuid.UUID
    slug: str
    name: str
    deadline: datetime
    payment_style: str
    status: str
    print_config: PrintConfig
    garment_configs: Dict[uuid.UUID, CampaignGarmentConfig]
    organizer_name: Optional[str] = None
    organizer_email: str
    final_order_id: Optional[uuid.UUID] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class PaginatedCampaignResponse(BaseModel):
    items: List[CampaignRead]
    total: int

# --- Modèles pour CampaignOrder (commande d'un participant) ---

class CampaignOrder(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    campaign_id: uuid.UUID = Field(foreign_key="campaigns.id", index=True)
    participant_name: str = Field(..., max_length=255)
    participant_email: str = Field(..., max_length=255, index=True)
    garment_id: uuid.UUID = Field(foreign_key="garments.id")
    size: str = Field(..., max_length=20)
    color: str = Field(..., max_length=100)
    quantity: int = Field(default=1, gt=0)
    # Prix unitaire de campagne au moment de la commande
    unit_price: Decimal = Field(..., max_digits=10, decimal_places=2)
    amount_paid: Decimal = Field(default=Decimal("0"), max_digits=12, decimal_places=2)
    payment_intent_id: Optional[str] = Field(default=None, max_length=255)
    status: str = Field(default="pending", max_length=20, index=True)
    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    updated_at: Optional[datetime] = Field(default=None, sa_column_kwargs={"onupdate": utc_now})

    __tablename__ = "campaign_orders"

class CampaignOrderItem(BaseModel):
    garment_id: uuid.UUID
    size: str = PydanticField(..., min_length=1, max_length=20)
    color: str = PydanticField(..., min_length=1, max_length=100)
    quantity: int = PydanticField(default=1, ge=1)

class CampaignOrderCreate(BaseModel):
    participant_name: str = PydanticField(..., min_length=1, max_length=255)
    participant_email: EmailStr
    items: List[CampaignOrderItem] = PydanticField(..., min_length=1)

class CampaignOrderRead(BaseModel):
    id: uuid.UUID
    campaign_id: uuid.UUID
    participant_name: str
    participant_email: str
    garment_id: uuid.UUID
    size: str
    color: str
    quantity: int
    unit_price: Money
    amount_paid: Money
    payment_intent_id: Optional[str] = None
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class CampaignCheckoutResponse(BaseModel):
    orders: List[CampaignOrderRead]
    requires_payment: bool
    amount_due: Money

class CampaignOrderStatusUpdate(BaseModel):
    status: str = PydanticField(..., min_length=1, max_length=20)
    payment_intent_id: Optional[str] = None

# --- Statistiques et règlement ---

class CampaignStats(BaseModel):
    order_count: int
    total_quantity: int
    size_breakdown: Dict[str, int]
    color_breakdown: Dict[str, int]
    garment_breakdown: Dict[uuid.UUID, int]
    # Renseigné seulement quand les participants paient eux-mêmes
    total_revenue: Optional[Money] = None

class CampaignSettleRequest(BaseModel):
    shipping_address: Optional[Dict[str, Any]] = None
    payment_intent_id: Optional[str] = None

class CampaignSettlementResponse(BaseModel):
    campaign: CampaignRead
    order: OrderRead
    settled_price_per_shirt: Money
    # Trop-perçu à rembourser aux participants (everyone_pays)
    refund_due: Money
