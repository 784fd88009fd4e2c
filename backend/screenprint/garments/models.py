import uuid
from typing import Optional, List
from decimal import Decimal
from datetime import datetime

from pydantic import ConfigDict
from sqlalchemy import JSON
from sqlmodel import SQLModel, Field

from screenprint.core.clock import utc_now
from screenprint.pricing.utils import Money

# --- Modèle Garment SQLModel ---

class GarmentBase(SQLModel):
    name: str = Field(index=True, max_length=255)
    brand: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None)
    # Coût fournisseur unitaire, avant marge
    base_cost: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    # Tranche affichée au catalogue; les devis re-déduisent la tranche de la quantité
    pricing_tier_id: Optional[uuid.UUID] = Field(default=None, foreign_key="pricing_tiers.id", index=True)
    available_colors: List[str] = Field(default_factory=list, sa_type=JSON)
    size_range: List[str] = Field(default_factory=list, sa_type=JSON)
    active: bool = Field(default=True)

    model_config = ConfigDict(from_attributes=True)

class Garment(GarmentBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    updated_at: Optional[datetime] = Field(default=None, sa_column_kwargs={"onupdate": utc_now})
    deleted_at: Optional[datetime] = Field(default=None)

    __tablename__ = "garments"

# Schémas API pour Garment
class GarmentCreate(GarmentBase):
    pass

class GarmentRead(GarmentBase):
    id: uuid.UUID
    base_cost: Money
    created_at: datetime
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

class GarmentUpdate(SQLModel):
    name: Optional[str] = Field(default=None, max_length=255)
    brand: Optional[str] = None
    description: Optional[str] = None
    base_cost: Optional[Decimal] = Field(default=None, gt=0)
    pricing_tier_id: Optional[uuid.UUID] = None
    available_colors: Optional[List[str]] = None
    size_range: Optional[List[str]] = None
    active: Optional[bool] = None
