import uuid
from typing import Optional
from decimal import Decimal
from datetime import datetime

from pydantic import ConfigDict, model_validator
from sqlmodel import SQLModel, Field, UniqueConstraint

from screenprint.core.clock import utc_now
from screenprint.pricing.utils import Money

# --- Modèles pour PricingTier ---

class PricingTierBase(SQLModel):
    """Tranche de quantité (ex: 24-47, 48-71, 144+) utilisée pour la marge et l'impression."""
    name: str = Field(..., max_length=100)
    min_qty: int = Field(..., ge=0)
    # None = pas de borne haute
    max_qty: Optional[int] = Field(default=None)
    garment_markup_percentage: Decimal = Field(..., ge=0, max_digits=5, decimal_places=2)

    model_config = ConfigDict(from_attributes=True)

class PricingTier(PricingTierBase, table=True):
    """Modèle de table pour une tranche de prix."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    updated_at: Optional[datetime] = Field(default=None, sa_column_kwargs={"onupdate": utc_now})

    __tablename__ = "pricing_tiers"

class PricingTierCreate(PricingTierBase):
    """Schéma de création d'une tranche."""

    @model_validator(mode="after")
    def check_range(self) -> "PricingTierCreate":
        if self.max_qty is not None and self.max_qty <= self.min_qty:
            raise ValueError("max_qty must be greater than min_qty")
        return self

class PricingTierUpdate(SQLModel):
    """Mise à jour partielle d'une tranche (seuls les champs fournis sont modifiés)."""
    name: Optional[str] = Field(default=None, max_length=100)
    min_qty: Optional[int] = Field(default=None, ge=0)
    max_qty: Optional[int] = None
    garment_markup_percentage: Optional[Decimal] = Field(default=None, ge=0)

class PricingTierRead(PricingTierBase):
    id: uuid.UUID
    garment_markup_percentage: Money
    created_at: datetime
    updated_at: Optional[datetime] = None

# --- Modèles pour PrintPricing ---

class PrintPricingBase(SQLModel):
    """Tarif d'impression pour un couple (tranche, nombre de couleurs d'encre)."""
    tier_id: uuid.UUID = Field(foreign_key="pricing_tiers.id", index=True)
    num_colors: int = Field(..., ge=1, le=4)
    cost_per_shirt: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    setup_fee_per_screen: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)

    model_config = ConfigDict(from_attributes=True)

class PrintPricing(PrintPricingBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    updated_at: Optional[datetime] = Field(default=None, sa_column_kwargs={"onupdate": utc_now})

    __tablename__ = "print_pricing"
    __table_args__ = (UniqueConstraint("tier_id", "num_colors", name="uq_print_pricing_tier_colors"),)

class PrintPricingCreate(PrintPricingBase):
    pass

class PrintPricingUpdate(SQLModel):
    tier_id: Optional[uuid.UUID] = None
    num_colors: Optional[int] = Field(default=None, ge=1, le=4)
    cost_per_shirt: Optional[Decimal] = Field(default=None, ge=0)
    setup_fee_per_screen: Optional[Decimal] = Field(default=None, ge=0)

class PrintPricingRead(PrintPricingBase):
    id: uuid.UUID
    cost_per_shirt: Money
    setup_fee_per_screen: Money

# --- Modèles pour AppConfig ---

class AppConfigBase(SQLModel):
    """Configuration globale (ligne unique) lue par le moteur de devis."""
    deposit_percentage: Decimal = Field(default=Decimal("50.00"), ge=0, le=100, max_digits=5, decimal_places=2)
    min_order_quantity: int = Field(default=24, ge=1)
    max_ink_colors: int = Field(default=4, ge=1, le=10)

    model_config = ConfigDict(from_attributes=True)

class AppConfig(AppConfigBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    updated_at: Optional[datetime] = Field(default=None, sa_column_kwargs={"onupdate": utc_now})

    __tablename__ = "app_config"

class AppConfigUpdate(SQLModel):
    deposit_percentage: Optional[Decimal] = Field(default=None, ge=0, le=100)
    min_order_quantity: Optional[int] = Field(default=None, ge=1)
    max_ink_colors: Optional[int] = Field(default=None, ge=1, le=10)

class AppConfigRead(AppConfigBase):
    id: Optional[uuid.UUID] = None
    deposit_percentage: Money = Decimal("50.00")
