import uuid
from enum import Enum
from typing import Optional
from decimal import Decimal
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field

from screenprint.core.clock import utc_now
from screenprint.pricing.utils import Money


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def normalize_code(code: str) -> str:
    """Les codes sont stockés en majuscules, sans espaces autour."""
    return code.strip().upper()

# --- Modèles pour DiscountCode ---

class DiscountCodeBase(SQLModel):
    code: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(default=None)
    discount_type: DiscountType
    discount_value: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    active: bool = Field(default=True)
    expires_at: Optional[datetime] = Field(default=None)

    model_config = ConfigDict(from_attributes=True)

class DiscountCode(DiscountCodeBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    code: str = Field(..., max_length=50, index=True, unique=True)
    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    updated_at: Optional[datetime] = Field(default=None, sa_column_kwargs={"onupdate": utc_now})

    __tablename__ = "discount_codes"

class DiscountCodeCreate(DiscountCodeBase):

    @field_validator("code")
    @classmethod
    def normalize(cls, value: str) -> str:
        value = normalize_code(value)
        if not value:
            raise ValueError("Code is required")
        return value

    @model_validator(mode="after")
    def check_percentage(self) -> "DiscountCodeCreate":
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValueError("Percentage discount cannot exceed 100%")
        return self

class DiscountCodeUpdate(SQLModel):
    code: Optional[str] = Field(default=None, max_length=50)
    description: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = Field(default=None, gt=0)
    active: Optional[bool] = None
    expires_at: Optional[datetime] = None

    @field_validator("code")
    @classmethod
    def normalize(cls, value: Optional[str]) -> Optional[str]:
        return normalize_code(value) if value is not None else value

class DiscountCodeRead(DiscountCodeBase):
    id: uuid.UUID
    discount_value: Money
    created_at: datetime

# --- Application d'une réduction ---

class AppliedDiscount(BaseModel):
    code: str
    discount_type: DiscountType
    discount_value: Money
    discount_amount: Money

class DiscountValidationRequest(BaseModel):
    code: str = Field(..., min_length=1)
    subtotal: Decimal = Field(..., gt=0)

class DiscountValidationResponse(BaseModel):
    valid: bool
    discount: Optional[AppliedDiscount] = None
    discount_code_id: Optional[uuid.UUID] = None
    message: Optional[str] = None
