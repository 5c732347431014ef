# school_billing/schemas/fee.py
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FeeTypeCreate(BaseModel):
    name: str = Field(..., description="Unique fee category name, e.g. Tuition")


class FeeTypeUpdate(BaseModel):
    name: str


class FeeTypeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    created_at: datetime
    updated_at: datetime


class FeeStructureCreate(BaseModel):
    class_id: int
    fee_type_id: int
    amount: Decimal = Field(..., description="Charge per period, two decimals")
    frequency: str = Field(..., description="monthly, annual or one-time")
    academic_year: str = Field(..., description="YYYY-YYYY, e.g. 2024-2025")


class FeeStructureUpdate(BaseModel):
    class_id: Optional[int] = None
    fee_type_id: Optional[int] = None
    amount: Optional[Decimal] = None
    frequency: Optional[str] = None
    academic_year: Optional[str] = None


class FeeStructureOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    class_id: int
    fee_type_id: int
    amount: Decimal
    frequency: str
    academic_year: str
    created_at: datetime
    updated_at: datetime
