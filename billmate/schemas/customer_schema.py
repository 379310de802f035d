from pydantic import BaseModel, validator
from typing import Optional
from datetime import datetime
from decimal import Decimal

class CustomerCreate(BaseModel):
    name: str
    phone: Optional[str] = ""

    @validator('name')
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Customer name is required')
        return v.strip()

class Customer(BaseModel):
    id: int
    name: str
    phone: Optional[str] = ""
    balance: Decimal
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BalanceUpdate(BaseModel):
    # Positive for a credit sale, negative for a settlement
    amount: Decimal

class BalanceResponse(BaseModel):
    customer_id: int
    balance: Decimal
