from pydantic import BaseModel, validator
from typing import Optional
from datetime import datetime
from decimal import Decimal

class ExpenseCreate(BaseModel):
    type: str
    amount: Decimal
    note: Optional[str] = ""

    @validator('amount')
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError('Expense amount must be greater than 0')
        return v

class Expense(BaseModel):
    id: int
    type: str
    amount: Decimal
    date: datetime
    note: Optional[str] = ""

    class Config:
        from_attributes = True

class ExpenseTotal(BaseModel):
    total: Decimal
