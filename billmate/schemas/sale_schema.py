from pydantic import BaseModel, validator
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from billmate.models.shared.enums import PaymentMethod

class CartItem(BaseModel):
    product_id: int
    quantity: int
    # Billing screen may override the catalog price for this line
    selling_price: Optional[Decimal] = None

    @validator('quantity')
    def validate_quantity(cls, v):
        if v <= 0:
            raise ValueError('Quantity must be greater than 0')
        return v

    @validator('selling_price')
    def validate_selling_price(cls, v):
        if v is not None and v < 0:
            raise ValueError('Selling price cannot be negative')
        return v

class SaleCreate(BaseModel):
    items: List[CartItem]
    payment_method: PaymentMethod = PaymentMethod.CASH
    customer_id: Optional[int] = None

class SaleItem(BaseModel):
    id: int
    product_id: Optional[int] = None
    product_name: str
    quantity: int
    selling_price: Decimal
    cost_price: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True

class SaleSummary(BaseModel):
    id: int
    date: datetime
    total: Decimal
    profit: Decimal
    payment_method: str
    refunded: bool
    customer_id: Optional[int] = None
    item_count: int

    class Config:
        from_attributes = True

class Sale(SaleSummary):
    items: List[SaleItem] = []

class SaleCreateResponse(BaseModel):
    sale_id: int
    total: Decimal
    profit: Decimal

class RefundResponse(BaseModel):
    sale_id: int
    refunded: bool
    message: str

class DateRange(BaseModel):
    start_date: date
    end_date: date

class TodayStats(BaseModel):
    total_revenue: Decimal
    total_profit: Decimal
    transaction_count: int

class TopProduct(BaseModel):
    name: str
    quantity: int
