from pydantic import BaseModel, validator
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

class ProductBase(BaseModel):
    name: str
    selling_price: Decimal
    cost_price: Decimal = Decimal("0")
    stock_quantity: int = 0
    category: Optional[str] = "General"
    frequently_used: bool = False
    barcode: Optional[str] = ""

    @validator('name')
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError('Product name is required')
        return v.strip()

    @validator('selling_price', 'cost_price')
    def validate_price(cls, v):
        if v < 0:
            raise ValueError('Price cannot be negative')
        return v

    @validator('stock_quantity')
    def validate_stock_quantity(cls, v):
        if v < 0:
            raise ValueError('Stock quantity cannot be negative')
        return v

class ProductCreate(ProductBase):
    pass

class ProductUpdate(BaseModel):
    name: Optional[str] = None
    selling_price: Optional[Decimal] = None
    cost_price: Optional[Decimal] = None
    stock_quantity: Optional[int] = None
    category: Optional[str] = None
    frequently_used: Optional[bool] = None
    barcode: Optional[str] = None

    @validator('selling_price', 'cost_price')
    def validate_price(cls, v):
        if v is not None and v < 0:
            raise ValueError('Price cannot be negative')
        return v

    @validator('stock_quantity')
    def validate_stock_quantity(cls, v):
        if v is not None and v < 0:
            raise ValueError('Stock quantity cannot be negative')
        return v

class Product(ProductBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class StockAdjustment(BaseModel):
    adjustment: int

class StockAdjustmentResponse(BaseModel):
    product_id: int
    stock_quantity: int

class CategoryList(BaseModel):
    categories: List[str]
