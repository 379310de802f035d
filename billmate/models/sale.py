from sqlalchemy import Column, Integer, String, Boolean, Numeric, ForeignKey
from sqlalchemy.orm import relationship
from billmate.db.base import BaseModel
from billmate.db.types import UTCDateTime
from billmate.utils.date_time import utcnow

class Sale(BaseModel):
    __tablename__ = 'sales'

    date = Column(UTCDateTime, nullable=False, default=utcnow, index=True)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    profit = Column(Numeric(12, 2), nullable=False, default=0)  # May be negative
    payment_method = Column(String(20), nullable=False, index=True)
    refunded = Column(Boolean, nullable=False, default=False, index=True)
    customer_id = Column(Integer, ForeignKey('customers.id'), nullable=True, index=True)
    item_count = Column(Integer, default=0)

    # Relationships
    customer = relationship("Customer", back_populates="sales")
    items = relationship("SaleItem", back_populates="sale", cascade="all, delete-orphan")


class SaleItem(BaseModel):
    __tablename__ = 'sale_items'

    sale_id = Column(Integer, ForeignKey('sales.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey('products.id', ondelete='SET NULL'), nullable=True, index=True)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    selling_price = Column(Numeric(12, 2), nullable=False)
    cost_price = Column(Numeric(12, 2), nullable=False, default=0)
    subtotal = Column(Numeric(12, 2), nullable=False)

    # Relationships
    sale = relationship("Sale", back_populates="items")
