from sqlalchemy import Column, Integer, String, Boolean, Numeric
from billmate.db.base import BaseModel

class Product(BaseModel):
    __tablename__ = 'products'

    name = Column(String(255), nullable=False, index=True)
    selling_price = Column(Numeric(12, 2), nullable=False, default=0)
    cost_price = Column(Numeric(12, 2), nullable=False, default=0)
    stock_quantity = Column(Integer, nullable=False, default=0)  # Never negative
    category = Column(String(100), default="General", index=True)
    frequently_used = Column(Boolean, default=False, index=True)
    barcode = Column(String(100), default="", index=True)
