from sqlalchemy import Column, String, Numeric
from sqlalchemy.orm import relationship
from billmate.db.base import BaseModel

class Customer(BaseModel):
    __tablename__ = 'customers'

    name = Column(String(255), nullable=False, index=True)
    phone = Column(String(30), default="", index=True)
    # Positive balance means the customer owes the shop (khata credit)
    balance = Column(Numeric(12, 2), nullable=False, default=0)

    # Relationships
    sales = relationship("Sale", back_populates="customer")
