from sqlalchemy import Column, String, Text, Numeric
from billmate.db.base import BaseModel
from billmate.db.types import UTCDateTime
from billmate.utils.date_time import utcnow

class Expense(BaseModel):
    __tablename__ = 'expenses'

    type = Column(String(100), nullable=False, index=True)  # Rent, Electricity, Supplies, etc.
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(UTCDateTime, nullable=False, default=utcnow, index=True)
    note = Column(Text, default="")
