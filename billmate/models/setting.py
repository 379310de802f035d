from sqlalchemy import Column, String, Text
from billmate.db.base import BaseModel

class Setting(BaseModel):
    __tablename__ = 'settings'

    key = Column(String(100), nullable=False, unique=True, index=True)
    value = Column(Text)
