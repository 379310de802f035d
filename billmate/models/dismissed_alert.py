from sqlalchemy import Column, String
from billmate.db.base import BaseModel
from billmate.db.types import UTCDateTime
from billmate.utils.date_time import utcnow

class DismissedAlert(BaseModel):
    __tablename__ = 'dismissed_alerts'

    alert_id = Column(String(100), nullable=False, unique=True, index=True)
    dismissed_at = Column(UTCDateTime, nullable=False, default=utcnow)
