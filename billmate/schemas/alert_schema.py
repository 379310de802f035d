from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from billmate.models.shared.enums import AlertSeverity, AlertType

class Alert(BaseModel):
    id: str
    type: AlertType
    icon: str
    title: str
    message: str
    severity: AlertSeverity

class AlertList(BaseModel):
    count: int
    alerts: List[Alert]

class AlertBadge(BaseModel):
    count: int
    critical: int
    warning: int
    refreshed_at: Optional[datetime] = None

class DismissResponse(BaseModel):
    alert_id: str
    dismissed: bool

class DismissAllResponse(BaseModel):
    alert_ids: List[str]
    count: int
