from enum import Enum

class PaymentMethod(str, Enum):
    CASH = "Cash"
    UPI = "UPI"
    CARD = "Card"
    CREDIT = "Credit"

class SalesPeriod(str, Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"

class AlertType(str, Enum):
    STOCK = "stock"
    CREDIT = "credit"
    PERFORMANCE = "performance"
    EXPENSE = "expense"
    MILESTONE = "milestone"

class AlertSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"
    SUCCESS = "success"

# Sort rank used when presenting alerts: most urgent first
SEVERITY_RANK = {
    AlertSeverity.CRITICAL: 0,
    AlertSeverity.WARNING: 1,
    AlertSeverity.INFO: 2,
    AlertSeverity.SUCCESS: 3,
}
