"""Smart alert rules.

Each rule is a pure function over a snapshot of one data domain and returns
zero or more `Alert` records. Rules never touch the database and never depend
on each other's output; `AlertService` feeds them and merges the results.

Alert ids are fixed strings for one-off conditions and embed the threshold
for milestone ladders, so the same condition always yields the same id and a
dismissal sticks until the condition goes away and comes back.
"""

from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Sequence
from zoneinfo import ZoneInfo

from billmate.models.shared.enums import AlertSeverity, AlertType, SEVERITY_RANK
from billmate.schemas.alert_schema import Alert
from billmate.utils.date_time import as_utc, day_bounds, local_now
from billmate.utils.formatting import format_amount, format_money, plural, to_decimal

TX_MILESTONES = (10, 25, 50, 100, 250, 500, 1000)
REVENUE_MILESTONES = (10000, 50000, 100000, 500000, 1000000)

# Transaction milestone stays visible for this many sales after crossing
TX_MILESTONE_WINDOW = 5
# Revenue milestone stays visible until revenue passes threshold * this factor
REVENUE_MILESTONE_WINDOW = Decimal("1.1")

EXPENSE_SPIKE_FACTOR = Decimal("1.5")
EXPENSE_LOOKBACK_DAYS = 7
PERFORMANCE_DROP_PCT = Decimal("-20")
MAX_NAMED_PRODUCTS = 3


def _sum(values: Iterable) -> Decimal:
    return sum((to_decimal(v) for v in values), Decimal("0"))


def _active(sales: Iterable) -> list:
    return [s for s in sales if not s.refunded]


def stock_alerts(products: Sequence, threshold: int) -> List[Alert]:
    alerts = []
    out_of_stock = [p for p in products if p.stock_quantity == 0]
    low_stock = [p for p in products if 0 < p.stock_quantity <= threshold]

    if out_of_stock:
        count = len(out_of_stock)
        names = ", ".join(p.name for p in out_of_stock[:MAX_NAMED_PRODUCTS])
        more = f" +{count - MAX_NAMED_PRODUCTS} more" if count > MAX_NAMED_PRODUCTS else ""
        alerts.append(Alert(
            id="out-of-stock",
            type=AlertType.STOCK,
            icon="🚫",
            title="Out of Stock!",
            message=f"{count} product{plural(count, ' is', 's are')} completely out of stock: {names}{more}",
            severity=AlertSeverity.CRITICAL,
        ))

    if low_stock:
        count = len(low_stock)
        names = ", ".join(f"{p.name} ({p.stock_quantity})" for p in low_stock[:MAX_NAMED_PRODUCTS])
        alerts.append(Alert(
            id="low-stock",
            type=AlertType.STOCK,
            icon="📦",
            title="Low Stock Warning",
            message=f"{count} product{plural(count, ' is', 's are')} running low: {names}",
            severity=AlertSeverity.WARNING,
        ))

    return alerts


def credit_alerts(customers: Sequence, currency: str) -> List[Alert]:
    with_debt = [c for c in customers if to_decimal(c.balance or 0) > 0]
    if not with_debt:
        return []

    total_credit = _sum(c.balance for c in with_debt)
    # sorted() is stable, so equal balances keep their listing order
    biggest = sorted(with_debt, key=lambda c: to_decimal(c.balance), reverse=True)[0]
    count = len(with_debt)

    return [Alert(
        id="credit-outstanding",
        type=AlertType.CREDIT,
        icon="💰",
        title=f"{format_money(currency, total_credit)} Outstanding Credit",
        message=(
            f"{count} customer{plural(count, ' has', 's have')} pending payments. "
            f"Highest: {biggest.name} ({format_money(currency, biggest.balance)})"
        ),
        severity=AlertSeverity.WARNING if count > 3 else AlertSeverity.INFO,
    )]


def performance_alerts(
    sales: Sequence,
    currency: str,
    now: datetime,
    tz: ZoneInfo,
    no_sales_hour: int = 10,
) -> List[Alert]:
    """Compare today's revenue with yesterday's, in the shop's local calendar."""
    start_of_today, _ = day_bounds(tz, now)
    start_of_yesterday, _ = day_bounds(tz, now, days_back=1)

    active = _active(sales)
    today_sales = [s for s in active if as_utc(s.date) >= start_of_today]
    yesterday_sales = [s for s in active if start_of_yesterday <= as_utc(s.date) < start_of_today]

    today_revenue = _sum(s.total for s in today_sales)
    yesterday_revenue = _sum(s.total for s in yesterday_sales)

    if not today_sales and local_now(tz, now).hour >= no_sales_hour:
        return [Alert(
            id="no-sales-today",
            type=AlertType.PERFORMANCE,
            icon="📢",
            title="No Sales Yet Today",
            message="Start your first sale to get the day going!",
            severity=AlertSeverity.INFO,
        )]

    if yesterday_revenue <= 0 or not today_sales:
        return []

    change = (today_revenue - yesterday_revenue) / yesterday_revenue * 100

    if change > 0:
        return [Alert(
            id="performance-up",
            type=AlertType.PERFORMANCE,
            icon="📈",
            title="Sales Are Up!",
            message=(
                f"Today's revenue {format_money(currency, today_revenue)} is "
                f"{format_amount(change)}% higher than yesterday "
                f"({format_money(currency, yesterday_revenue)})"
            ),
            severity=AlertSeverity.SUCCESS,
        )]

    if change < PERFORMANCE_DROP_PCT:
        return [Alert(
            id="performance-down",
            type=AlertType.PERFORMANCE,
            icon="📉",
            title="Sales Dip Today",
            message=(
                f"Revenue is {format_amount(abs(change))}% lower than yesterday. "
                f"Yesterday: {format_money(currency, yesterday_revenue)}, "
                f"Today: {format_money(currency, today_revenue)}"
            ),
            severity=AlertSeverity.INFO,
        )]

    return []


def expense_alerts(expenses: Sequence, currency: str, now: datetime, tz: ZoneInfo) -> List[Alert]:
    """Flag a day whose spending runs well above the trailing daily average.

    The average always divides the previous week's total by seven, even when
    the shop has less history than that.
    """
    start_of_today, start_of_tomorrow = day_bounds(tz, now)
    week_start, _ = day_bounds(tz, now, days_back=EXPENSE_LOOKBACK_DAYS)

    today_total = _sum(e.amount for e in expenses if start_of_today <= as_utc(e.date) < start_of_tomorrow)
    if today_total == 0:
        return []

    week_total = _sum(e.amount for e in expenses if week_start <= as_utc(e.date) < start_of_today)
    avg_daily = week_total / EXPENSE_LOOKBACK_DAYS

    if avg_daily > 0 and today_total > avg_daily * EXPENSE_SPIKE_FACTOR:
        pct_higher = (today_total - avg_daily) / avg_daily * 100
        return [Alert(
            id="expense-high",
            type=AlertType.EXPENSE,
            icon="⚠️",
            title="High Expenses Today",
            message=(
                f"{format_money(currency, today_total)} spent today — "
                f"{format_amount(pct_higher)}% above your daily average of "
                f"{format_money(currency, avg_daily)}"
            ),
            severity=AlertSeverity.WARNING,
        )]

    return []


def format_milestone_label(amount: int) -> str:
    """Lakh/thousand shorthand: 100000 -> '1L', 50000 -> '50K'."""
    if amount >= 100000:
        return f"{format_amount(Decimal(amount) / 100000)}L"
    return f"{format_amount(Decimal(amount) / 1000)}K"


def milestone_alerts(sales: Sequence, currency: str) -> List[Alert]:
    """Celebrate a ladder step just after it is crossed; at most one per ladder."""
    alerts = []
    active = _active(sales)
    total_transactions = len(active)
    total_revenue = _sum(s.total for s in active)

    for milestone in TX_MILESTONES:
        if milestone <= total_transactions < milestone + TX_MILESTONE_WINDOW:
            alerts.append(Alert(
                id=f"milestone-tx-{milestone}",
                type=AlertType.MILESTONE,
                icon="🎉",
                title=f"{milestone} Sales Milestone!",
                message=f"Congratulations! You've completed {milestone}+ transactions on BillMate!",
                severity=AlertSeverity.SUCCESS,
            ))
            break

    for milestone in REVENUE_MILESTONES:
        if milestone <= total_revenue < milestone * REVENUE_MILESTONE_WINDOW:
            label = format_milestone_label(milestone)
            alerts.append(Alert(
                id=f"milestone-rev-{milestone}",
                type=AlertType.MILESTONE,
                icon="🏆",
                title=f"{currency}{label} Revenue Crossed!",
                message=f"Your total revenue has crossed {currency}{label}. Your business is growing!",
                severity=AlertSeverity.SUCCESS,
            ))
            break

    return alerts


def sort_alerts(alerts: Iterable[Alert]) -> List[Alert]:
    """Most urgent first; equal severities keep their emission order."""
    return sorted(alerts, key=lambda alert: SEVERITY_RANK[alert.severity])
