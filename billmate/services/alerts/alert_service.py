import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Sequence
from zoneinfo import ZoneInfo
from sqlalchemy.ext.asyncio import AsyncSession

from billmate.core.config import settings
from billmate.models.shared.enums import AlertSeverity
from billmate.schemas.alert_schema import Alert, AlertBadge
from billmate.services.alerts import alert_rules
from billmate.services.customer.customer_service import CustomerService
from billmate.services.expense.expense_service import ExpenseService
from billmate.services.inventory.product_service import ProductService
from billmate.services.sales.sales_service import SalesService
from billmate.services.system.setting_service import SettingService
from billmate.utils.date_time import local_now, utcnow

logger = logging.getLogger(__name__)

AlertCheck = Callable[[AsyncSession, datetime], Awaitable[List[Alert]]]

# Time an interrupted statement gets to unwind before the check is cancelled
INTERRUPT_GRACE_SECONDS = 0.5


class CheckTimeoutError(Exception):
    pass


class AlertService:
    """
    Builds the smart alert feed from current data.

    Nothing is cached: every call re-reads products, sales, expenses and
    customers. Each check gets its own session and deadline, so a failing or
    stalled check only removes its own alerts from the result.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession],
        tz: Optional[ZoneInfo] = None,
        evaluator_timeout: Optional[float] = None,
        no_sales_hour: Optional[int] = None,
    ):
        self.session_factory = session_factory
        self.tz = tz or settings.tzinfo
        self.evaluator_timeout = (
            settings.ALERT_EVALUATOR_TIMEOUT_SECONDS if evaluator_timeout is None else evaluator_timeout
        )
        self.no_sales_hour = settings.NO_SALES_ALERT_HOUR if no_sales_hour is None else no_sales_hour

    @property
    def checks(self) -> Sequence[tuple]:
        # Emission order; severity sorting is stable so this breaks ties
        return (
            ("stock", self.check_stock),
            ("credit", self.check_credit),
            ("performance", self.check_performance),
            ("expense", self.check_expenses),
            ("milestone", self.check_milestones),
        )

    async def generate_alerts(self, now: Optional[datetime] = None) -> List[Alert]:
        """All current alerts, most urgent first. Never raises."""
        try:
            now = local_now(self.tz, now)
            alerts: List[Alert] = []
            for name, check in self.checks:
                alerts.extend(await self._run_check(name, check, now))
            return alert_rules.sort_alerts(alerts)
        except Exception as e:
            logger.error(f"Error generating alerts: {str(e)}")
            return []

    async def _run_check(self, name: str, check: AlertCheck, now: datetime) -> List[Alert]:
        try:
            async with self.session_factory() as session:
                return await self._run_with_deadline(session, check, now)
        except Exception as e:
            logger.warning(f"Alert check '{name}' skipped: {e!r}")
            return []

    async def _run_with_deadline(self, session: AsyncSession, check: AlertCheck, now: datetime) -> List[Alert]:
        """
        Run one check against its own session, bounded by the evaluator timeout.

        A statement still running at the deadline is interrupted on the driver
        connection, so it fails like any other query error and the connection
        goes back to the pool intact. Cancelling the task is the fallback for
        checks stalled outside the database.
        """
        driver_connection = await self._driver_connection(session)
        task = asyncio.ensure_future(check(session, now))

        done, _ = await asyncio.wait({task}, timeout=self.evaluator_timeout)
        if not done:
            await self._interrupt(driver_connection)
            done, _ = await asyncio.wait({task}, timeout=INTERRUPT_GRACE_SECONDS)
            if not done:
                task.cancel()
            else:
                # Collect the interrupt error so it is not reported as unretrieved
                task.exception()
            raise CheckTimeoutError(f"exceeded {self.evaluator_timeout:g}s")

        return task.result()

    async def _driver_connection(self, session: AsyncSession):
        connection = await session.connection()
        raw_connection = await connection.get_raw_connection()
        return raw_connection.driver_connection

    async def _interrupt(self, driver_connection) -> None:
        # aiosqlite interrupts straight on the sqlite handle, not through its worker queue
        interrupt = getattr(driver_connection, "interrupt", None)
        if interrupt is None:
            return
        try:
            await interrupt()
        except Exception as e:
            logger.warning(f"Could not interrupt stalled alert query: {str(e)}")

    async def check_stock(self, session: AsyncSession, now: datetime) -> List[Alert]:
        threshold = await SettingService(session).get_low_stock_threshold()
        products = await ProductService(session).get_all_products()
        return alert_rules.stock_alerts(products, threshold)

    async def check_credit(self, session: AsyncSession, now: datetime) -> List[Alert]:
        customers = await CustomerService(session).get_all_customers()
        currency = await SettingService(session).get_currency()
        return alert_rules.credit_alerts(customers, currency)

    async def check_performance(self, session: AsyncSession, now: datetime) -> List[Alert]:
        sales = await SalesService(session, self.tz).get_all_sales()
        currency = await SettingService(session).get_currency()
        return alert_rules.performance_alerts(sales, currency, now, self.tz, self.no_sales_hour)

    async def check_expenses(self, session: AsyncSession, now: datetime) -> List[Alert]:
        expenses = await ExpenseService(session, self.tz).get_all_expenses()
        currency = await SettingService(session).get_currency()
        return alert_rules.expense_alerts(expenses, currency, now, self.tz)

    async def check_milestones(self, session: AsyncSession, now: datetime) -> List[Alert]:
        sales = await SalesService(session, self.tz).get_all_sales()
        currency = await SettingService(session).get_currency()
        return alert_rules.milestone_alerts(sales, currency)


def summarize_badge(alerts: Sequence[Alert], refreshed_at: Optional[datetime] = None) -> AlertBadge:
    return AlertBadge(
        count=len(alerts),
        critical=sum(1 for a in alerts if a.severity == AlertSeverity.CRITICAL),
        warning=sum(1 for a in alerts if a.severity == AlertSeverity.WARNING),
        refreshed_at=refreshed_at or utcnow(),
    )
