import asyncio
import time
import pytest
from datetime import timedelta
from sqlalchemy import text

from billmate.models.shared.enums import AlertSeverity
from billmate.services.alerts import alert_rules
from billmate.services.alerts.alert_service import INTERRUPT_GRACE_SECONDS, AlertService, summarize_badge
from billmate.services.alerts.badge_refresher import AlertBadgeRefresher
from billmate.services.alerts.dismissal_service import AlertDismissalService
from billmate.services.customer.customer_service import CustomerService
from billmate.services.system.setting_service import SettingService

# Counts far enough that SQLite spends many seconds on it
ENDLESS_QUERY = text(
    "WITH RECURSIVE counter(n) AS (SELECT 1 UNION ALL SELECT n + 1 FROM counter WHERE n < 1000000000) "
    "SELECT count(*) FROM counter"
)


@pytest.fixture
def alert_service(session_maker, tz):
    return AlertService(session_maker, tz=tz, no_sales_hour=10)


@pytest.fixture
async def busy_shop(make_product, make_customer, make_sale, now):
    """One out-of-stock item, one low item, one debtor and a sale yesterday"""
    await make_product("Milk", 0)
    await make_product("Bread", 2)
    await make_product("Rice", 40)
    await make_customer("Ravi", "300")
    await make_sale("800", now - timedelta(days=1))


@pytest.mark.asyncio
class TestAlertService:
    """Aggregating every check into one feed"""

    async def test_empty_shop_before_opening_hour(self, alert_service, now):
        alerts = await alert_service.generate_alerts(now.replace(hour=8))
        assert alerts == []

    async def test_empty_shop_after_opening_hour(self, alert_service, now):
        alerts = await alert_service.generate_alerts(now)
        assert [a.id for a in alerts] == ["no-sales-today"]

    async def test_feed_is_sorted_by_severity(self, alert_service, busy_shop, now):
        alerts = await alert_service.generate_alerts(now)

        assert [a.id for a in alerts] == [
            "out-of-stock",
            "low-stock",
            "credit-outstanding",
            "no-sales-today",
        ]
        assert [a.severity for a in alerts] == [
            AlertSeverity.CRITICAL,
            AlertSeverity.WARNING,
            AlertSeverity.INFO,
            AlertSeverity.INFO,
        ]

    async def test_repeated_runs_are_identical(self, alert_service, busy_shop, now):
        first = await alert_service.generate_alerts(now)
        second = await alert_service.generate_alerts(now)
        assert first == second

    async def test_threshold_comes_from_settings(self, alert_service, db_session, busy_shop, now):
        await SettingService(db_session).set_setting("low_stock_threshold", 1)

        alerts = await alert_service.generate_alerts(now)

        assert "low-stock" not in [a.id for a in alerts]

    async def test_currency_comes_from_settings(self, alert_service, db_session, busy_shop, now):
        await SettingService(db_session).set_setting("currency", "$")

        alerts = await alert_service.generate_alerts(now)

        credit = next(a for a in alerts if a.id == "credit-outstanding")
        assert credit.title == "$300 Outstanding Credit"

    async def test_sales_and_expenses_feed_their_checks(
        self, alert_service, make_sale, make_expense, now
    ):
        await make_sale("1000", now - timedelta(days=1))
        await make_sale("1300", now - timedelta(hours=1))
        await make_expense("700", now - timedelta(days=2))
        await make_expense("200", now - timedelta(hours=3))

        alerts = await alert_service.generate_alerts(now)

        assert [a.id for a in alerts] == ["expense-high", "performance-up"]

    async def test_failing_check_only_drops_its_own_alerts(self, alert_service, busy_shop, now, monkeypatch):
        async def broken(self):
            raise RuntimeError("customer table unavailable")

        monkeypatch.setattr(CustomerService, "get_all_customers", broken)

        alerts = await alert_service.generate_alerts(now)

        assert [a.id for a in alerts] == ["out-of-stock", "low-stock", "no-sales-today"]

    async def test_database_error_does_not_poison_later_checks(self, alert_service, busy_shop, now, monkeypatch):
        async def bad_query(self):
            await self.db.execute(text("SELECT * FROM no_such_table"))

        monkeypatch.setattr(CustomerService, "get_all_customers", bad_query)

        alerts = await alert_service.generate_alerts(now)

        assert [a.id for a in alerts] == ["out-of-stock", "low-stock", "no-sales-today"]

    async def test_stalled_query_is_interrupted(self, session_maker, busy_shop, tz, now, monkeypatch):
        service = AlertService(session_maker, tz=tz, evaluator_timeout=0.2)

        async def stalled(session, now):
            await session.execute(ENDLESS_QUERY)
            return []

        monkeypatch.setattr(service, "check_credit", stalled)

        started = time.monotonic()
        alerts = await service.generate_alerts(now)
        elapsed = time.monotonic() - started

        assert [a.id for a in alerts] == ["out-of-stock", "low-stock", "no-sales-today"]
        assert elapsed < 0.2 + INTERRUPT_GRACE_SECONDS + 1.5

    async def test_interrupted_check_leaves_database_usable(self, session_maker, busy_shop, tz, now, monkeypatch):
        service = AlertService(session_maker, tz=tz, evaluator_timeout=0.1)

        async def stalled(session, now):
            await session.execute(ENDLESS_QUERY)
            return []

        monkeypatch.setattr(service, "check_stock", stalled)
        await service.generate_alerts(now)
        monkeypatch.undo()

        alerts = await AlertService(session_maker, tz=tz).generate_alerts(now)

        assert [a.id for a in alerts] == ["out-of-stock", "low-stock", "credit-outstanding", "no-sales-today"]

    async def test_slow_check_outside_database_is_abandoned(self, session_maker, busy_shop, tz, now, monkeypatch):
        service = AlertService(session_maker, tz=tz, evaluator_timeout=0.05)

        async def stuck(session, now):
            await asyncio.sleep(5)
            return []

        monkeypatch.setattr(service, "check_credit", stuck)

        started = time.monotonic()
        alerts = await service.generate_alerts(now)

        assert [a.id for a in alerts] == ["out-of-stock", "low-stock", "no-sales-today"]
        assert time.monotonic() - started < 0.05 + INTERRUPT_GRACE_SECONDS + 1.5

    async def test_explicit_zero_settings_are_kept(self, session_maker):
        assert AlertService(session_maker, evaluator_timeout=0, no_sales_hour=0).evaluator_timeout == 0
        assert AlertBadgeRefresher(session_maker, interval=0).interval == 0

    async def test_aggregator_failure_returns_empty_feed(self, alert_service, busy_shop, now, monkeypatch):
        def broken_sort(alerts):
            raise RuntimeError("sort failed")

        monkeypatch.setattr(alert_rules, "sort_alerts", broken_sort)

        assert await alert_service.generate_alerts(now) == []

    async def test_summarize_badge(self, alert_service, busy_shop, now):
        alerts = await alert_service.generate_alerts(now)

        badge = summarize_badge(alerts)

        assert badge.count == 4
        assert badge.critical == 1
        assert badge.warning == 1
        assert badge.refreshed_at is not None


@pytest.mark.asyncio
class TestAlertDismissal:
    """Dismissed alert ids persist and hide matching alerts"""

    async def test_dismiss_is_idempotent(self, db_session):
        service = AlertDismissalService(db_session)

        assert await service.dismiss("out-of-stock") is True
        assert await service.dismiss("out-of-stock") is False
        assert await service.get_dismissed_ids() == {"out-of-stock"}

    async def test_dismiss_many(self, db_session):
        service = AlertDismissalService(db_session)
        await service.dismiss("low-stock")

        added = await service.dismiss_many(["out-of-stock", "low-stock", "out-of-stock", "no-sales-today"])

        assert added == ["out-of-stock", "no-sales-today"]
        assert await service.get_dismissed_ids() == {"out-of-stock", "low-stock", "no-sales-today"}
        assert await service.dismiss_many([]) == []

    async def test_filter_visible(self, db_session, alert_service, busy_shop, now):
        dismissals = AlertDismissalService(db_session)
        await dismissals.dismiss("low-stock")

        visible = await dismissals.filter_visible(await alert_service.generate_alerts(now))

        assert [a.id for a in visible] == ["out-of-stock", "credit-outstanding", "no-sales-today"]

    async def test_undismiss_and_clear(self, db_session):
        service = AlertDismissalService(db_session)
        await service.dismiss("low-stock")
        await service.dismiss("credit-outstanding")

        assert await service.undismiss("low-stock") is True
        assert await service.undismiss("low-stock") is False
        assert await service.clear() == 1
        assert await service.get_dismissed_ids() == set()


@pytest.mark.asyncio
class TestAlertBadgeRefresher:
    """Background badge recount owned by the app lifespan"""

    async def test_refresh_once(self, session_maker, make_product):
        await make_product("Milk", 0)
        refresher = AlertBadgeRefresher(session_maker, interval=60)

        badge = await refresher.refresh_once()

        assert badge.critical == 1
        assert refresher.latest == badge

    async def test_refresh_respects_dismissals(self, session_maker, db_session, make_product):
        await make_product("Milk", 0)
        await AlertDismissalService(db_session).dismiss("out-of-stock")
        refresher = AlertBadgeRefresher(session_maker, interval=60)

        badge = await refresher.refresh_once()

        assert badge.critical == 0

    async def test_start_and_stop(self, session_maker, make_product):
        await make_product("Milk", 0)
        refresher = AlertBadgeRefresher(session_maker, interval=0.01)

        refresher.start()
        refresher.start()
        assert refresher.is_running
        for _ in range(100):
            if refresher.latest is not None:
                break
            await asyncio.sleep(0.01)
        await refresher.stop()

        assert not refresher.is_running
        assert refresher.latest is not None
        assert refresher.latest.critical == 1

    async def test_stop_without_start(self, session_maker):
        refresher = AlertBadgeRefresher(session_maker)
        await refresher.stop()
        assert not refresher.is_running
