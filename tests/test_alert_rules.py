import pytest
from datetime import datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

from billmate.models.shared.enums import AlertSeverity, AlertType
from billmate.schemas.alert_schema import Alert
from billmate.services.alerts import alert_rules
from tests.conftest import NOW, SHOP_TZ


def product(name, stock):
    return SimpleNamespace(name=name, stock_quantity=stock)


def customer(name, balance):
    return SimpleNamespace(name=name, balance=Decimal(str(balance)))


def sale(total, date, refunded=False):
    return SimpleNamespace(total=Decimal(str(total)), date=date, refunded=refunded)


def expense(amount, date):
    return SimpleNamespace(amount=Decimal(str(amount)), date=date)


YESTERDAY = NOW - timedelta(days=1)


class TestStockAlerts:
    """Out-of-stock and low-stock rules"""

    def test_out_of_stock_and_low_stock(self):
        products = [product("A", 0), product("B", 2), product("C", 10)]

        alerts = alert_rules.stock_alerts(products, threshold=5)

        assert [a.id for a in alerts] == ["out-of-stock", "low-stock"]
        out_of_stock, low_stock = alerts
        assert out_of_stock.severity == AlertSeverity.CRITICAL
        assert out_of_stock.message == "1 product is completely out of stock: A"
        assert low_stock.severity == AlertSeverity.WARNING
        assert low_stock.message == "1 product is running low: B (2)"
        assert "C" not in out_of_stock.message + low_stock.message

    def test_threshold_is_inclusive(self):
        alerts = alert_rules.stock_alerts([product("Soap", 5)], threshold=5)
        assert [a.id for a in alerts] == ["low-stock"]

    def test_names_first_three_out_of_stock_products(self):
        products = [product(name, 0) for name in ("A", "B", "C", "D", "E")]

        alerts = alert_rules.stock_alerts(products, threshold=5)

        assert alerts[0].message == "5 products are completely out of stock: A, B, C +2 more"

    def test_low_stock_lists_at_most_three(self):
        products = [product("A", 1), product("B", 2), product("C", 3), product("D", 4)]

        alerts = alert_rules.stock_alerts(products, threshold=5)

        assert alerts[0].message == "4 products are running low: A (1), B (2), C (3)"

    def test_healthy_stock_yields_nothing(self):
        assert alert_rules.stock_alerts([product("A", 20)], threshold=5) == []
        assert alert_rules.stock_alerts([], threshold=5) == []


class TestCreditAlerts:
    """Outstanding khata credit"""

    def test_summarizes_debtors(self):
        customers = [customer("X", 100), customer("Y", 0), customer("Z", 50)]

        alerts = alert_rules.credit_alerts(customers, "₹")

        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.id == "credit-outstanding"
        assert alert.type == AlertType.CREDIT
        assert alert.title == "₹150 Outstanding Credit"
        assert alert.message == "2 customers have pending payments. Highest: X (₹100)"
        assert alert.severity == AlertSeverity.INFO

    def test_more_than_three_debtors_is_a_warning(self):
        customers = [customer(name, 10) for name in ("A", "B", "C", "D")]

        alerts = alert_rules.credit_alerts(customers, "₹")

        assert alerts[0].severity == AlertSeverity.WARNING
        # Ties keep listing order
        assert "Highest: A (₹10)" in alerts[0].message

    def test_single_debtor_wording(self):
        alerts = alert_rules.credit_alerts([customer("Ravi", 250)], "$")
        assert alerts[0].message == "1 customer has pending payments. Highest: Ravi ($250)"

    def test_advance_and_zero_balances_are_ignored(self):
        assert alert_rules.credit_alerts([customer("X", 0), customer("Y", -40)], "₹") == []


class TestPerformanceAlerts:
    """Today against yesterday"""

    def test_revenue_up(self):
        sales = [sale(1000, YESTERDAY), sale(1300, NOW - timedelta(hours=1))]

        alerts = alert_rules.performance_alerts(sales, "₹", NOW, SHOP_TZ)

        assert len(alerts) == 1
        assert alerts[0].id == "performance-up"
        assert alerts[0].severity == AlertSeverity.SUCCESS
        assert alerts[0].message == "Today's revenue ₹1300 is 30% higher than yesterday (₹1000)"

    def test_revenue_down(self):
        sales = [sale(1000, YESTERDAY), sale(700, NOW - timedelta(hours=1))]

        alerts = alert_rules.performance_alerts(sales, "₹", NOW, SHOP_TZ)

        assert len(alerts) == 1
        assert alerts[0].id == "performance-down"
        assert alerts[0].severity == AlertSeverity.INFO
        assert alerts[0].message == "Revenue is 30% lower than yesterday. Yesterday: ₹1000, Today: ₹700"

    def test_small_dip_is_quiet(self):
        sales = [sale(1000, YESTERDAY), sale(900, NOW - timedelta(hours=1))]
        assert alert_rules.performance_alerts(sales, "₹", NOW, SHOP_TZ) == []

    def test_no_sales_after_opening_hour(self):
        now = NOW.replace(hour=11, minute=0)
        sales = [sale(1000, YESTERDAY)]

        alerts = alert_rules.performance_alerts(sales, "₹", now, SHOP_TZ)

        assert [a.id for a in alerts] == ["no-sales-today"]
        assert alerts[0].severity == AlertSeverity.INFO

    def test_no_sales_before_opening_hour_is_quiet(self):
        now = NOW.replace(hour=9, minute=59)
        assert alert_rules.performance_alerts([sale(1000, YESTERDAY)], "₹", now, SHOP_TZ) == []

    def test_no_comparison_without_yesterday(self):
        sales = [sale(500, NOW - timedelta(hours=1))]
        assert alert_rules.performance_alerts(sales, "₹", NOW, SHOP_TZ) == []

    def test_refunded_sales_do_not_count(self):
        sales = [
            sale(1000, YESTERDAY),
            sale(5000, NOW - timedelta(hours=1), refunded=True),
        ]

        alerts = alert_rules.performance_alerts(sales, "₹", NOW, SHOP_TZ)

        assert [a.id for a in alerts] == ["no-sales-today"]

    def test_days_follow_the_shop_timezone(self):
        # 00:30 local on the 15th is still the 14th in UTC
        just_after_midnight = datetime(2024, 3, 15, 0, 30, tzinfo=SHOP_TZ)
        sales = [sale(1000, YESTERDAY), sale(1500, just_after_midnight)]

        alerts = alert_rules.performance_alerts(sales, "₹", NOW, SHOP_TZ)

        assert alerts[0].id == "performance-up"
        assert "50% higher" in alerts[0].message

    def test_naive_now_is_read_as_local(self):
        naive_now = NOW.replace(tzinfo=None)
        sales = [sale(1000, YESTERDAY), sale(1300, NOW - timedelta(hours=1))]

        alerts = alert_rules.performance_alerts(sales, "₹", naive_now, SHOP_TZ)

        assert alerts[0].id == "performance-up"


class TestExpenseAlerts:
    """Spending spikes against the trailing week"""

    def week_of_spending(self):
        return [expense(700, NOW - timedelta(days=3))]

    def test_spike_fires(self):
        expenses = self.week_of_spending() + [expense(160, NOW - timedelta(hours=2))]

        alerts = alert_rules.expense_alerts(expenses, "₹", NOW, SHOP_TZ)

        assert len(alerts) == 1
        assert alerts[0].id == "expense-high"
        assert alerts[0].severity == AlertSeverity.WARNING
        assert alerts[0].message == "₹160 spent today — 60% above your daily average of ₹100"

    def test_under_one_and_a_half_times_average_is_quiet(self):
        expenses = self.week_of_spending() + [expense(140, NOW - timedelta(hours=2))]
        assert alert_rules.expense_alerts(expenses, "₹", NOW, SHOP_TZ) == []

    def test_exactly_one_and_a_half_times_is_quiet(self):
        expenses = self.week_of_spending() + [expense(150, NOW - timedelta(hours=2))]
        assert alert_rules.expense_alerts(expenses, "₹", NOW, SHOP_TZ) == []

    def test_no_history_is_quiet(self):
        assert alert_rules.expense_alerts([expense(500, NOW)], "₹", NOW, SHOP_TZ) == []

    def test_nothing_spent_today_is_quiet(self):
        assert alert_rules.expense_alerts(self.week_of_spending(), "₹", NOW, SHOP_TZ) == []

    def test_older_than_a_week_is_ignored(self):
        expenses = [expense(700, NOW - timedelta(days=8)), expense(160, NOW)]
        assert alert_rules.expense_alerts(expenses, "₹", NOW, SHOP_TZ) == []


class TestMilestoneAlerts:
    """Transaction and revenue ladders"""

    def sales(self, count, total=1):
        return [sale(total, NOW) for _ in range(count)]

    @pytest.mark.parametrize("count,fires", [
        (999, False),
        (1000, True),
        (1004, True),
        (1005, False),
        (1006, False),
    ])
    def test_transaction_window(self, count, fires):
        ids = [a.id for a in alert_rules.milestone_alerts(self.sales(count), "₹")]
        assert ("milestone-tx-1000" in ids) is fires

    def test_transaction_milestone_text(self):
        alerts = alert_rules.milestone_alerts(self.sales(25), "₹")

        assert len(alerts) == 1
        assert alerts[0].title == "25 Sales Milestone!"
        assert alerts[0].message == "Congratulations! You've completed 25+ transactions on BillMate!"
        assert alerts[0].severity == AlertSeverity.SUCCESS

    def test_refunded_sales_are_not_counted(self):
        sales = self.sales(9) + [sale(1, NOW, refunded=True)]
        assert alert_rules.milestone_alerts(sales, "₹") == []

    def test_revenue_milestone_in_lakhs(self):
        alerts = alert_rules.milestone_alerts([sale(105000, NOW)], "₹")

        assert [a.id for a in alerts] == ["milestone-rev-100000"]
        assert alerts[0].title == "₹1L Revenue Crossed!"
        assert alerts[0].message == "Your total revenue has crossed ₹1L. Your business is growing!"

    def test_revenue_milestone_in_thousands(self):
        alerts = alert_rules.milestone_alerts([sale(50000, NOW)], "₹")
        assert alerts[0].title == "₹50K Revenue Crossed!"

    def test_revenue_window_is_exclusive(self):
        assert alert_rules.milestone_alerts([sale(110000, NOW)], "₹") == []

    def test_both_ladders_can_fire(self):
        alerts = alert_rules.milestone_alerts(self.sales(10, total=1000), "₹")
        assert [a.id for a in alerts] == ["milestone-tx-10", "milestone-rev-10000"]

    @pytest.mark.parametrize("amount,label", [
        (10000, "10K"),
        (50000, "50K"),
        (100000, "1L"),
        (500000, "5L"),
        (1000000, "10L"),
    ])
    def test_format_milestone_label(self, amount, label):
        assert alert_rules.format_milestone_label(amount) == label


class TestSortAlerts:

    def alert(self, id, severity):
        return Alert(id=id, type=AlertType.STOCK, icon="", title=id, message=id, severity=severity)

    def test_most_urgent_first_and_stable(self):
        alerts = [
            self.alert("s1", AlertSeverity.SUCCESS),
            self.alert("i1", AlertSeverity.INFO),
            self.alert("c1", AlertSeverity.CRITICAL),
            self.alert("i2", AlertSeverity.INFO),
            self.alert("w1", AlertSeverity.WARNING),
        ]

        ordered = alert_rules.sort_alerts(alerts)

        assert [a.id for a in ordered] == ["c1", "w1", "i1", "i2", "s1"]
