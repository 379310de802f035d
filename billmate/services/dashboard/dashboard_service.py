import logging
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo
from sqlalchemy.ext.asyncio import AsyncSession

from billmate.core.config import settings
from billmate.schemas.dashboard_schema import DashboardResponse
from billmate.schemas.product_schema import Product
from billmate.services.expense.expense_service import ExpenseService
from billmate.services.inventory.product_service import ProductService
from billmate.services.sales.sales_service import SalesService
from billmate.services.system.setting_service import SettingService

logger = logging.getLogger(__name__)

class DashboardService:
    def __init__(self, session: AsyncSession, tz: Optional[ZoneInfo] = None):
        self.session = session
        self.tz = tz or settings.tzinfo

    async def get_dashboard_data(self, now: Optional[datetime] = None, top_limit: int = 5) -> DashboardResponse:
        """Get today's figures for the home screen"""
        try:
            setting_service = SettingService(self.session)
            currency = await setting_service.get_currency()
            threshold = await setting_service.get_low_stock_threshold()

            sales_service = SalesService(self.session, self.tz)
            today = await sales_service.get_today_stats(now)
            today_expenses = await ExpenseService(self.session, self.tz).get_today_expense_total(now)

            low_stock = await ProductService(self.session).get_low_stock_products(threshold)
            top_products = await sales_service.get_top_selling_products(top_limit)

            return DashboardResponse(
                currency=currency,
                today=today,
                today_expenses=today_expenses,
                net_today=today.total_profit - today_expenses,
                low_stock_threshold=threshold,
                low_stock_products=[Product.model_validate(p) for p in low_stock],
                top_products=top_products,
            )

        except Exception as e:
            logger.error(f"Error getting dashboard data: {str(e)}")
            raise
