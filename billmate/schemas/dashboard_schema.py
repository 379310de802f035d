from typing import List
from decimal import Decimal
from pydantic import BaseModel
from billmate.schemas.product_schema import Product
from billmate.schemas.sale_schema import TodayStats, TopProduct

class DashboardResponse(BaseModel):
    currency: str
    today: TodayStats
    today_expenses: Decimal
    net_today: Decimal
    low_stock_threshold: int
    low_stock_products: List[Product]
    top_products: List[TopProduct]
