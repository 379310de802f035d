from fastapi import APIRouter
from billmate.api.v1.endpoints import alerts, customers, dashboard, expenses, products, sales, settings

api_router = APIRouter()

# Catalog and billing
api_router.include_router(products.router, prefix="/products", tags=["Products"])
api_router.include_router(sales.router, prefix="/sales", tags=["Sales"])

# Money in and out
api_router.include_router(expenses.router, prefix="/expenses", tags=["Expenses"])
api_router.include_router(customers.router, prefix="/customers", tags=["Customers"])

# Shop
api_router.include_router(settings.router, prefix="/settings", tags=["Settings"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["Dashboard"])
api_router.include_router(alerts.router, prefix="/alerts", tags=["Alerts"])
