from billmate.models.product import Product
from billmate.models.customer import Customer
from billmate.models.sale import Sale, SaleItem
from billmate.models.expense import Expense
from billmate.models.setting import Setting
from billmate.models.dismissed_alert import DismissedAlert


__all__ = [
    "Product",
    "Customer",
    "Sale",
    "SaleItem",
    "Expense",
    "Setting",
    "DismissedAlert",
]
