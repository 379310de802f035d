import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional, Union
from zoneinfo import ZoneInfo
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, desc, func
from sqlalchemy.orm import selectinload

from billmate.core.config import settings
from billmate.core.exceptions import AlreadyRefundedError, NotFoundError, ValidationError
from billmate.models.customer import Customer
from billmate.models.product import Product
from billmate.models.sale import Sale, SaleItem
from billmate.models.shared.enums import PaymentMethod, SalesPeriod
from billmate.schemas.sale_schema import CartItem, DateRange, TodayStats, TopProduct
from billmate.utils.date_time import day_bounds, local_now, start_of_day

logger = logging.getLogger(__name__)

class SalesService:
    def __init__(self, db: AsyncSession, tz: Optional[ZoneInfo] = None):
        self.db = db
        self.tz = tz or settings.tzinfo

    async def create_sale(
        self,
        cart: List[CartItem],
        payment_method: PaymentMethod,
        customer_id: Optional[int] = None
    ) -> Sale:
        """
        Record a sale from the billing cart in a single transaction:
        - line items priced from the catalog (or the cart override)
        - product stock reduced, never below zero
        - credit sales added to the customer's khata balance
        """
        if not cart:
            raise ValidationError("Cart is empty")

        payment_method = PaymentMethod(payment_method)
        customer = None
        if customer_id is not None:
            customer = await self.db.get(Customer, customer_id)
            if not customer:
                raise NotFoundError("Customer not found")
        if payment_method == PaymentMethod.CREDIT and not customer:
            raise ValidationError("Credit sales need a customer")

        try:
            sale_items = []
            total = Decimal("0")
            profit = Decimal("0")
            item_count = 0

            for cart_item in cart:
                product = await self.db.get(Product, cart_item.product_id)
                if not product:
                    raise NotFoundError(f"Product {cart_item.product_id} not found")

                selling_price = Decimal(cart_item.selling_price if cart_item.selling_price is not None else product.selling_price)
                cost_price = Decimal(product.cost_price or 0)
                subtotal = selling_price * cart_item.quantity

                sale_items.append(SaleItem(
                    product_id=product.id,
                    product_name=product.name,
                    quantity=cart_item.quantity,
                    selling_price=selling_price,
                    cost_price=cost_price,
                    subtotal=subtotal,
                ))
                total += subtotal
                profit += (selling_price - cost_price) * cart_item.quantity
                item_count += cart_item.quantity

                # Reduce stock
                product.stock_quantity = max(0, (product.stock_quantity or 0) - cart_item.quantity)

            sale = Sale(
                total=total,
                profit=profit,
                payment_method=payment_method.value,
                refunded=False,
                customer_id=customer.id if customer else None,
                item_count=item_count,
                items=sale_items,
            )
            self.db.add(sale)

            # Credit sale goes on the customer's khata
            if payment_method == PaymentMethod.CREDIT:
                customer.balance = Decimal(customer.balance or 0) + total

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Sale {sale.id} recorded: total={total} via {payment_method.value}")
        return await self.get_sale_by_id(sale.id)

    async def get_sale_by_id(self, sale_id: int) -> Optional[Sale]:
        result = await self.db.execute(
            select(Sale)
            .options(selectinload(Sale.items))
            .where(Sale.id == sale_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_all_sales(self) -> List[Sale]:
        """Every sale, refunded ones included"""
        result = await self.db.execute(select(Sale).order_by(Sale.date, Sale.id))
        return result.scalars().all()

    async def get_sales(
        self,
        period: Union[SalesPeriod, DateRange] = SalesPeriod.TODAY,
        now: Optional[datetime] = None
    ) -> List[Sale]:
        """Sales newest first for a named period or an inclusive date range"""
        query = select(Sale).order_by(desc(Sale.date))
        today = local_now(self.tz, now).date()

        if isinstance(period, DateRange):
            query = query.where(and_(
                Sale.date >= start_of_day(period.start_date, self.tz),
                Sale.date < start_of_day(period.end_date + timedelta(days=1), self.tz)
            ))
        elif period == SalesPeriod.TODAY:
            query = query.where(Sale.date >= start_of_day(today, self.tz))
        elif period == SalesPeriod.WEEK:
            query = query.where(Sale.date >= start_of_day(today - timedelta(days=7), self.tz))
        elif period == SalesPeriod.MONTH:
            query = query.where(Sale.date >= start_of_day(today.replace(day=1), self.tz))

        result = await self.db.execute(query)
        return result.scalars().all()

    async def refund_sale(self, sale_id: int) -> Sale:
        """Mark a sale refunded and put its items back on the shelf"""
        sale = await self.get_sale_by_id(sale_id)
        if not sale:
            raise NotFoundError("Sale not found")
        if sale.refunded:
            raise AlreadyRefundedError()

        try:
            sale.refunded = True
            for item in sale.items:
                if item.product_id is None:
                    continue
                product = await self.db.get(Product, item.product_id)
                if product:
                    product.stock_quantity = (product.stock_quantity or 0) + item.quantity
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Sale {sale_id} refunded")
        return sale

    async def get_today_stats(self, now: Optional[datetime] = None) -> TodayStats:
        start, _ = day_bounds(self.tz, now)
        result = await self.db.execute(
            select(
                func.coalesce(func.sum(Sale.total), 0),
                func.coalesce(func.sum(Sale.profit), 0),
                func.count(Sale.id)
            ).where(and_(Sale.date >= start, Sale.refunded == False))
        )
        revenue, profit, count = result.one()
        return TodayStats(
            total_revenue=Decimal(str(revenue)),
            total_profit=Decimal(str(profit)),
            transaction_count=count
        )

    async def get_top_selling_products(self, limit: int = 5) -> List[TopProduct]:
        quantity = func.sum(SaleItem.quantity).label("quantity")
        result = await self.db.execute(
            select(SaleItem.product_name, quantity)
            .join(Sale, Sale.id == SaleItem.sale_id)
            .where(Sale.refunded == False)
            .group_by(SaleItem.product_name)
            .order_by(desc(quantity), SaleItem.product_name)
            .limit(limit)
        )
        return [TopProduct(name=name, quantity=int(qty)) for name, qty in result.all()]
