import logging
from decimal import Decimal
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_, desc, func

from billmate.core.exceptions import NotFoundError
from billmate.models.customer import Customer
from billmate.models.sale import Sale
from billmate.schemas.customer_schema import CustomerCreate

logger = logging.getLogger(__name__)

class CustomerService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add_customer(self, customer_data: CustomerCreate) -> Customer:
        customer = Customer(
            name=customer_data.name,
            phone=customer_data.phone or "",
            balance=Decimal("0"),
        )
        self.db.add(customer)
        await self.db.commit()
        await self.db.refresh(customer)
        logger.info(f"Customer added: {customer.name} (id={customer.id})")
        return customer

    async def get_all_customers(self) -> List[Customer]:
        result = await self.db.execute(select(Customer).order_by(Customer.id))
        return result.scalars().all()

    async def get_customer_by_id(self, customer_id: int) -> Optional[Customer]:
        return await self.db.get(Customer, customer_id)

    async def update_customer_balance(self, customer_id: int, amount: Decimal) -> Decimal:
        """
        Move a customer's khata balance.
        Positive amounts record credit given, negative amounts a settlement.
        """
        customer = await self.get_customer_by_id(customer_id)
        if not customer:
            raise NotFoundError("Customer not found")

        customer.balance = Decimal(customer.balance or 0) + Decimal(amount)
        await self.db.commit()
        await self.db.refresh(customer)
        logger.info(f"Customer {customer_id} balance changed by {amount}: now {customer.balance}")
        return customer.balance

    async def get_customer_history(self, customer_id: int) -> List[Sale]:
        customer = await self.get_customer_by_id(customer_id)
        if not customer:
            raise NotFoundError("Customer not found")

        result = await self.db.execute(
            select(Sale).where(Sale.customer_id == customer_id).order_by(desc(Sale.date))
        )
        return result.scalars().all()

    async def search_customers(self, query: str) -> List[Customer]:
        pattern = f"%{query}%"
        result = await self.db.execute(
            select(Customer)
            .where(
                or_(
                    func.lower(Customer.name).like(pattern.lower()),
                    Customer.phone.like(pattern)
                )
            )
            .order_by(Customer.name)
        )
        return result.scalars().all()
