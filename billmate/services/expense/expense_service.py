import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import List, Optional
from zoneinfo import ZoneInfo
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_, desc, func

from billmate.core.config import settings
from billmate.core.exceptions import NotFoundError
from billmate.models.expense import Expense
from billmate.schemas.expense_schema import ExpenseCreate
from billmate.utils.date_time import day_bounds, start_of_day

logger = logging.getLogger(__name__)

class ExpenseService:
    def __init__(self, db: AsyncSession, tz: Optional[ZoneInfo] = None):
        self.db = db
        self.tz = tz or settings.tzinfo

    async def add_expense(self, expense_data: ExpenseCreate) -> Expense:
        expense = Expense(
            type=expense_data.type,
            amount=expense_data.amount,
            note=expense_data.note or "",
        )
        self.db.add(expense)
        await self.db.commit()
        await self.db.refresh(expense)
        logger.info(f"Expense added: {expense.type} {expense.amount}")
        return expense

    async def delete_expense(self, expense_id: int) -> bool:
        expense = await self.db.get(Expense, expense_id)
        if not expense:
            raise NotFoundError("Expense not found")

        await self.db.delete(expense)
        await self.db.commit()
        logger.info(f"Expense deleted: id={expense_id}")
        return True

    async def get_all_expenses(self) -> List[Expense]:
        result = await self.db.execute(select(Expense).order_by(Expense.date, Expense.id))
        return result.scalars().all()

    async def get_today_expenses(self, now: Optional[datetime] = None) -> List[Expense]:
        """Expenses dated within today's local calendar day"""
        start, end = day_bounds(self.tz, now)
        result = await self.db.execute(
            select(Expense)
            .where(and_(Expense.date >= start, Expense.date < end))
            .order_by(desc(Expense.date))
        )
        return result.scalars().all()

    async def get_today_expense_total(self, now: Optional[datetime] = None) -> Decimal:
        start, end = day_bounds(self.tz, now)
        result = await self.db.execute(
            select(func.coalesce(func.sum(Expense.amount), 0))
            .where(and_(Expense.date >= start, Expense.date < end))
        )
        return Decimal(str(result.scalar()))

    async def get_expenses_by_date(self, start_date: date, end_date: date) -> List[Expense]:
        """Expenses between two calendar days, both inclusive, newest first"""
        result = await self.db.execute(
            select(Expense)
            .where(and_(
                Expense.date >= start_of_day(start_date, self.tz),
                Expense.date < start_of_day(end_date + timedelta(days=1), self.tz)
            ))
            .order_by(desc(Expense.date))
        )
        return result.scalars().all()
