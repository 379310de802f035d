from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from billmate.core.database import get_async_session
from billmate.services.expense.expense_service import ExpenseService
from billmate.schemas.expense_schema import Expense, ExpenseCreate, ExpenseTotal

router = APIRouter()

@router.post("/", response_model=Expense, status_code=status.HTTP_201_CREATED)
async def add_expense(
    expense_data: ExpenseCreate,
    db: AsyncSession = Depends(get_async_session)
):
    """Record an expense dated now"""
    service = ExpenseService(db)
    return await service.add_expense(expense_data)

@router.get("/", response_model=List[Expense])
async def get_expenses(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_async_session)
):
    """Today's expenses, or an inclusive date range when both dates are given"""
    service = ExpenseService(db)
    if start_date and end_date:
        if start_date > end_date:
            raise HTTPException(status_code=400, detail="start_date must not be after end_date")
        return await service.get_expenses_by_date(start_date, end_date)
    return await service.get_today_expenses()

@router.get("/today-total", response_model=ExpenseTotal)
async def get_today_expense_total(
    db: AsyncSession = Depends(get_async_session)
):
    service = ExpenseService(db)
    return ExpenseTotal(total=await service.get_today_expense_total())

@router.delete("/{expense_id}")
async def delete_expense(
    expense_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    service = ExpenseService(db)
    await service.delete_expense(expense_id)
    return {"message": "Expense deleted successfully"}
