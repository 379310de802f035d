from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from billmate.core.database import get_async_session
from billmate.services.customer.customer_service import CustomerService
from billmate.schemas.customer_schema import BalanceResponse, BalanceUpdate, Customer, CustomerCreate
from billmate.schemas.sale_schema import SaleSummary

router = APIRouter()

@router.post("/", response_model=Customer, status_code=status.HTTP_201_CREATED)
async def add_customer(
    customer_data: CustomerCreate,
    db: AsyncSession = Depends(get_async_session)
):
    service = CustomerService(db)
    return await service.add_customer(customer_data)

@router.get("/", response_model=List[Customer])
async def get_customers(
    search: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_async_session)
):
    """List customers, optionally searching by name or phone"""
    service = CustomerService(db)
    if search:
        return await service.search_customers(search)
    return await service.get_all_customers()

@router.get("/{customer_id}", response_model=Customer)
async def get_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    service = CustomerService(db)
    customer = await service.get_customer_by_id(customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return customer

@router.post("/{customer_id}/balance", response_model=BalanceResponse)
async def update_customer_balance(
    customer_id: int,
    balance_data: BalanceUpdate,
    db: AsyncSession = Depends(get_async_session)
):
    """Record credit given (positive) or a settlement (negative)"""
    service = CustomerService(db)
    balance = await service.update_customer_balance(customer_id, balance_data.amount)
    return BalanceResponse(customer_id=customer_id, balance=balance)

@router.get("/{customer_id}/history", response_model=List[SaleSummary])
async def get_customer_history(
    customer_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    service = CustomerService(db)
    return await service.get_customer_history(customer_id)
