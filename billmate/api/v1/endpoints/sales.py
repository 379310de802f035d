from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from billmate.core.database import get_async_session
from billmate.models.shared.enums import SalesPeriod
from billmate.services.sales.sales_service import SalesService
from billmate.schemas.sale_schema import (
    DateRange, RefundResponse, Sale, SaleCreate, SaleCreateResponse, SaleSummary, TodayStats, TopProduct
)

router = APIRouter()

@router.post("/", response_model=SaleCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_sale(
    sale_data: SaleCreate,
    db: AsyncSession = Depends(get_async_session)
):
    """Check out the billing cart"""
    service = SalesService(db)
    sale = await service.create_sale(sale_data.items, sale_data.payment_method, sale_data.customer_id)
    return SaleCreateResponse(sale_id=sale.id, total=sale.total, profit=sale.profit)

@router.get("/", response_model=List[SaleSummary])
async def get_sales(
    period: SalesPeriod = Query(SalesPeriod.TODAY),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: AsyncSession = Depends(get_async_session)
):
    """
    Sales history, newest first.
    Pass both start_date and end_date for a custom inclusive range.
    """
    if (start_date is None) != (end_date is None):
        raise HTTPException(status_code=400, detail="start_date and end_date must be given together")
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")

    service = SalesService(db)
    if start_date and end_date:
        return await service.get_sales(DateRange(start_date=start_date, end_date=end_date))
    return await service.get_sales(period)

@router.get("/today-stats", response_model=TodayStats)
async def get_today_stats(
    db: AsyncSession = Depends(get_async_session)
):
    service = SalesService(db)
    return await service.get_today_stats()

@router.get("/top-products", response_model=List[TopProduct])
async def get_top_selling_products(
    limit: int = Query(5, ge=1, le=100),
    db: AsyncSession = Depends(get_async_session)
):
    service = SalesService(db)
    return await service.get_top_selling_products(limit)

@router.get("/{sale_id}", response_model=Sale)
async def get_sale(
    sale_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    """Get a sale with its line items"""
    service = SalesService(db)
    sale = await service.get_sale_by_id(sale_id)
    if not sale:
        raise HTTPException(status_code=404, detail="Sale not found")
    return sale

@router.post("/{sale_id}/refund", response_model=RefundResponse)
async def refund_sale(
    sale_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    """Refund a sale and restock its items"""
    service = SalesService(db)
    await service.refund_sale(sale_id)
    return RefundResponse(sale_id=sale_id, refunded=True, message="Sale refunded successfully")
