from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from billmate.core.database import get_async_session
from billmate.services.inventory.product_service import ProductService
from billmate.services.system.setting_service import SettingService
from billmate.schemas.product_schema import (
    CategoryList, Product, ProductCreate, ProductUpdate, StockAdjustment, StockAdjustmentResponse
)

router = APIRouter()

@router.post("/", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    db: AsyncSession = Depends(get_async_session)
):
    """Add a product to the catalog"""
    service = ProductService(db)
    return await service.add_product(product_data)

@router.get("/", response_model=List[Product])
async def get_products(
    search: Optional[str] = Query(None),
    frequent: bool = Query(False),
    db: AsyncSession = Depends(get_async_session)
):
    """List products, optionally filtered by name/barcode search or frequently used"""
    service = ProductService(db)
    if search:
        return await service.search_products(search)
    if frequent:
        return await service.get_frequent_products()
    return await service.get_all_products()

@router.get("/low-stock", response_model=List[Product])
async def get_low_stock_products(
    threshold: Optional[int] = Query(None, ge=0),
    db: AsyncSession = Depends(get_async_session)
):
    """Products at or below the threshold (defaults to the shop setting)"""
    if threshold is None:
        threshold = await SettingService(db).get_low_stock_threshold()
    service = ProductService(db)
    return await service.get_low_stock_products(threshold)

@router.get("/categories", response_model=CategoryList)
async def get_categories(
    db: AsyncSession = Depends(get_async_session)
):
    service = ProductService(db)
    return CategoryList(categories=await service.get_categories())

@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    """Get product by ID"""
    service = ProductService(db)
    product = await service.get_product_by_id(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product

@router.put("/{product_id}", response_model=Product)
async def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: AsyncSession = Depends(get_async_session)
):
    service = ProductService(db)
    return await service.update_product(product_id, product_data)

@router.post("/{product_id}/adjust-stock", response_model=StockAdjustmentResponse)
async def adjust_stock(
    product_id: int,
    adjustment: StockAdjustment,
    db: AsyncSession = Depends(get_async_session)
):
    """Add or remove stock; the result never goes below zero"""
    service = ProductService(db)
    quantity = await service.adjust_stock(product_id, adjustment.adjustment)
    return StockAdjustmentResponse(product_id=product_id, stock_quantity=quantity)

@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    db: AsyncSession = Depends(get_async_session)
):
    service = ProductService(db)
    await service.delete_product(product_id)
    return {"message": "Product deleted successfully"}
