import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from billmate.core.database import get_async_session
from billmate.services.dashboard.dashboard_service import DashboardService
from billmate.schemas.dashboard_schema import DashboardResponse

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/", response_model=DashboardResponse)
async def get_dashboard_data(
    session: AsyncSession = Depends(get_async_session)
):
    """
    Get home screen data including:
    - Today's revenue, profit and transaction count
    - Today's expenses and net
    - Low stock products for the configured threshold
    - Top selling products
    """
    try:
        dashboard_service = DashboardService(session)
        return await dashboard_service.get_dashboard_data()

    except Exception as e:
        logger.error(f"Error retrieving dashboard data: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve dashboard data"
        )
