from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from billmate.core.database import get_async_session, get_session_factory
from billmate.services.alerts.alert_service import AlertService, summarize_badge
from billmate.services.alerts.dismissal_service import AlertDismissalService
from billmate.schemas.alert_schema import AlertBadge, AlertList, DismissAllResponse, DismissResponse

router = APIRouter()

def _invalidate_badge(request: Request) -> None:
    # Next badge read recomputes so a dismissal shows up immediately
    refresher = getattr(request.app.state, "badge_refresher", None)
    if refresher is not None:
        refresher.latest = None

@router.get("/", response_model=AlertList)
async def get_alerts(
    include_dismissed: bool = Query(False),
    db: AsyncSession = Depends(get_async_session),
    session_factory: async_sessionmaker = Depends(get_session_factory)
):
    """Smart alerts, most urgent first. Dismissed alerts are hidden by default."""
    alerts = await AlertService(session_factory).generate_alerts()
    if not include_dismissed:
        alerts = await AlertDismissalService(db).filter_visible(alerts)
    return AlertList(count=len(alerts), alerts=alerts)

@router.get("/badge", response_model=AlertBadge)
async def get_alert_badge(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    session_factory: async_sessionmaker = Depends(get_session_factory)
):
    """Badge counts from the periodic refresher, computed now if it has not run yet"""
    refresher = getattr(request.app.state, "badge_refresher", None)
    if refresher is not None and refresher.latest is not None:
        return refresher.latest

    alerts = await AlertService(session_factory).generate_alerts()
    visible = await AlertDismissalService(db).filter_visible(alerts)
    return summarize_badge(visible)

@router.post("/dismiss-all", response_model=DismissAllResponse)
async def dismiss_all_alerts(
    request: Request,
    db: AsyncSession = Depends(get_async_session),
    session_factory: async_sessionmaker = Depends(get_session_factory)
):
    """Dismiss every alert that is currently visible"""
    service = AlertDismissalService(db)
    visible = await service.filter_visible(await AlertService(session_factory).generate_alerts())
    dismissed = await service.dismiss_many([alert.id for alert in visible])
    _invalidate_badge(request)
    return DismissAllResponse(alert_ids=dismissed, count=len(dismissed))

@router.post("/{alert_id}/dismiss", response_model=DismissResponse)
async def dismiss_alert(
    alert_id: str,
    request: Request,
    db: AsyncSession = Depends(get_async_session)
):
    await AlertDismissalService(db).dismiss(alert_id)
    _invalidate_badge(request)
    return DismissResponse(alert_id=alert_id, dismissed=True)

@router.delete("/{alert_id}/dismiss", response_model=DismissResponse)
async def undismiss_alert(
    alert_id: str,
    request: Request,
    db: AsyncSession = Depends(get_async_session)
):
    """Bring a dismissed alert back"""
    await AlertDismissalService(db).undismiss(alert_id)
    _invalidate_badge(request)
    return DismissResponse(alert_id=alert_id, dismissed=False)

@router.delete("/dismissed", status_code=status.HTTP_204_NO_CONTENT)
async def clear_dismissed_alerts(
    request: Request,
    db: AsyncSession = Depends(get_async_session)
):
    await AlertDismissalService(db).clear()
    _invalidate_badge(request)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
