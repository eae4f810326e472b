from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from agromarket.api import deps
from agromarket.core.config import Settings
from agromarket.schemas.order import DashboardStats
from agromarket.schemas.user import Identity
from agromarket.services import reporting

router = APIRouter()


@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(
    db: Session = Depends(deps.get_db),
    settings: Settings = Depends(deps.get_settings),
    identity: Optional[Identity] = Depends(deps.get_identity),
):
    """
    Totales de órdenes completadas, ingresos, productos publicados y las
    transacciones completadas más recientes.
    """
    return reporting.get_dashboard_stats(
        db, identity, recent_limit=settings.RECENT_TRANSACTIONS_LIMIT
    )
