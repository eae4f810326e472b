from typing import List, Optional
from sqlalchemy.orm import Session
from agromarket import crud
from agromarket.core.guard import require_authentication, require_role
from agromarket.models.order import Order, OrderStatus
from agromarket.models.user import Role
from agromarket.schemas.order import DashboardStats
from agromarket.schemas.user import Identity

TRANSACTION_STATUSES = (OrderStatus.COMPLETED, OrderStatus.DELIVERED)


def get_dashboard_stats(
    db: Session, identity: Optional[Identity], *, recent_limit: int = 5
) -> DashboardStats:
    """
    Read-only aggregate over the current store state.

    Counts and revenue only consider completed orders; active listings is the
    number of products in the catalog.
    """
    require_authentication(identity)
    return DashboardStats(
        total_orders=crud.order.count_by_status(db, status=OrderStatus.COMPLETED),
        total_revenue=float(crud.order.revenue_by_status(db, status=OrderStatus.COMPLETED)),
        active_listings=crud.product.count(db),
        recent_transactions=crud.order.get_by_status(db, status=OrderStatus.COMPLETED, limit=recent_limit),
    )


def list_transactions(db: Session, identity: Optional[Identity]) -> List[Order]:
    """Completed or delivered orders that include one of the farmer's products."""
    farmer = require_role(identity, Role.FARMER)
    return crud.order.get_by_seller(db, seller_id=farmer.id, statuses=TRANSACTION_STATUSES)
