from typing import Dict, FrozenSet, Optional
import logging
from sqlalchemy.orm import Session
from agromarket import crud
from agromarket.core.errors import InvalidTransition, NotFound, ValidationError
from agromarket.core.guard import require_role
from agromarket.models.order import Order, OrderStatus
from agromarket.models.user import Role
from agromarket.schemas.user import Identity

logger = logging.getLogger(__name__)

TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.SHIPPED, OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.COMPLETED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(status for status, targets in TRANSITIONS.items() if not targets)


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    return new in TRANSITIONS[current]


def update_status(
    db: Session, identity: Optional[Identity], order_id: int, new_status: OrderStatus
) -> Order:
    """
    Cambia el estado de una orden respetando la máquina de estados.

    Cualquier cuenta `farmer` puede cambiar cualquier orden, no solo las que
    contienen sus productos.

    Raises:
        NotAuthenticated: sin identidad
        NotAuthorized: la identidad no es `farmer`
        NotFound: la orden no existe
        InvalidTransition: el nuevo estado no es alcanzable desde el actual
    """
    farmer = require_role(identity, Role.FARMER)
    try:
        new_status = OrderStatus(new_status)
    except ValueError:
        raise ValidationError(f"Unknown order status '{new_status}'")

    db_order = crud.order.get(db, id=order_id)
    if db_order is None:
        raise NotFound("order", order_id)

    current = OrderStatus(db_order.status)
    if not can_transition(current, new_status):
        raise InvalidTransition(current.value, new_status.value)

    if not crud.order.compare_and_set_status(db, db_obj=db_order, expected=current, status=new_status):
        # Status moved under us; report against the status that won
        raise InvalidTransition(OrderStatus(db_order.status).value, new_status.value)

    logger.info(f"Order {order_id} moved {current.value} -> {new_status.value} by farmer {farmer.id}")
    return db_order
