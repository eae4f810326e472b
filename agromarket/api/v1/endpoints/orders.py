from typing import List, Optional
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session
from agromarket.api import deps
from agromarket.core.database import MAX_INTEGER
from agromarket.schemas.order import OrderCreate, OrderList, OrderStatusUpdate, OrderWithDetails
from agromarket.schemas.user import Identity
from agromarket.services import order_status, orders, reporting

router = APIRouter()


@router.post("/", response_model=OrderWithDetails, status_code=201)
def create_order(
    *,
    db: Session = Depends(deps.get_db),
    order_in: OrderCreate,
    identity: Optional[Identity] = Depends(deps.get_identity),
):
    """
    Crear una nueva orden de compra con uno o más productos.

    El precio de cada línea se copia del producto al momento de la compra y
    el stock de todos los productos se descuenta en la misma transacción.

    Args:
        `order_in`: Lista de `{product_id, quantity}`

    Returns:
        `OrderWithDetails`: Orden creada en estado `pending` con el total calculado

    Raises:
        `NotAuthenticated`: 401 sin token válido
        `NotFound`: 404 si algún producto no existe
        `InsufficientStock`: 409 si algún producto no tiene stock suficiente
    """
    return orders.place_order(db, identity, order_in.items)


@router.get("/buyer", response_model=OrderList)
def list_buyer_orders(
    db: Session = Depends(deps.get_db),
    identity: Optional[Identity] = Depends(deps.get_identity),
):
    """
    Órdenes realizadas por el usuario autenticado.
    """
    buyer_orders = orders.list_orders_for_buyer(db, identity)
    return OrderList(orders=buyer_orders, total=len(buyer_orders))


@router.get("/seller", response_model=OrderList)
def list_seller_orders(
    db: Session = Depends(deps.get_db),
    identity: Optional[Identity] = Depends(deps.get_identity),
):
    """
    Órdenes que incluyen al menos un producto del usuario autenticado.
    """
    seller_orders = orders.list_orders_for_seller(db, identity)
    return OrderList(orders=seller_orders, total=len(seller_orders))


@router.get("/transactions", response_model=List[OrderWithDetails])
def list_transactions(
    db: Session = Depends(deps.get_db),
    identity: Optional[Identity] = Depends(deps.get_identity),
):
    return reporting.list_transactions(db, identity)


@router.put("/{order_id}/status", response_model=OrderWithDetails)
def update_order_status(
    *,
    db: Session = Depends(deps.get_db),
    order_id: int = Path(..., ge=1, le=MAX_INTEGER),
    status_update: OrderStatusUpdate,
    identity: Optional[Identity] = Depends(deps.get_identity),
):
    """
    Actualizar el estado de una orden.

    Args:
        `order_id`: ID de la orden
        `status_update`: Nuevo estado

    Returns:
        `OrderWithDetails`: Orden con el estado actualizado

    Raises:
        `NotAuthenticated`: 401 sin token válido
        `NotAuthorized`: 403 si la cuenta no es `farmer`
        `NotFound`: 404 si la orden no existe
        `InvalidTransition`: 409 si el estado no es alcanzable desde el actual
    """
    return order_status.update_status(db, identity, order_id, status_update.status)
