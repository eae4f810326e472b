"""
Order placement.

A basket is placed in a single database transaction: every stock decrement
and the order insert commit together, or the transaction is rolled back and
nothing changes.
"""
from typing import Iterable, List, Optional, Tuple, Union
import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from agromarket import crud
from agromarket.core.errors import (
    InsufficientStock,
    InternalFailure,
    MarketplaceError,
    NotAuthenticated,
    NotFound,
    ValidationError,
)
from agromarket.core.database import MAX_INTEGER
from agromarket.core.guard import require_authentication
from agromarket.models.order import Order, OrderItem, OrderStatus
from agromarket.schemas.order import OrderItemCreate
from agromarket.schemas.user import Identity

logger = logging.getLogger(__name__)

BasketItem = Union[OrderItemCreate, Tuple[int, int]]


def _normalize_basket(items: Optional[Iterable[BasketItem]]) -> List[Tuple[int, int]]:
    basket = []
    for item in items or ():
        if isinstance(item, OrderItemCreate):
            basket.append((item.product_id, item.quantity))
        else:
            product_id, quantity = item
            basket.append((product_id, quantity))
    if not basket:
        raise ValidationError("An order must contain at least one product")
    for product_id, quantity in basket:
        if not 0 < quantity <= MAX_INTEGER:
            raise ValidationError(
                f"Quantity for product {product_id} must be between 1 and {MAX_INTEGER}",
                product_id=product_id,
                quantity=quantity,
            )
    return basket


def place_order(
    db: Session, identity: Optional[Identity], items: Optional[Iterable[BasketItem]]
) -> Order:
    """
    Valida la canasta, descuenta stock y crea la orden en estado `pending`.

    Args:
        db: Sesión de base de datos
        identity: Identidad del comprador (None si es anónimo)
        items: Pares (product_id, quantity) o `OrderItemCreate`, en orden

    Returns:
        La orden persistida con sus líneas y su total

    Raises:
        NotAuthenticated: sin identidad, o el comprador ya no existe
        ValidationError: canasta vacía o cantidad fuera de rango
        NotFound: producto inexistente
        InsufficientStock: la cantidad pedida supera el stock disponible
        InternalFailure: fallo de almacenamiento; la transacción se revierte
    """
    buyer = require_authentication(identity)
    basket = _normalize_basket(items)

    try:
        if crud.user.get(db, id=buyer.id) is None:
            raise NotAuthenticated("Account no longer exists")

        lines = []
        for product_id, quantity in basket:
            db_product = None
            if 0 < product_id <= MAX_INTEGER:
                db_product = crud.product.get(db, id=product_id)
            if db_product is None:
                raise NotFound("product", product_id)
            if db_product.quantity < quantity:
                raise InsufficientStock(product_id, quantity, db_product.quantity, name=db_product.name)
            lines.append((db_product, quantity, db_product.price))

        # Row locks are taken in product id order so concurrent baskets cannot deadlock
        for db_product, quantity, _ in sorted(lines, key=lambda line: line[0].id):
            if not crud.product.decrement_stock(db, db_obj=db_product, quantity=quantity):
                # Another order took the stock between the check and the decrement
                raise InsufficientStock(
                    db_product.id, quantity, db_product.quantity, name=db_product.name
                )

        order_items = [
            OrderItem(
                product_id=db_product.id,
                product_name=db_product.name,
                quantity=quantity,
                price=price,
            )
            for db_product, quantity, price in lines
        ]
        total = sum(price * quantity for _, quantity, price in lines)

        db_order = Order(
            buyer_id=buyer.id,
            items=order_items,
            total=total,
            status=OrderStatus.PENDING,
        )
        db.add(db_order)
        db.commit()
    except MarketplaceError as e:
        db.rollback()
        logger.warning(f"Order rejected for buyer {buyer.id}: {e.message}")
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure placing order for buyer {buyer.id}: {e}", exc_info=True)
        raise InternalFailure() from e

    db.refresh(db_order)
    logger.info(f"Order {db_order.id} placed by buyer {buyer.id}: {len(order_items)} items, total {total}")
    return db_order


def list_orders_for_buyer(db: Session, identity: Optional[Identity]) -> List[Order]:
    buyer = require_authentication(identity)
    return crud.order.get_by_buyer(db, buyer_id=buyer.id)


def list_orders_for_seller(db: Session, identity: Optional[Identity]) -> List[Order]:
    """Orders containing at least one product listed by the caller."""
    seller = require_authentication(identity)
    return crud.order.get_by_seller(db, seller_id=seller.id)
