from typing import List, Sequence
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, selectinload
from agromarket.crud.base import CRUDBase
from agromarket.models.order import Order, OrderItem, OrderStatus
from agromarket.models.product import Product
from agromarket.schemas.order import OrderCreate, OrderStatusUpdate


def _with_details(query):
    return query.options(
        selectinload(Order.buyer),
        selectinload(Order.items).selectinload(OrderItem.product),
    )


class CRUDOrder(CRUDBase[Order, OrderCreate, OrderStatusUpdate]):
    def get_by_buyer(self, db: Session, *, buyer_id: int) -> List[Order]:
        return (
            _with_details(db.query(Order))
            .filter(Order.buyer_id == buyer_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .all()
        )

    def get_by_seller(
        self, db: Session, *, seller_id: int, statuses: Sequence[OrderStatus] = ()
    ) -> List[Order]:
        """
        Órdenes que contienen al menos un producto del vendedor.
        """
        seller_order_ids = (
            select(OrderItem.order_id)
            .join(Product, OrderItem.product_id == Product.id)
            .where(Product.seller_id == seller_id)
        )
        query = _with_details(db.query(Order)).filter(Order.id.in_(seller_order_ids))
        if statuses:
            query = query.filter(Order.status.in_(list(statuses)))
        return query.order_by(Order.created_at.desc(), Order.id.desc()).all()

    def get_by_status(
        self, db: Session, *, status: OrderStatus, limit: int = 100
    ) -> List[Order]:
        return (
            _with_details(db.query(Order))
            .filter(Order.status == status)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(limit)
            .all()
        )

    def count_by_status(self, db: Session, *, status: OrderStatus) -> int:
        return db.query(func.count(Order.id)).filter(Order.status == status).scalar()

    def revenue_by_status(self, db: Session, *, status: OrderStatus) -> float:
        return db.query(func.coalesce(func.sum(Order.total), 0.0)).filter(Order.status == status).scalar()

    def compare_and_set_status(
        self, db: Session, *, db_obj: Order, expected: OrderStatus, status: OrderStatus
    ) -> bool:
        """
        Cambia el estado solo si sigue siendo `expected`; hace commit.

        Returns:
            True si se aplicó el cambio, False si otro proceso lo cambió antes
        """
        result = db.execute(
            update(Order)
            .where(Order.id == db_obj.id, Order.status == expected)
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
        db.commit()
        db.refresh(db_obj)
        return result.rowcount == 1


order = CRUDOrder(Order)
