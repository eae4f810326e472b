from typing import List, Optional
from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload
from agromarket.crud.base import CRUDBase
from agromarket.models.product import Product, Category
from agromarket.models.user import User
from agromarket.schemas.product import ProductCreate, ProductUpdate
import logging

logger = logging.getLogger(__name__)


class CRUDProduct(CRUDBase[Product, ProductCreate, ProductUpdate]):
    def create_for_seller(
        self, db: Session, *, obj_in: ProductCreate, seller_id: int, default_image: str
    ) -> Product:
        """
        Crea un producto asignado al vendedor autenticado.

        Si no se envía imagen se usa la imagen por defecto configurada.
        """
        data = obj_in.model_dump()
        data["image"] = data.get("image") or default_image
        db_obj = Product(**data, seller_id=seller_id)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        logger.info(f"Producto creado: id={db_obj.id} seller={seller_id}")
        return db_obj

    def get_listed(
        self, db: Session, *, category: Optional[Category] = None
    ) -> List[Product]:
        """
        Productos con vendedor existente, opcionalmente filtrados por categoría.

        Los productos cuyo vendedor ya no existe se omiten del catálogo.
        """
        query = (
            db.query(Product)
            .join(User, Product.seller_id == User.id)
            .options(joinedload(Product.seller))
        )
        if category:
            query = query.filter(Product.category == category)
        return query.order_by(Product.id).all()

    def get_by_seller(self, db: Session, *, seller_id: int) -> List[Product]:
        return (
            db.query(Product)
            .filter(Product.seller_id == seller_id)
            .order_by(Product.id)
            .all()
        )

    def decrement_stock(self, db: Session, *, db_obj: Product, quantity: int) -> bool:
        """
        Descuenta stock solo si alcanza, en una única sentencia.

        `UPDATE ... SET quantity = quantity - n WHERE id = :id AND quantity >= n`
        deja a la base de datos decidir con el valor vigente, por lo que dos
        pedidos concurrentes nunca dejan el stock en negativo. No hace commit:
        el llamador controla la transacción.

        Returns:
            True si se descontó, False si el stock no alcanzaba
        """
        result = db.execute(
            update(Product)
            .where(Product.id == db_obj.id, Product.quantity >= quantity)
            .values(quantity=Product.quantity - quantity)
            .execution_options(synchronize_session=False)
        )
        db.expire(db_obj, ["quantity"])
        return result.rowcount == 1


product = CRUDProduct(Product)
