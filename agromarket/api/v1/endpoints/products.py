from typing import List, Optional
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session
from agromarket.api import deps
from agromarket.core.config import Settings
from agromarket.core.database import MAX_INTEGER
from agromarket.core.errors import NotFound
from agromarket.core.guard import require_ownership
from agromarket.crud import product
from agromarket.models.product import Category
from agromarket.schemas.product import (
    ProductCreate,
    ProductList,
    ProductResponse,
    ProductUpdate,
    ProductWithSeller,
)
from agromarket.schemas.user import Identity
import logging

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/", response_model=ProductWithSeller, status_code=201)
def create_product(
    *,
    db: Session = Depends(deps.get_db),
    settings: Settings = Depends(deps.get_settings),
    product_in: ProductCreate,
    current: Identity = Depends(deps.get_current_farmer),
):
    """
    Publicar un nuevo producto a nombre del vendedor autenticado.

    Args:
        - `product_in`: Nombre, precio, categoría, cantidad e imagen opcional

    Returns:
        `ProductWithSeller`: Producto creado con su vendedor

    Raises:
        `NotAuthenticated`: 401 sin token válido
        `NotAuthorized`: 403 si la cuenta no es `farmer`

    Example:
        ```json
        {
          "name": "Tomatoes",
          "price": 2.5,
          "category": "Vegetables",
          "quantity": 40
        }
        ```
    """
    return product.create_for_seller(
        db,
        obj_in=product_in,
        seller_id=current.id,
        default_image=settings.DEFAULT_PRODUCT_IMAGE,
    )


@router.get("/", response_model=ProductList)
def list_products(
    db: Session = Depends(deps.get_db),
    category: Optional[Category] = Query(None, description="Filtrar por categoría"),
):
    """
    Listar el catálogo, opcionalmente filtrado por categoría.

    Example:
        ```
        GET /api/v1/products/?category=Fruits
        ```
    """
    products = product.get_listed(db, category=category)
    return ProductList(products=products, total=len(products))


@router.get("/seller/{seller_id}", response_model=List[ProductResponse])
def list_seller_products(
    seller_id: int = Path(..., ge=1, le=MAX_INTEGER),
    db: Session = Depends(deps.get_db),
):
    return product.get_by_seller(db, seller_id=seller_id)


@router.get("/{product_id}", response_model=ProductWithSeller)
def get_product(
    product_id: int = Path(..., ge=1, le=MAX_INTEGER),
    db: Session = Depends(deps.get_db),
):
    """
    Obtener un producto específico por su ID.

    Raises:
        `NotFound`: 404 si el producto no existe
    """
    db_product = product.get(db, id=product_id)
    if not db_product:
        raise NotFound("product", product_id)
    return db_product


@router.put("/{product_id}", response_model=ProductWithSeller)
def update_product(
    *,
    db: Session = Depends(deps.get_db),
    product_id: int = Path(..., ge=1, le=MAX_INTEGER),
    product_in: ProductUpdate,
    current: Identity = Depends(deps.get_current_identity),
):
    """
    Actualizar un producto propio.

    Solo los campos presentes se modifican. Las órdenes ya creadas conservan
    el precio con el que se compraron.

    Raises:
        `NotFound`: 404 si el producto no existe
        `NotAuthorized`: 403 si el producto es de otro vendedor
    """
    db_product = product.get(db, id=product_id)
    if not db_product:
        raise NotFound("product", product_id)
    require_ownership(current, db_product.seller_id)

    updated_product = product.update(
        db, db_obj=db_product, obj_in=product_in.model_dump(exclude_unset=True, exclude_none=True)
    )
    logger.info(f"Product {product_id} updated by seller {current.id}")
    return updated_product


@router.delete("/{product_id}")
def delete_product(
    *,
    db: Session = Depends(deps.get_db),
    product_id: int = Path(..., ge=1, le=MAX_INTEGER),
    current: Identity = Depends(deps.get_current_identity),
):
    """
    Eliminar un producto propio del catálogo.

    Raises:
        `NotFound`: 404 si el producto no existe
        `NotAuthorized`: 403 si el producto es de otro vendedor
    """
    db_product = product.get(db, id=product_id)
    if not db_product:
        raise NotFound("product", product_id)
    require_ownership(current, db_product.seller_id)

    product.delete(db, id=product_id)
    logger.info(f"Product {product_id} deleted by seller {current.id}")
    return {"success": True}
