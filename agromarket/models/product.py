import enum
from sqlalchemy import Column, String, Integer, Float, DateTime, Enum, ForeignKey, CheckConstraint, func
from sqlalchemy.orm import relationship
from agromarket.core.database import Base


class Category(str, enum.Enum):
    VEGETABLES = "Vegetables"
    FRUITS = "Fruits"
    FLOWERS = "Flowers"
    HONEY = "Honey"
    CROPS = "Crops"
    FARM_TOOLS = "Farm Tools"
    MANURE = "Manure"
    PESTICIDES = "Pesticides"


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    price = Column(Float, nullable=False)
    image = Column(String(500), nullable=False)
    category = Column(
        Enum(Category, native_enum=False, length=50, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        index=True,
    )
    quantity = Column(Integer, nullable=False, default=0)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )

    seller = relationship("User", back_populates="products")
    order_items = relationship("OrderItem", back_populates="product")
