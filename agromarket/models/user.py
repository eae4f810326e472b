import enum
from sqlalchemy import Column, String, Integer, DateTime, Enum, func
from sqlalchemy.orm import relationship
from agromarket.core.database import Base

DEFAULT_PROFILE_PICTURE = (
    "https://images.pexels.com/photos/1446948/pexels-photo-1446948.jpeg"
    "?auto=compress&cs=tinysrgb&w=600"
)


class Role(str, enum.Enum):
    FARMER = "farmer"
    BUYER = "buyer"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(
        Enum(Role, native_enum=False, length=20, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.BUYER,
    )
    profile_picture = Column(String(500), default=DEFAULT_PROFILE_PICTURE)
    created_at = Column(DateTime, default=func.now())

    products = relationship("Product", back_populates="seller")
    orders = relationship("Order", back_populates="buyer")
