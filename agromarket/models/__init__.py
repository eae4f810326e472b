from .user import User, Role
from .product import Product, Category
from .order import Order, OrderItem, OrderStatus
