"""Sales repository ports."""

from abc import abstractmethod

from ..shared.base import Repository
from ..shared.value_objects import CustomerId, OrderId, ProductId, Sku
from .entities.order import Order
from .entities.product import Product
from .value_objects import OrderStatus


class OrderRepository(Repository[Order, OrderId]):
    @abstractmethod
    async def find_by_customer(self, customer_id: CustomerId) -> list[Order]:
        """Orders placed by a customer, oldest first."""

    @abstractmethod
    async def find_by_status(self, status: OrderStatus) -> list[Order]:
        """Orders currently in ``status``."""


class ProductRepository(Repository[Product, ProductId]):
    @abstractmethod
    async def find_by_sku(self, sku: Sku) -> Product | None:
        """Find a product by SKU."""

    @abstractmethod
    async def find_low_stock(self) -> list[Product]:
        """Products at or below their low stock threshold, emptiest first."""
