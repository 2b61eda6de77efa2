# quikprint/core/ports.py
"""
Ports (Protocols) of the clean architecture.

These protocols are the contract the Infrastructure layer (repositories,
gateways) MUST honour to plug into the Core use cases.
"""

from typing import Protocol, List, Optional, Dict, Any
from abc import abstractmethod
from datetime import date

from quikprint.core.entities import (
    Product, Category, Order, OrderNote, User, PaymentTransaction, ArtworkFile
)


# ====================================================================
# 1. REPOSITORIES (Persistence ports)
# ====================================================================

class IProductRepository(Protocol):
    """Lookup of catalog products."""

    @abstractmethod
    def get_by_slug(self, slug: str) -> Optional[Product]: ...

    @abstractmethod
    def get_by_id(self, product_id) -> Optional[Product]: ...

    @abstractmethod
    def search(self, search: Optional[str] = None, category_slug: Optional[str] = None) -> List[Product]: ...

    @abstractmethod
    def count(self) -> int: ...


class ICategoryRepository(Protocol):
    """Lookup of catalog categories."""

    @abstractmethod
    def list_all(self) -> List[Category]: ...

    @abstractmethod
    def get_by_slug(self, slug: str) -> Optional[Category]: ...


class IOrderRepository(Protocol):
    """Persistence and reporting of orders."""

    @abstractmethod
    def create(self, order: Order) -> Order:
        """
        Stores the order with its items and first status-history entry in a
        single atomic transaction and assigns the order number.
        """
        ...

    @abstractmethod
    def get_by_id(self, order_id) -> Optional[Order]: ...

    @abstractmethod
    def get_by_payment_reference(self, reference: str) -> Optional[Order]: ...

    @abstractmethod
    def list_by_user(self, user_id) -> List[Order]: ...

    @abstractmethod
    def list_all(self, status: Optional[str] = None) -> List[Order]: ...

    @abstractmethod
    def update_status(self, order_id, status: str, note: str = '', changed_by_id=None) -> Order: ...

    @abstractmethod
    def set_payment_reference(self, order_id, reference: str) -> Order: ...

    @abstractmethod
    def add_note(self, order_id, note: str, created_by_id=None) -> OrderNote: ...

    @abstractmethod
    def list_notes(self, order_id) -> List[OrderNote]: ...

    @abstractmethod
    def count_by_status(self) -> Dict[str, int]: ...

    @abstractmethod
    def daily_sales(self, since: date) -> List[Dict[str, Any]]: ...

    @abstractmethod
    def revenue(self, statuses) -> Any: ...


class IUserRepository(Protocol):
    """Customer lookup for the back-office."""

    @abstractmethod
    def get_by_id(self, user_id) -> Optional[User]: ...

    @abstractmethod
    def list_customers(self) -> List[Dict[str, Any]]:
        """Customers with ``order_count`` and ``total_spent``."""
        ...

    @abstractmethod
    def count_customers(self) -> int: ...


class IArtworkRepository(Protocol):
    """Artwork files attached to order lines."""

    @abstractmethod
    def get_item_owner_id(self, order_item_id) -> Optional[int]:
        """Id of the customer who placed the line's order, or None if the line does not exist."""
        ...

    @abstractmethod
    def create(self, order_item_id, content: Any, file_name: str, content_type: str, file_size: int,
               uploaded_by_id=None) -> ArtworkFile:
        """Stores ``content`` (a file-like object) and records it against the line."""
        ...

    @abstractmethod
    def get_by_id(self, file_id) -> Optional[ArtworkFile]: ...

    @abstractmethod
    def list_by_item(self, order_item_id) -> List[ArtworkFile]: ...

    @abstractmethod
    def delete(self, file_id) -> None: ...


# ====================================================================
# 2. GATEWAYS (External service ports)
# ====================================================================

class IPaymentGateway(Protocol):
    """External payment processor."""

    @abstractmethod
    def initialize(self, order: Order, email: str, reference: str) -> PaymentTransaction: ...

    @abstractmethod
    def verify(self, reference: str) -> PaymentTransaction: ...

    @abstractmethod
    def is_valid_signature(self, payload: bytes, signature: str) -> bool: ...


class IEmailService(Protocol):
    """Transactional e-mail."""

    @abstractmethod
    def send_order_confirmation(self, order: Order): ...

    @abstractmethod
    def send_payment_approved(self, order: Order): ...

    @abstractmethod
    def send_status_change(self, order: Order, new_status: str): ...
