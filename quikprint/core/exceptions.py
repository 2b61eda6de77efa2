class BaseCoreError(Exception):
    """Base class for every exception raised by the Core layer."""
    pass

class InvalidDataError(BaseCoreError):
    """Raised when invalid data is supplied to an entity or use case."""
    def __init__(self, message="The supplied data is invalid."):
        self.message = message
        super().__init__(self.message)

# ===============================================
# LOOKUP ERRORS
# ===============================================

class ItemNotFoundError(BaseCoreError):
    """Raised when a requested item (generic) does not exist."""
    def __init__(self, message="The requested item was not found."):
        self.message = message
        super().__init__(self.message)

class ProductNotFoundError(ItemNotFoundError):
    """Raised when a specific product does not exist."""
    def __init__(self, message="The requested product was not found."):
        self.message = message
        super().__init__(self.message)

class CategoryNotFoundError(ItemNotFoundError):
    pass

class OrderNotFoundError(ItemNotFoundError):
    pass

class CartItemNotFoundError(ItemNotFoundError):
    """Raised when a cart line id is not present in the cart."""
    pass

class OrderItemNotFoundError(ItemNotFoundError):
    pass

class ArtworkNotFoundError(ItemNotFoundError):
    """Raised when an uploaded artwork file does not exist."""
    pass

# ===============================================
# CONFIGURATOR, CHECKOUT AND PAYMENT FLOW
# ===============================================

class InvalidStepError(BaseCoreError):
    """Raised when a configurator transition is not available from the current step."""
    def __init__(self, message="This step transition is not available."):
        self.message = message
        super().__init__(self.message)

class CartEmptyError(BaseCoreError):
    """Raised when checking out with an empty cart."""
    def __init__(self, message="The shopping cart is empty."):
        self.message = message
        super().__init__(self.message)

class OrderAccessDeniedError(BaseCoreError):
    """Raised when a customer asks for an order that belongs to someone else."""
    def __init__(self, message="You do not have access to this order."):
        self.message = message
        super().__init__(self.message)

class InvalidStatusError(BaseCoreError):
    """Raised when an order status outside the known set is requested."""
    def __init__(self, message="The supplied status is not a valid order status."):
        self.message = message
        super().__init__(self.message)

class PaymentFailedError(BaseCoreError):
    """Raised when the payment gateway rejects or fails a request."""
    def __init__(self, message="The payment request was rejected or failed."):
        self.message = message
        super().__init__(self.message)
