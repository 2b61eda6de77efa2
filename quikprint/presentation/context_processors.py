from .cart_manager import CartManager


def cart_context(request):
    """Cart badge data for every template (item count and subtotal)."""
    if getattr(request, 'session', None) is None:
        return {}
    return CartManager(request).get_context()
