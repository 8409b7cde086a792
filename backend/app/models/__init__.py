from app.models.cart import CartItem, cart_item_id

__all__ = ["CartItem", "cart_item_id"]
