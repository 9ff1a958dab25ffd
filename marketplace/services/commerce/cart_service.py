# marketplace/services/commerce/cart_service.py

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from marketplace import records
from marketplace.models.order_models import Cart, DeliveryOption, OrderItem
from marketplace.records import CARTS, StorageUnavailable
from marketplace.services.commerce.catalog_service import CatalogService
from marketplace.services.commerce.checkout_service import compute_totals
from marketplace.services.commerce.promo_service import PromoService


class CartService:

    @staticmethod
    def get_cart(cart_id: str) -> Cart:
        return records.find_record(CARTS, Cart, {"id": cart_id}) or Cart(id=cart_id)

    @staticmethod
    def _save(cart: Cart) -> Dict[str, Any]:
        cart.updatedAt = datetime.now(timezone.utc).isoformat()
        try:
            records.save_record(CARTS, cart)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(cart=CartService.to_dict(cart))

    @staticmethod
    def to_dict(cart: Cart) -> Dict[str, Any]:
        return {
            "items": [i.model_dump() for i in cart.items],
            "totalItems": cart.total_items,
            "subtotal": round(cart.subtotal, 2),
        }

    @staticmethod
    def add_item(cart_id: str, product_id: str, quantity: int = 1) -> Dict[str, Any]:
        if quantity < 1:
            return records.invalid("Quantity must be at least 1")

        product = CatalogService.get_product(product_id)
        if not product:
            return records.not_found("Product not available")
        if not product.is_live:
            return records.invalid("This product is not available for purchase")

        cart = CartService.get_cart(cart_id)
        for item in cart.items:
            if item.id == product_id:
                item.quantity += quantity
                break
        else:
            cart.items.append(OrderItem(
                id=product.id,
                name=product.name,
                price=product.price,
                quantity=quantity,
                farmId=product.farmId,
                farmName=product.farmName,
            ))
        return CartService._save(cart)

    @staticmethod
    def update_quantity(cart_id: str, product_id: str, change: int) -> Dict[str, Any]:
        cart = CartService.get_cart(cart_id)
        for idx, item in enumerate(cart.items):
            if item.id == product_id:
                if item.quantity + change <= 0:
                    cart.items.pop(idx)
                else:
                    item.quantity += change
                return CartService._save(cart)
        return records.not_found("Item not found in cart")

    @staticmethod
    def remove_item(cart_id: str, product_id: str) -> Dict[str, Any]:
        cart = CartService.get_cart(cart_id)
        kept = [i for i in cart.items if i.id != product_id]
        if len(kept) == len(cart.items):
            return records.not_found("Item not found in cart")
        cart.items = kept
        return CartService._save(cart)

    @staticmethod
    def clear_cart(cart_id: str) -> Dict[str, Any]:
        return CartService._save(Cart(id=cart_id))

    @staticmethod
    def merge_carts(guest_id: str, user_id: str) -> Dict[str, Any]:
        """
        Folds a guest cart into the user's cart after login. Quantities for the
        same product are added; the guest cart is deleted afterwards.
        """
        guest = records.find_record(CARTS, Cart, {"id": guest_id})
        if not guest or not guest.items or guest_id == user_id:
            return records.ok(merged=0)

        cart = CartService.get_cart(user_id)
        lines = {i.id: i for i in cart.items}
        for line in guest.items:
            if line.id in lines:
                lines[line.id].quantity += line.quantity
            else:
                cart.items.append(line)

        out = CartService._save(cart)
        if not out["ok"]:
            return out
        try:
            records.delete_record(CARTS, guest_id)
        except StorageUnavailable:
            return records.unavailable()
        return records.ok(merged=len(guest.items), cart=out["cart"])

    @staticmethod
    def summary(cart: Cart, delivery_option: str = "standard", promo_code: Optional[str] = None) -> Dict[str, Any]:
        """Order summary with an optional promo preview (usage not counted)."""
        try:
            option = DeliveryOption(delivery_option or "standard")
        except ValueError:
            option = DeliveryOption.standard

        subtotal = cart.subtotal
        promo_result, promo_info = None, None
        if promo_code:
            promo_result = PromoService.quote(promo_code, subtotal)
            promo_info = promo_result.model_dump()

        totals = compute_totals(subtotal, option, promo_result)
        return {
            **CartService.to_dict(cart),
            "deliveryOption": option.value,
            "totals": {k: round(v, 2) for k, v in totals.items()},
            "promo": promo_info,
        }
