# marketplace/services/commerce/checkout_service.py

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import current_app
from pydantic import ValidationError

from marketplace import records
from marketplace.models.identity_models import Identity
from marketplace.models.order_models import (
    Address,
    Cart,
    Delivery,
    DeliveryLocationModel,
    DeliveryOption,
    Order,
    OrderStatus,
    PaymentMethod,
    Totals,
)
from marketplace.models.promo_models import PromoResult
from marketplace.records import CARTS, ORDERS, StorageUnavailable
from marketplace.services.commerce.promo_service import PromoService

TAX_RATE = 0.08
DELIVERY_FEES = {
    DeliveryOption.standard: 5.00,
    DeliveryOption.express: 12.00,
}


def compute_totals(subtotal: float, delivery_option: DeliveryOption,
                   promo_result: Optional[PromoResult] = None) -> Dict[str, float]:
    """
    total = subtotal + delivery + tax - discount, never below zero.
    Tax is charged on the undiscounted subtotal.
    """
    discount, free_shipping = 0.0, False
    if promo_result is not None and promo_result.valid:
        discount, free_shipping = promo_result.discount, promo_result.freeShipping

    fee = 0.0 if free_shipping else DELIVERY_FEES[delivery_option]
    tax = subtotal * TAX_RATE
    return {
        "subtotal": subtotal,
        "tax": tax,
        "delivery": fee,
        "discount": discount,
        "total": max(0.0, subtotal + fee + tax - discount),
    }


class CheckoutService:

    @staticmethod
    def generate_order_id(now: datetime) -> str:
        return f"FA-{int(now.timestamp() * 1000)}"

    @staticmethod
    def place_order(identity: Identity, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not identity.is_logged_in or not identity.user_id:
            return records.fail("auth", "Please log in to complete your order.")

        payload = payload or {}
        cart = records.find_record(CARTS, Cart, {"id": identity.user_id})
        if not cart or not cart.items:
            return records.invalid("Your cart is empty")

        try:
            location = DeliveryLocationModel.model_validate(payload.get("deliveryLocation") or {})
        except ValidationError as e:
            return records.invalid(records.first_error(e))

        try:
            payment = PaymentMethod(payload.get("paymentMethod") or "")
        except ValueError:
            return records.invalid("Please select a payment method")

        try:
            option = DeliveryOption(payload.get("deliveryOption") or "standard")
        except ValueError:
            return records.invalid("Unknown delivery option")

        subtotal = cart.subtotal
        code = (payload.get("promoCode") or "").strip() or None
        promo_result = None
        if code:
            promo_result = PromoService.quote(code, subtotal)
            if not promo_result.valid:
                return records.invalid(promo_result.message)

        totals = compute_totals(subtotal, option, promo_result)
        now = datetime.now(timezone.utc)
        order = Order(
            id=CheckoutService.generate_order_id(now),
            date=now,
            userId=identity.user_id,
            userEmail=identity.email or None,
            userName=identity.full_name or None,
            items=cart.items,
            paymentMethod=payment,
            delivery=Delivery(
                location=Address(**location.model_dump()),
                option=option,
                fee=totals["delivery"],
            ),
            totals=Totals(**totals),
            promoCode=promo_result.code if promo_result else None,
            status=OrderStatus.pending,
        )

        try:
            records.save_record(ORDERS, order)
        except StorageUnavailable:
            return records.unavailable()

        if promo_result:
            redeemed = PromoService.apply(promo_result.code, subtotal, order_id=order.id, now=now)
            if not redeemed.valid:
                current_app.logger.warning(
                    "order %s placed but promo %s was not counted: %s",
                    order.id, promo_result.code, redeemed.message,
                )

        try:
            records.save_record(CARTS, Cart(id=identity.user_id, updatedAt=now.isoformat()))
        except StorageUnavailable:
            current_app.logger.warning("order %s placed but cart %s was not cleared", order.id, identity.user_id)

        return records.ok(order=order.model_dump(mode="json"))
