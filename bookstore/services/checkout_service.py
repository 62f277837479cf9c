import logging
from typing import List, Optional, Union

from pydantic import ValidationError
from sqlmodel import Session, select

from bookstore.config import Settings, settings as default_settings
from bookstore.constants.order_status import OrderStatus, PaymentMethod, PaymentStatus
from bookstore.gateway.port import PaymentGateway
from bookstore.errors import (
    InsufficientStock,
    InvalidTransition,
    NotFound,
    PaymentGatewayError,
    PaymentVerificationFailed,
    UnavailableItems,
    ValidationFailed,
)
from bookstore.models.cart import Cart
from bookstore.models.order import Order
from bookstore.models.order_item import OrderItem
from bookstore.schemas.checkout_schemas import (
    CheckoutRequest,
    CheckoutResult,
    PaymentVerifyRequest,
    TransitionResult,
)
from bookstore.services.cart_service import clear_cart, get_or_create_cart
from bookstore.services.catalog_service import find_book
from bookstore.services.order_event_service import log_order_event
from bookstore.services.order_service import generate_order_number, transition_order
from bookstore.services.pricing import price_cart

logger = logging.getLogger(__name__)


class CheckoutService:
    """
    Turns a user's cart into an order and settles it against the gateway.

    The gateway is injected; nothing here reaches for a process-wide client.
    """

    def __init__(self, gateway: PaymentGateway, settings: Optional[Settings] = None):
        self.gateway = gateway
        self.settings = settings or default_settings

    # -------------------------
    # CHECKOUT
    # -------------------------
    def checkout(self, session: Session, user_id: int, request: Union[CheckoutRequest, dict]) -> CheckoutResult:
        request = self._parse_request(request)
        cart = get_or_create_cart(session, user_id)
        if not cart.items:
            raise ValidationFailed("Cart is empty")

        order_items = self._snapshot_items(session, cart)

        pricing = price_cart(cart.items, cart.coupon, self.settings.free_delivery_threshold)
        if pricing.final_total <= 0:
            raise ValidationFailed("Invalid order amount")

        shipping = request.shipping_address.model_dump()
        billing = (request.billing_address or request.shipping_address).model_dump()

        order = Order(
            order_number=generate_order_number(),
            user_id=user_id,
            items=order_items,
            total_amount=pricing.total_price,
            discount=pricing.savings,
            delivery_charge=pricing.delivery_charge,
            final_amount=pricing.final_total,
            total_items=pricing.total_items,
            total_weight=pricing.total_weight,
            coupon_code=cart.coupon_code,
            status=OrderStatus.PENDING,
            payment_method=request.payment_method,
            payment_status=PaymentStatus.PENDING,
            shipping_address=shipping,
            billing_address=billing,
            notes=request.notes,
        )
        session.add(order)
        session.flush()
        log_order_event(
            session,
            order_id=order.id,
            event_type="order_placed",
            label="Order placed",
            created_by=f"user:{user_id}",
            meta={"payment_method": request.payment_method.value, "final_amount": order.final_amount},
        )
        session.commit()
        session.refresh(order)
        logger.info(f"Order {order.order_number} created for user {user_id} ({order.final_amount})")

        amount_minor_units = int(round(order.final_amount * 100))

        if request.payment_method.is_pay_on_delivery:
            result = transition_order(
                session, order, OrderStatus.CONFIRMED, notes="Cash on delivery", actor=f"user:{user_id}"
            )
            clear_cart(session, user_id)
            return CheckoutResult(
                order=result.order,
                amount=order.final_amount,
                amount_minor_units=amount_minor_units,
                currency=self.settings.currency,
                warnings=result.warnings,
            )

        intent = self._create_intent(session, order, amount_minor_units)
        return CheckoutResult(
            order=order,
            amount=order.final_amount,
            amount_minor_units=amount_minor_units,
            currency=intent.currency,
            payment_intent_id=intent.intent_id,
            gateway_key_id=self.gateway.key_id,
        )

    def _parse_request(self, request: Union[CheckoutRequest, dict]) -> CheckoutRequest:
        if isinstance(request, CheckoutRequest):
            return request
        try:
            return CheckoutRequest.model_validate(request)
        except ValidationError as exc:
            raise ValidationFailed.from_pydantic("Invalid checkout details", exc) from exc

    def _snapshot_items(self, session: Session, cart: Cart) -> List[OrderItem]:
        """Check every line against live stock and copy it into order lines."""
        unavailable = []
        out_of_stock = []
        order_items = []

        for item in cart.items:
            book = find_book(session, item.book_id, required=False)
            if not book or not book.available:
                unavailable.append(book.title if book else f"book {item.book_id}")
                continue
            if book.stock < item.quantity:
                out_of_stock.append({
                    "book_id": book.id,
                    "title": book.title,
                    "requested": item.quantity,
                    "available": book.stock,
                })
                continue

            order_items.append(
                OrderItem(
                    book_id=book.id,
                    quantity=item.quantity,
                    price=item.price,
                    title=book.title,
                    author=book.author,
                )
            )

        if unavailable:
            raise UnavailableItems(unavailable)
        if out_of_stock:
            raise InsufficientStock("Insufficient stock for some books", items=out_of_stock)
        return order_items

    def _create_intent(self, session: Session, order: Order, amount_minor_units: int):
        try:
            intent = self.gateway.create_intent(
                amount_minor_units,
                self.settings.currency,
                order.order_number,
                {"order_number": order.order_number, "user_id": order.user_id},
            )
        except PaymentGatewayError:
            logger.error(f"Payment intent failed for order {order.order_number}, cancelling it")
            transition_order(session, order, OrderStatus.CANCELLED, notes="Payment gateway error")
            raise

        order.gateway_order_id = intent.intent_id
        session.add(order)
        session.commit()
        session.refresh(order)
        return intent

    # -------------------------
    # PAYMENT CALLBACK
    # -------------------------
    def verify_payment(self, session: Session, user_id: int, payload: PaymentVerifyRequest) -> TransitionResult:
        order = session.exec(
            select(Order).where(
                Order.gateway_order_id == payload.razorpay_order_id,
                Order.user_id == user_id,
            )
        ).first()
        if not order:
            raise NotFound("Order not found")

        # Idempotency guard
        if (
            order.payment_status == PaymentStatus.COMPLETED
            and order.gateway_payment_id == payload.razorpay_payment_id
        ):
            logger.info(f"Payment {payload.razorpay_payment_id} already processed for {order.order_number}")
            return TransitionResult(order=order)

        if PaymentMethod(order.payment_method).is_pay_on_delivery:
            raise ValidationFailed("Order is not awaiting an online payment")

        current = OrderStatus(order.status)
        if current != OrderStatus.PENDING:
            raise InvalidTransition(current.value, OrderStatus.CONFIRMED.value)

        verified = self.gateway.verify_signature(
            payload.razorpay_order_id,
            payload.razorpay_payment_id,
            payload.razorpay_signature,
        )

        if not verified:
            logger.warning(f"Signature mismatch for order {order.order_number}, cancelling")
            order.gateway_payment_id = payload.razorpay_payment_id
            transition_order(session, order, OrderStatus.CANCELLED, notes="Payment verification failed")
            raise PaymentVerificationFailed("Payment verification failed")

        order.gateway_payment_id = payload.razorpay_payment_id
        order.gateway_signature = payload.razorpay_signature
        order.payment_status = PaymentStatus.COMPLETED
        result = transition_order(
            session, order, OrderStatus.CONFIRMED, notes="Payment verified", actor=f"user:{user_id}"
        )

        clear_cart(session, user_id)
        return result
