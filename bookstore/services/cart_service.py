import logging
from datetime import datetime
from typing import Optional

from pydantic import ValidationError
from sqlmodel import Session, select

from bookstore.config import settings
from bookstore.errors import (
    InsufficientStock,
    NotFound,
    QuantityLimitExceeded,
    Unavailable,
    ValidationFailed,
)
from bookstore.models.book import Book
from bookstore.models.cart import Cart, CartItem
from bookstore.models.user import User
from bookstore.schemas.cart_schemas import CartDetails, CartLineView, Coupon, CouponKind
from bookstore.services.catalog_service import book_weight, find_book
from bookstore.services.pricing import price_cart

logger = logging.getLogger(__name__)


def get_or_create_cart(session: Session, user_id: int) -> Cart:
    """A user's cart, created empty on first access."""
    cart = session.exec(select(Cart).where(Cart.user_id == user_id)).first()
    if cart:
        return cart

    if not session.get(User, user_id):
        raise NotFound("User not found")

    cart = Cart(user_id=user_id)
    session.add(cart)
    session.commit()
    session.refresh(cart)
    logger.info(f"Created cart for user {user_id}")
    return cart


def _stock_error(book: Book, requested: int) -> InsufficientStock:
    return InsufficientStock(
        f"Only {book.stock} items available in stock",
        items=[{
            "book_id": book.id,
            "title": book.title,
            "requested": requested,
            "available": book.stock,
        }],
    )


def _save(session: Session, cart: Cart) -> Cart:
    cart.touch()
    session.add(cart)
    session.commit()
    session.refresh(cart)
    return cart


def add_item(session: Session, user_id: int, book_id: int, quantity: int = 1) -> Cart:
    if quantity < 1:
        raise ValidationFailed("Quantity must be at least 1")

    cart = get_or_create_cart(session, user_id)

    # always read live stock, another device may have changed it
    book = find_book(session, book_id)
    if not book.available:
        raise Unavailable("Book is not available")
    if quantity > book.stock:
        raise _stock_error(book, quantity)

    limit = settings.max_quantity_per_line
    item = cart.find_item(book_id)
    new_quantity = quantity + (item.quantity if item else 0)

    if new_quantity > limit:
        raise QuantityLimitExceeded(limit)
    if new_quantity > book.stock:
        raise _stock_error(book, new_quantity)

    if item:
        item.quantity = new_quantity
        item.price = book.price      # Update price in case it changed
        item.weight = book_weight(book)
        item.updated_at = datetime.utcnow()
        session.add(item)
    else:
        cart.items.append(
            CartItem(
                book_id=book.id,
                quantity=quantity,
                price=book.price,
                weight=book_weight(book),
            )
        )

    return _save(session, cart)


def update_quantity(session: Session, user_id: int, book_id: int, quantity: int) -> Cart:
    """
    Set a line's quantity; zero or less removes the line.

    Touching a line refreshes both its price and weight snapshots.
    """
    if quantity <= 0:
        return remove_item(session, user_id, book_id)

    cart = get_or_create_cart(session, user_id)
    item = cart.find_item(book_id)
    if not item:
        raise NotFound("Cart item not found")

    book = find_book(session, book_id)
    # lowering a disabled book is allowed, growing it is not
    if not book.available and quantity > item.quantity:
        raise Unavailable("Book is not available")

    limit = settings.max_quantity_per_line
    if quantity > limit:
        raise QuantityLimitExceeded(limit)
    if quantity > book.stock:
        raise _stock_error(book, quantity)

    item.quantity = quantity
    item.price = book.price
    item.weight = book_weight(book)
    item.updated_at = datetime.utcnow()
    session.add(item)

    return _save(session, cart)


def remove_item(session: Session, user_id: int, book_id: int) -> Cart:
    cart = get_or_create_cart(session, user_id)
    item = cart.find_item(book_id)
    if not item:
        return cart

    cart.items.remove(item)
    return _save(session, cart)


def clear_cart(session: Session, user_id: int) -> Cart:
    """Empty the cart and drop its coupon in one write."""
    cart = get_or_create_cart(session, user_id)
    cart.items.clear()
    cart.set_coupon(None)
    return _save(session, cart)


def apply_coupon(
    session: Session,
    user_id: int,
    code: str,
    discount: float,
    kind: str = CouponKind.PERCENTAGE,
) -> Cart:
    try:
        coupon = Coupon(code=code, discount=discount, kind=kind)
    except ValidationError as exc:
        raise ValidationFailed.from_pydantic("Invalid coupon", exc) from exc

    cart = get_or_create_cart(session, user_id)
    cart.set_coupon(coupon)
    return _save(session, cart)


def remove_coupon(session: Session, user_id: int) -> Cart:
    cart = get_or_create_cart(session, user_id)
    cart.set_coupon(None)
    return _save(session, cart)


def get_cart_details(session: Session, user_id: int) -> CartDetails:
    """Cart lines joined with the live catalog, plus freshly derived pricing."""
    cart = get_or_create_cart(session, user_id)

    lines = []
    for item in cart.items:
        book: Optional[Book] = find_book(session, item.book_id, required=False)
        lines.append(
            CartLineView(
                item_id=item.id,
                book_id=item.book_id,
                title=book.title if book else None,
                author=book.author if book else None,
                price=item.price,
                current_price=book.price if book else None,
                price_changed=bool(book) and book.price != item.price,
                weight=item.weight,
                quantity=item.quantity,
                line_total=item.price * item.quantity,
                stock=book.stock if book else None,
                available=bool(book) and book.available,
            )
        )

    return CartDetails(
        user_id=user_id,
        items=lines,
        coupon=cart.coupon,
        pricing=price_cart(cart.items, cart.coupon),
    )
