"""Shared fixtures: an in-memory database, a registered reader, catalog and order factories."""

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from bookstore.constants.order_status import OrderStatus, PaymentMethod, PaymentStatus
from bookstore.database import build_engine, create_db_and_tables
from bookstore.gateway import FakePaymentGateway
from bookstore.models.book import Book
from bookstore.models.order import Order
from bookstore.models.order_item import OrderItem
from bookstore.services.checkout_service import CheckoutService
from bookstore.services.order_service import generate_order_number
from bookstore.services.user_service import register_user

ADDRESS = {
    "house_number": "12B",
    "street": "MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "zip_code": "560001",
}


@pytest.fixture()
def engine():
    engine = build_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def address():
    return dict(ADDRESS)


@pytest.fixture()
def user(session):
    return register_user(
        session,
        {
            "email": "reader@bookstore.in",
            "first_name": "Asha",
            "last_name": "Rao",
            "auth": {"provider": "local", "password_hash": "hashed"},
        },
    )


@pytest.fixture()
def make_book(session):
    def _make(db=None, **overrides):
        db = session if db is None else db
        data = {"title": "The Guide", "author": "R. K. Narayan", "price": 200, "stock": 10, "weight": 300}
        data.update(overrides)
        book = Book(**data)
        db.add(book)
        db.commit()
        db.refresh(book)
        return book

    return _make


@pytest.fixture()
def make_order(session):
    """Persist an order for (book, quantity) lines without going through checkout."""

    def _make(
        user,
        lines,
        db=None,
        status=OrderStatus.PENDING,
        payment_method=PaymentMethod.RAZORPAY,
        payment_status=PaymentStatus.PENDING,
        created_at=None,
    ):
        db = session if db is None else db
        items = [
            OrderItem(book_id=book.id, quantity=quantity, price=book.price, title=book.title, author=book.author)
            for book, quantity in lines
        ]
        total = sum(book.price * quantity for book, quantity in lines)
        order = Order(
            order_number=generate_order_number(),
            user_id=user.id,
            items=items,
            total_amount=total,
            final_amount=total,
            total_items=sum(quantity for _, quantity in lines),
            total_weight=sum((book.weight or 300) * quantity for book, quantity in lines),
            status=status,
            payment_method=payment_method,
            payment_status=payment_status,
            shipping_address=dict(ADDRESS),
        )
        if created_at is not None:
            order.created_at = created_at
        db.add(order)
        db.commit()
        db.refresh(order)
        return order

    return _make


@pytest.fixture()
def gateway():
    return FakePaymentGateway()


@pytest.fixture()
def checkout_service(gateway):
    return CheckoutService(gateway)
