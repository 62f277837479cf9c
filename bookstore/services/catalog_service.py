import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from sqlalchemy import and_, case, update
from sqlmodel import Session

from bookstore.config import settings
from bookstore.errors import NotFound
from bookstore.models.book import Book

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockAdjustment:
    book_id: int
    delta: int
    available_override: Optional[bool] = None


@dataclass(frozen=True)
class StockFailure:
    book_id: int
    delta: int
    reason: str


@dataclass
class StockUpdateResult:
    applied: List[int] = field(default_factory=list)
    failed: List[StockFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def find_book(session: Session, book_id: int, *, required: bool = True) -> Optional[Book]:
    """Read the book straight from the database, bypassing the identity map."""
    book = session.get(Book, book_id, populate_existing=True)
    if not book and required:
        raise NotFound("Book not found", detail={"message": "Book not found", "book_id": book_id})
    return book


def book_weight(book: Book) -> int:
    return book.weight or settings.default_book_weight


def _adjustment_statement(adj: StockAdjustment, now: datetime):
    new_stock = Book.stock + adj.delta
    stmt = update(Book).where(Book.id == adj.book_id)

    if adj.delta < 0:
        # conditional decrement: never take stock below zero
        stmt = stmt.where(Book.stock >= -adj.delta)
        available = case((new_stock <= 0, False), else_=Book.available)
        auto_disabled = case(
            (and_(new_stock <= 0, Book.available == True), True),  # noqa: E712
            else_=Book.auto_disabled,
        )
    else:
        # only shelves emptied by a commit come back on their own
        available = case((Book.auto_disabled == True, True), else_=Book.available)  # noqa: E712
        auto_disabled = False

    if adj.available_override is not None:
        available = adj.available_override
        auto_disabled = False

    return (
        stmt.values(stock=new_stock, available=available, auto_disabled=auto_disabled, updated_at=now)
        .execution_options(synchronize_session=False)
    )


def bulk_update_stock(session: Session, adjustments: Sequence[StockAdjustment]) -> StockUpdateResult:
    """
    Apply stock deltas as one batch of single-row atomic UPDATEs.

    A row that cannot be updated (missing book, not enough stock) is reported
    in ``failed`` and the rest of the batch still applies. Database errors
    propagate; the caller owns the transaction.
    """
    result = StockUpdateResult()
    now = datetime.utcnow()

    session.flush()

    for adj in adjustments:
        if adj.delta == 0 and adj.available_override is None:
            continue

        rowcount = session.execute(_adjustment_statement(adj, now)).rowcount

        if rowcount:
            result.applied.append(adj.book_id)
            continue

        book = session.get(Book, adj.book_id, populate_existing=True)
        if not book:
            reason = "book not found"
        else:
            reason = f"insufficient stock (available {book.stock}, requested {-adj.delta})"
        logger.warning(f"Stock update skipped for book {adj.book_id}: {reason}")
        result.failed.append(StockFailure(book_id=adj.book_id, delta=adj.delta, reason=reason))

    _expire_books(session, {adj.book_id for adj in adjustments})
    return result


def _expire_books(session: Session, book_ids: set):
    for obj in list(session.identity_map.values()):
        if isinstance(obj, Book) and obj.id in book_ids:
            session.expire(obj)
