import logging

from bookstore.services.catalog_service import StockAdjustment, bulk_update_stock
from bookstore.services.inventory_service import commit_stock, restore_stock


class TestBulkUpdateStock:
    def test_applies_deltas(self, session, make_book):
        book = make_book(stock=10)

        result = bulk_update_stock(session, [StockAdjustment(book.id, -3)])
        session.commit()

        assert result.ok
        assert result.applied == [book.id]
        session.refresh(book)
        assert book.stock == 7

    def test_never_goes_negative(self, session, make_book):
        book = make_book(stock=2)

        result = bulk_update_stock(session, [StockAdjustment(book.id, -3)])
        session.commit()

        assert not result.ok
        assert result.failed[0].reason == "insufficient stock (available 2, requested 3)"
        session.refresh(book)
        assert book.stock == 2

    def test_missing_book_reported_rest_applied(self, session, make_book):
        book = make_book(stock=5)

        result = bulk_update_stock(session, [StockAdjustment(9999, -1), StockAdjustment(book.id, -1)])
        session.commit()

        assert result.applied == [book.id]
        assert [(f.book_id, f.reason) for f in result.failed] == [(9999, "book not found")]

    def test_available_override(self, session, make_book):
        book = make_book(stock=5, available=True)

        bulk_update_stock(session, [StockAdjustment(book.id, 0, available_override=False)])
        session.commit()

        session.refresh(book)
        assert book.available is False
        assert book.stock == 5


class TestCommitStock:
    def test_decrements_each_line_once(self, session, user, make_book, make_order):
        first = make_book(stock=10)
        second = make_book(title="Malgudi Days", stock=4)
        order = make_order(user, [(first, 3), (second, 1)])

        assert commit_stock(session, order) == []
        assert commit_stock(session, order) == []

        session.refresh(first)
        session.refresh(second)
        assert (first.stock, second.stock) == (7, 3)
        assert order.stock_committed_at is not None
        assert all(item.stock_committed for item in order.items)

    def test_emptied_shelf_is_auto_disabled(self, session, user, make_book, make_order):
        book = make_book(stock=2)
        order = make_order(user, [(book, 2)])

        commit_stock(session, order)

        session.refresh(book)
        assert book.stock == 0
        assert book.available is False
        assert book.auto_disabled is True

    def test_shortfall_becomes_warning(self, session, user, make_book, make_order, caplog):
        scarce = make_book(title="Scarce", stock=1)
        plenty = make_book(title="Plenty", stock=10)
        order = make_order(user, [(scarce, 2), (plenty, 2)])

        with caplog.at_level(logging.WARNING):
            warnings = commit_stock(session, order)

        assert len(warnings) == 1
        assert f"book {scarce.id}" in warnings[0]
        assert "needs stock reconciliation" in caplog.text

        session.refresh(scarce)
        session.refresh(plenty)
        assert (scarce.stock, plenty.stock) == (1, 8)
        committed = {item.book_id: item.stock_committed for item in order.items}
        assert committed == {scarce.id: False, plenty.id: True}


class TestRestoreStock:
    def test_noop_without_commit(self, session, user, make_book, make_order):
        book = make_book(stock=5)
        order = make_order(user, [(book, 2)])

        assert restore_stock(session, order) == []

        session.refresh(book)
        assert book.stock == 5
        assert order.stock_restored_at is None

    def test_puts_back_once(self, session, user, make_book, make_order):
        book = make_book(stock=5)
        order = make_order(user, [(book, 2)])
        commit_stock(session, order)

        restore_stock(session, order)
        restore_stock(session, order)

        session.refresh(book)
        assert book.stock == 5
        assert order.stock_restored_at is not None

    def test_only_committed_lines_come_back(self, session, user, make_book, make_order):
        scarce = make_book(title="Scarce", stock=1)
        plenty = make_book(title="Plenty", stock=10)
        order = make_order(user, [(scarce, 2), (plenty, 2)])
        commit_stock(session, order)

        restore_stock(session, order)

        session.refresh(scarce)
        session.refresh(plenty)
        assert (scarce.stock, plenty.stock) == (1, 10)

    def test_reenables_auto_disabled_book(self, session, user, make_book, make_order):
        book = make_book(stock=1)
        order = make_order(user, [(book, 1)])
        commit_stock(session, order)

        restore_stock(session, order)

        session.refresh(book)
        assert book.stock == 1
        assert book.available is True
        assert book.auto_disabled is False

    def test_admin_disabled_book_stays_disabled(self, session, user, make_book, make_order):
        book = make_book(stock=5, available=False)
        order = make_order(user, [(book, 1)])
        commit_stock(session, order)

        restore_stock(session, order)

        session.refresh(book)
        assert book.stock == 5
        assert book.available is False
