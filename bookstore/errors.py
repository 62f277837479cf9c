from typing import Any, Optional


class BookstoreError(Exception):
    """
    Base error for the cart/checkout core.

    Carries ``status_code`` and ``detail`` like FastAPI's HTTPException so an
    outer HTTP layer can translate it directly.
    """

    status_code: int = 400

    def __init__(self, message: str, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail if detail is not None else message


class NotFound(BookstoreError):
    status_code = 404


class Unavailable(BookstoreError):
    pass


class UnavailableItems(Unavailable):
    def __init__(self, titles: list[str]):
        super().__init__(
            "Some books are not available",
            detail={"message": "Some books are not available", "unavailable_books": titles},
        )
        self.titles = titles


class InsufficientStock(BookstoreError):
    def __init__(self, message: str, items: Optional[list[dict]] = None):
        items = items or []
        super().__init__(message, detail={"message": message, "out_of_stock_books": items})
        self.items = items


class QuantityLimitExceeded(BookstoreError):
    def __init__(self, limit: int):
        message = f"Cannot add more than {limit} of the same book"
        super().__init__(message, detail={"message": message, "limit": limit})
        self.limit = limit


class InvalidTransition(BookstoreError):
    status_code = 409

    def __init__(self, current: str, requested: str):
        message = f"Cannot move order from {current} to {requested}"
        super().__init__(message, detail={"message": message, "from": current, "to": requested})
        self.current = current
        self.requested = requested


class PaymentVerificationFailed(BookstoreError):
    pass


class PaymentGatewayError(BookstoreError):
    status_code = 502


class ValidationFailed(BookstoreError):
    status_code = 422

    def __init__(self, message: str, errors: Optional[list[str]] = None):
        errors = errors or []
        super().__init__(message, detail={"message": message, "errors": errors})
        self.errors = errors

    @classmethod
    def from_pydantic(cls, message: str, exc) -> "ValidationFailed":
        errors = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" if err.get("loc") else err["msg"]
            for err in exc.errors()
        ]
        return cls(message, errors)
