from sqlmodel import SQLModel, Field , Relationship
from typing import Optional , TYPE_CHECKING

if TYPE_CHECKING:
    from bookstore.models.order import Order

class OrderItem(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: Optional[int] = Field(default=None, foreign_key="order.id", index=True)
    book_id: int = Field(foreign_key="book.id")

    quantity: int = Field(ge=1)
    price: float = Field(ge=0)
    title: str
    author: Optional[str] = None

    # whether this line's quantity is currently off the shelf
    stock_committed: bool = False

    order: Optional["Order"] = Relationship(back_populates="items")
