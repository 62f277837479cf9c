from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class Book(SQLModel, table=True):
    #main info
    id: Optional[int] = Field(default=None, primary_key=True)
    title: str
    author: str
    publisher: Optional[str] = None
    isbn: Optional[str] = None

    #Shop Details
    price: float = Field(ge=0)
    stock: int = Field(default=0, ge=0)
    available: bool = True
    # True only when a stock commit emptied the shelf and flipped `available`
    auto_disabled: bool = False
    weight: Optional[int] = Field(default=None, description="Weight in grams")

    #timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
