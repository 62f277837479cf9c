from bookstore.models.user import User
from bookstore.models.book import Book
from bookstore.models.cart import Cart, CartItem
from bookstore.models.order_item import OrderItem
from bookstore.models.order import Order
from bookstore.models.order_event import OrderEvent

# add ALL models here
