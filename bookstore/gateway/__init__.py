from bookstore.gateway.port import PaymentGateway, PaymentIntent
from bookstore.gateway.fake_adapter import FakePaymentGateway
