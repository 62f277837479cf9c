from sqlmodel import SQLModel, create_engine
from bookstore.config import settings


def build_engine(database_url: str = settings.database_url, **kwargs):
    if database_url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    else:
        kwargs.setdefault("pool_pre_ping", True)   # checks dead connections
        kwargs.setdefault("pool_recycle", 1800)    # refresh every 30 min
    return create_engine(database_url, echo=False, **kwargs)


engine = build_engine()


def create_db_and_tables(bind=None):
    from bookstore.models import user, book, cart, order, order_item, order_event  # noqa: F401
    SQLModel.metadata.create_all(bind or engine)
