import logging
from typing import Union

from pydantic import ValidationError
from sqlmodel import Session, select

from bookstore.errors import ValidationFailed
from bookstore.models.cart import Cart
from bookstore.models.user import User
from bookstore.schemas.user_schemas import UserCreate

logger = logging.getLogger(__name__)


def register_user(session: Session, data: Union[UserCreate, dict]) -> User:
    """Create the user together with its empty cart."""
    if not isinstance(data, UserCreate):
        try:
            data = UserCreate.model_validate(data)
        except ValidationError as exc:
            raise ValidationFailed.from_pydantic("Invalid user details", exc) from exc

    existing = session.exec(select(User).where(User.email == data.email)).first()
    if existing:
        raise ValidationFailed("Email already registered")

    user = User(
        email=data.email,
        first_name=data.first_name,
        last_name=data.last_name,
        auth=data.auth.model_dump(),
    )
    session.add(user)
    session.flush()

    session.add(Cart(user_id=user.id))
    session.commit()
    session.refresh(user)

    logger.info(f"Registered {data.auth.provider} user {user.id}")
    return user
