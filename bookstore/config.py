from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./bookstore.db"

    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    currency: str = "INR"

    # Cart & delivery
    free_delivery_threshold: float = 1500
    default_book_weight: int = 300  # grams
    max_quantity_per_line: int = 10

    # Orders
    payment_expiry_days: int = 7
    estimated_delivery_days: int = 7
    tracking_url_template: str = "https://tracking.example.com/{tracking_number}"

    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "BOOKSTORE_"
        extra = "allow"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
