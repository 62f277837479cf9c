from pydantic import BaseModel, field_validator

PLACEHOLDER = "Not provided"


class Address(BaseModel):
    house_number: str
    street: str
    city: str
    state: str
    zip_code: str
    country: str = "India"

    @field_validator("house_number", "street", "city", "state")
    @classmethod
    def must_be_filled(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("is required")
        if value == PLACEHOLDER:
            raise ValueError("please provide complete address details")
        return value

    @field_validator("zip_code")
    @classmethod
    def six_digit_zip(cls, value: str) -> str:
        value = value.strip()
        if not (len(value) == 6 and value.isdigit()):
            raise ValueError("ZIP code must be 6 digits")
        if value == "000000":
            raise ValueError("please provide a valid ZIP code")
        return value
