from __future__ import annotations

from pydantic import (
    BaseModel,
    ConfigDict,
    SerializerFunctionWrapHandler,
    ValidationInfo,
    field_validator,
    model_serializer,
)

from client_registry.schemas.common import IDModel, Timestamped
from client_registry.utils.email_validation import normalize_email

_MANDATORY_MESSAGES = {
    "city": "City is mandatory",
    "country": "Country is mandatory",
    "province": "Province is mandatory",
    "postal_code": "Postal code is mandatory",
    "address": "Address is mandatory",
    "dial_code_1": "Dial code 1 is mandatory",
    "phone_number_1": "Phone number 1 is mandatory",
    "sin_number": "SIN number is mandatory",
}

_CONTACT_MANDATORY_MESSAGES = {
    "name": "Name is mandatory",
    "dial_code": "Dial code is mandatory",
    "phone_number": "Phone number is mandatory",
}


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class AlternativeContactPayload(BaseModel):
    """Alternative contact as received from callers. `id` is only meaningful on update."""

    model_config = ConfigDict(validate_default=True)

    id: int | None = None
    name: str | None = None
    dial_code: str | None = None
    phone_number: str | None = None
    email: str | None = None
    notes: str | None = None

    @field_validator("name", "dial_code", "phone_number")
    @classmethod
    def require_value(cls, value: str | None, info: ValidationInfo) -> str | None:
        if _is_blank(value):
            raise ValueError(_CONTACT_MANDATORY_MESSAGES[info.field_name])
        return value

    @field_validator("email")
    @classmethod
    def validate_optional_email(cls, value: str | None) -> str | None:
        if _is_blank(value):
            return None
        return normalize_email(value)


class ClientPayload(BaseModel):
    """Client data accepted by create and update."""

    model_config = ConfigDict(validate_default=True)

    name: str | None = None
    city: str | None = None
    country: str | None = None
    province: str | None = None
    postal_code: str | None = None
    address: str | None = None
    dial_code_1: str | None = None
    phone_number_1: str | None = None
    dial_code_2: str | None = None
    phone_number_2: str | None = None
    email: str | None = None
    sin_number: str | None = None
    notes: str | None = None
    alternative_contacts: list[AlternativeContactPayload] | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str | None) -> str | None:
        if value is None:
            raise ValueError("Client name cannot be null")
        if not 2 <= len(value) <= 100:
            raise ValueError("Client name must be between 2 and 100 characters")
        return value

    @field_validator(*_MANDATORY_MESSAGES)
    @classmethod
    def require_value(cls, value: str | None, info: ValidationInfo) -> str | None:
        if _is_blank(value):
            raise ValueError(_MANDATORY_MESSAGES[info.field_name])
        return value

    @field_validator("email")
    @classmethod
    def validate_email(cls, value: str | None) -> str | None:
        if _is_blank(value):
            raise ValueError("Email is mandatory")
        return normalize_email(value)

    @field_validator("alternative_contacts")
    @classmethod
    def require_contacts(
        cls, value: list[AlternativeContactPayload] | None
    ) -> list[AlternativeContactPayload] | None:
        if not value:
            raise ValueError("At least one alternative contact is required")
        return value

    def formatted_address(self) -> str:
        return f"{self.address}, {self.city}, {self.province}, {self.postal_code}"


class AlternativeContactRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    name: str
    dial_code: str | None = None
    phone_number: str | None = None
    email: str | None = None
    notes: str | None = None


class ClientRead(IDModel, Timestamped):
    name: str
    city: str | None = None
    province: str | None = None
    postal_code: str | None = None
    address: str
    dial_code_1: str | None = None
    phone_number_1: str
    dial_code_2: str | None = None
    phone_number_2: str | None = None
    email: str
    country: str | None = None
    notes: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    deleted: bool = False
    map_links: dict[str, str] | None = None
    alternative_contacts: list[AlternativeContactRead] = []

    @model_serializer(mode="wrap")
    def _omit_missing_links(self, handler: SerializerFunctionWrapHandler):
        data = handler(self)
        if data.get("map_links") is None:
            data.pop("map_links", None)
        return data
