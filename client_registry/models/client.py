from typing import List, Optional

from sqlalchemy import Index, text
from sqlmodel import Field, Relationship

from client_registry.models.base import IntIDModel, TimestampedModel


class Client(IntIDModel, TimestampedModel, table=True):
    __tablename__ = "clients"
    __table_args__ = (
        # Only one active client per (email, SIN) pair.
        Index(
            "uq_clients_email_sin_active",
            "email",
            "sin_number",
            unique=True,
            sqlite_where=text("deleted = 0"),
            postgresql_where=text("deleted = false"),
        ),
    )

    name: str = Field(index=True, max_length=100)
    address: str
    city: str | None = Field(default=None)
    province: str | None = Field(default=None)
    postal_code: str | None = Field(default=None, max_length=32)
    country: str | None = Field(default=None)

    dial_code_1: str | None = Field(default=None, max_length=8)
    phone_number_1: str = Field(max_length=32)
    dial_code_2: str | None = Field(default=None, max_length=8)
    phone_number_2: str | None = Field(default=None, max_length=32)

    email: str = Field(index=True, max_length=255)
    sin_number: str | None = Field(default=None, index=True, max_length=32)
    notes: str | None = Field(default=None)

    latitude: float | None = Field(default=None)
    longitude: float | None = Field(default=None)

    deleted: bool = Field(default=False, index=True)

    alternative_contacts: List["AlternativeContact"] = Relationship(
        back_populates="client",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "AlternativeContact.id",
        },
    )

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class AlternativeContact(IntIDModel, TimestampedModel, table=True):
    __tablename__ = "alternative_contacts"

    client_id: Optional[int] = Field(
        default=None, foreign_key="clients.id", ondelete="CASCADE", index=True, nullable=False
    )
    name: str = Field(max_length=255)
    dial_code: str | None = Field(default=None, max_length=8)
    phone_number: str | None = Field(default=None, max_length=32)
    email: str | None = Field(default=None, max_length=255)
    notes: str | None = Field(default=None)

    client: Optional[Client] = Relationship(back_populates="alternative_contacts")
