from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, func, select

from client_registry.core.config import settings
from client_registry.core.exceptions import (
    ClientAlreadyExists,
    ClientNotFound,
    GeocodingFailure,
    InvalidClientData,
)
from client_registry.core.logging_setup import logger
from client_registry.models.client import Client
from client_registry.schemas.client import ClientPayload
from client_registry.services.contact import ContactService
from client_registry.services.geocoding import GeocodingClient
from client_registry.utils.email_validation import normalize_email
from client_registry.utils.tracing import generate_trace_id

ALREADY_EXISTS_MESSAGE = "Client with this email and SIN number already exists."

# Fields copied from the payload on update. SIN and coordinates are set on create only.
MUTABLE_FIELDS = (
    "name",
    "address",
    "phone_number_1",
    "dial_code_1",
    "phone_number_2",
    "dial_code_2",
    "email",
    "province",
    "postal_code",
    "city",
    "country",
    "notes",
)


def _violation_messages(exc: ValidationError) -> list[str]:
    messages: list[str] = []
    for error in exc.errors():
        original = (error.get("ctx") or {}).get("error")
        if original is not None:
            messages.append(str(original))
        else:
            location = ".".join(str(part) for part in error.get("loc", ()))
            messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return messages


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ClientService:
    """Client records: validation, geocoding, persistence and contact reconciliation."""

    def __init__(self, session: Session, geocoder: GeocodingClient | None = None) -> None:
        self.session = session
        self.geocoder = geocoder or GeocodingClient()
        self.contacts = ContactService(session)

    # Queries ------------------------------------------------------------
    def list_active(self) -> list[Client]:
        trace_id = generate_trace_id()
        logger.info("[TRACE-ID: %s] - Starting retrieval of all clients.", trace_id)
        statement = select(Client).where(Client.deleted.is_(False))
        clients = sorted(self.session.exec(statement).all(), key=lambda client: client.name)
        logger.info(
            "[TRACE-ID: %s] - Retrieval of all clients completed. Number of clients found: %s",
            trace_id,
            len(clients),
        )
        return clients

    def get_by_id(self, client_id: int) -> Client:
        trace_id = generate_trace_id()
        logger.info("[TRACE-ID: %s] - Retrieving client with ID: %s", trace_id, client_id)
        client = self.session.get(Client, client_id)
        if client is None or client.deleted:
            logger.error("[TRACE-ID: %s] - Client with ID: %s not found.", trace_id, client_id)
            raise ClientNotFound(f"Client not found with ID: {client_id}")
        return client

    def get_by_email(self, email: str) -> Client:
        trace_id = generate_trace_id()
        logger.info("[TRACE-ID: %s] - Retrieving client by email: %s", trace_id, email)
        try:
            normalized = normalize_email(email)
        except ValueError:
            logger.error("[TRACE-ID: %s] - Client with email: %s not found.", trace_id, email)
            raise ClientNotFound(f"Client not found with email: {email}")
        # Stored emails are normalized on create/update.
        statement = select(Client).where(Client.email == normalized).where(Client.deleted.is_(False))
        if settings.email_lookup_requires_blank_sin:
            statement = statement.where(Client.sin_number == "")
        client = self.session.exec(statement).first()
        if client is None:
            logger.error("[TRACE-ID: %s] - Client with email: %s not found.", trace_id, email)
            raise ClientNotFound(f"Client not found with email: {email}")
        return client

    def get_by_sin_number(self, sin_number: str) -> Client:
        trace_id = generate_trace_id()
        logger.info("[TRACE-ID: %s] - Retrieving client by SIN number.", trace_id)
        statement = select(Client).where(Client.sin_number == sin_number).where(Client.deleted.is_(False))
        client = self.session.exec(statement).first()
        if client is None:
            logger.error("[TRACE-ID: %s] - Client with the given SIN number not found.", trace_id)
            raise ClientNotFound(f"Client not found with SIN: {sin_number}")
        return client

    def search_by_name(self, name: str) -> list[Client]:
        trace_id = generate_trace_id()
        logger.info("[TRACE-ID: %s] - Searching for clients by name: %s", trace_id, name)
        pattern = f"%{_escape_like((name or '').lower())}%"
        statement = (
            select(Client)
            .where(func.lower(Client.name).like(pattern, escape="\\"))
            .where(Client.deleted.is_(False))
        )
        clients = sorted(self.session.exec(statement).all(), key=lambda client: client.name)
        logger.info(
            "[TRACE-ID: %s] - Search completed. %s clients found for name: %s",
            trace_id,
            len(clients),
            name,
        )
        return clients

    def find_active_by_email_and_sin(self, email: str, sin_number: str | None) -> Client | None:
        statement = (
            select(Client)
            .where(Client.email == email)
            .where(Client.sin_number == sin_number)
            .where(Client.deleted.is_(False))
        )
        return self.session.exec(statement).first()

    # Mutations ----------------------------------------------------------
    def create_client(self, data: ClientPayload | Mapping[str, Any]) -> Client:
        trace_id = generate_trace_id()
        logger.info("[TRACE-ID: %s] - Starting client creation.", trace_id)

        payload = self._validate(data, trace_id)

        if self.find_active_by_email_and_sin(payload.email, payload.sin_number):
            logger.error(
                "[TRACE-ID: %s] - A client with email: %s and the given SIN number already exists.",
                trace_id,
                payload.email,
            )
            raise ClientAlreadyExists(ALREADY_EXISTS_MESSAGE)

        address = payload.formatted_address()
        try:
            latitude, longitude = self.geocoder.resolve(address, trace_id=trace_id)
        except GeocodingFailure as exc:
            logger.error(
                "[TRACE-ID: %s] - Client creation aborted, coordinates unavailable: %s",
                trace_id,
                exc.message,
            )
            raise

        client = Client(
            **{field: getattr(payload, field) for field in MUTABLE_FIELDS},
            sin_number=payload.sin_number,
            latitude=latitude,
            longitude=longitude,
        )
        try:
            self.session.add(client)
            self.session.flush()
            self.contacts.save_all(client, payload.alternative_contacts, trace_id=trace_id)
            self.contacts.add_main_contact(client, payload)
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.error("[TRACE-ID: %s] - Storage rejected duplicate email/SIN pair.", trace_id)
            raise ClientAlreadyExists(ALREADY_EXISTS_MESSAGE) from exc
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("[TRACE-ID: %s] - Failed to persist client.", trace_id)
            raise

        self.session.refresh(client)
        logger.info("[TRACE-ID: %s] - Client created successfully with ID: %s", trace_id, client.id)
        return client

    def update_client(self, client_id: int, data: ClientPayload | Mapping[str, Any]) -> Client:
        trace_id = generate_trace_id()
        logger.info("[TRACE-ID: %s] - Starting update of client with ID: %s", trace_id, client_id)

        client = self._load(client_id, trace_id)

        raw = self._as_mapping(data)
        name = raw.get("name")
        if not isinstance(name, str) or not name:
            logger.error("[TRACE-ID: %s] - Client name is invalid.", trace_id)
            raise InvalidClientData("Client name is invalid")
        payload = self._validate(raw, trace_id)

        for field in MUTABLE_FIELDS:
            setattr(client, field, getattr(payload, field))
        client.touch()

        try:
            # New contacts join client.alternative_contacts through the back-reference.
            self.contacts.reconcile(
                client.alternative_contacts,
                payload.alternative_contacts,
                client,
                trace_id=trace_id,
            )
            self.session.add(client)
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            logger.error("[TRACE-ID: %s] - Storage rejected duplicate email/SIN pair.", trace_id)
            raise ClientAlreadyExists(ALREADY_EXISTS_MESSAGE) from exc
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("[TRACE-ID: %s] - Failed to update client.", trace_id)
            raise

        self.session.refresh(client)
        logger.info("[TRACE-ID: %s] - Client with ID: %s updated successfully.", trace_id, client_id)
        return client

    def soft_delete(self, client_id: int) -> Client:
        trace_id = generate_trace_id()
        logger.info("[TRACE-ID: %s] - Soft deleting client with ID: %s", trace_id, client_id)
        client = self._set_deleted(client_id, True, trace_id)
        logger.info("[TRACE-ID: %s] - Client with ID: %s soft deleted successfully.", trace_id, client_id)
        return client

    def activate(self, client_id: int) -> Client:
        trace_id = generate_trace_id()
        logger.info("[TRACE-ID: %s] - Activating client with ID: %s", trace_id, client_id)
        client = self._set_deleted(client_id, False, trace_id)
        logger.info("[TRACE-ID: %s] - Client with ID: %s activated successfully.", trace_id, client_id)
        return client

    # Helpers ------------------------------------------------------------
    def _set_deleted(self, client_id: int, deleted: bool, trace_id: str) -> Client:
        client = self._load(client_id, trace_id)
        client.deleted = deleted
        client.touch()
        self.session.add(client)
        try:
            self.session.commit()
        except IntegrityError as exc:
            # Reactivating a record whose email/SIN pair is now used by another active client.
            self.session.rollback()
            logger.error("[TRACE-ID: %s] - Storage rejected duplicate email/SIN pair.", trace_id)
            raise ClientAlreadyExists(ALREADY_EXISTS_MESSAGE) from exc
        self.session.refresh(client)
        return client

    def _load(self, client_id: int, trace_id: str) -> Client:
        # Deleted records are loadable here, unlike get_by_id.
        client = self.session.get(Client, client_id)
        if client is None:
            logger.error("[TRACE-ID: %s] - Client with ID: %s not found.", trace_id, client_id)
            raise ClientNotFound(f"Client not found with ID: {client_id}")
        return client

    @staticmethod
    def _as_mapping(data: ClientPayload | Mapping[str, Any]) -> dict[str, Any]:
        if isinstance(data, BaseModel):
            return data.model_dump()
        return dict(data or {})

    def _validate(self, data: ClientPayload | Mapping[str, Any], trace_id: str) -> ClientPayload:
        try:
            return ClientPayload.model_validate(self._as_mapping(data))
        except ValidationError as exc:
            violations = _violation_messages(exc)
            message = ", ".join(violations)
            logger.error("[TRACE-ID: %s] - Invalid client data: %s", trace_id, message)
            raise InvalidClientData(message, violations=violations) from exc
