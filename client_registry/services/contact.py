from __future__ import annotations

from typing import Iterable, Sequence

from sqlmodel import Session

from client_registry.core.logging_setup import logger
from client_registry.models.client import AlternativeContact, Client
from client_registry.schemas.client import AlternativeContactPayload, ClientPayload

MAIN_CONTACT_NOTES = "Main Contact"


class ContactService:
    def __init__(self, session: Session) -> None:
        self.session = session

    def save_all(
        self,
        owner: Client,
        incoming: Iterable[AlternativeContactPayload] | None,
        *,
        trace_id: str | None = None,
    ) -> list[AlternativeContact]:
        """Create one new contact per payload entry. Ids in the payload are ignored."""
        created: list[AlternativeContact] = []
        for payload in incoming or []:
            contact = self._build(owner, payload)
            self.session.add(contact)
            created.append(contact)
        logger.debug(
            "[TRACE-ID: %s] - Saving %s alternative contacts for client: %s",
            trace_id,
            len(created),
            owner.id,
        )
        return created

    def add_main_contact(self, owner: Client, payload: ClientPayload) -> AlternativeContact:
        contact = AlternativeContact(
            client=owner,
            name=payload.name,
            dial_code=payload.dial_code_1,
            phone_number=payload.phone_number_1,
            email=payload.email,
            notes=MAIN_CONTACT_NOTES,
        )
        self.session.add(contact)
        return contact

    def reconcile(
        self,
        existing: Sequence[AlternativeContact],
        incoming: Iterable[AlternativeContactPayload],
        owner: Client,
        *,
        trace_id: str | None = None,
    ) -> list[AlternativeContact]:
        """Merge ``incoming`` into ``existing`` by id.

        Matched contacts are updated in place, everything else is appended as a
        new contact of ``owner``. Contacts missing from ``incoming`` are kept.
        """
        by_id = {contact.id: contact for contact in existing if contact.id is not None}
        result = list(existing)
        updated = added = 0
        for payload in incoming:
            contact = by_id.get(payload.id) if payload.id is not None else None
            if contact is not None:
                self._apply_updates(contact, payload)
                updated += 1
            else:
                contact = self._build(owner, payload)
                result.append(contact)
                added += 1
            self.session.add(contact)
        logger.debug(
            "[TRACE-ID: %s] - Reconciled contacts for client %s: %s updated, %s added",
            trace_id,
            owner.id,
            updated,
            added,
        )
        return result

    @staticmethod
    def _build(owner: Client, payload: AlternativeContactPayload) -> AlternativeContact:
        return AlternativeContact(
            client=owner,
            name=payload.name,
            dial_code=payload.dial_code,
            phone_number=payload.phone_number,
            email=payload.email,
            notes=payload.notes,
        )

    @staticmethod
    def _apply_updates(contact: AlternativeContact, payload: AlternativeContactPayload) -> None:
        contact.name = payload.name
        contact.dial_code = payload.dial_code
        contact.phone_number = payload.phone_number
        contact.email = payload.email
        contact.notes = payload.notes
        contact.touch()
