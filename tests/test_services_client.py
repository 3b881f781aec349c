import pytest
from sqlmodel import Session, func, select

from client_registry.core.config import settings
from client_registry.core.exceptions import (
    ClientAlreadyExists,
    ClientNotFound,
    GeocodingFailure,
    InvalidClientData,
)
from client_registry.models.client import AlternativeContact, Client
from client_registry.services.client import ClientService

TORONTO = (43.6532, -79.3832)


def _count(db_session: Session, model) -> int:
    return db_session.exec(select(func.count()).select_from(model)).one()


def _seed(db_session: Session, name: str, *, deleted: bool = False, **fields) -> Client:
    data = {
        "address": "1 Main St",
        "phone_number_1": "5550000",
        "email": f"{name.lower().replace(' ', '.')}@example.com",
        "sin_number": f"sin-{name}",
    }
    data.update(fields)
    record = Client(name=name, deleted=deleted, **data)
    db_session.add(record)
    db_session.commit()
    db_session.refresh(record)
    return record


@pytest.fixture()
def service(db_session: Session, geocoder) -> ClientService:
    return ClientService(db_session, geocoder)


def test_create_client_persists_coordinates_and_contacts(service, db_session, geocoding_provider, make_payload):
    record = service.create_client(make_payload())

    assert record.id is not None
    assert (record.latitude, record.longitude) == TORONTO
    assert record.deleted is False

    request = geocoding_provider.requests[0]
    assert request.url.params["address"] == "100 Queen St W, Toronto, ON, M5H 2N2"

    contacts = db_session.exec(
        select(AlternativeContact).where(AlternativeContact.client_id == record.id).order_by(AlternativeContact.id)
    ).all()
    assert [contact.name for contact in contacts] == ["John Doe", "Jane Doe"]
    assert contacts[1].notes == "Main Contact"
    assert contacts[1].phone_number == "4165550100"
    assert contacts[1].email == "jane@example.com"


def test_create_client_rejects_duplicate_email_and_sin(service, db_session, geocoding_provider, make_payload):
    service.create_client(make_payload())
    geocoding_provider.requests.clear()

    with pytest.raises(ClientAlreadyExists):
        service.create_client(make_payload(name="Someone Else"))

    assert geocoding_provider.requests == []
    assert _count(db_session, Client) == 1


def test_create_client_allows_pair_owned_by_deleted_client(service, db_session, make_payload):
    first = service.create_client(make_payload())
    service.soft_delete(first.id)

    second = service.create_client(make_payload())

    assert second.id != first.id
    assert _count(db_session, Client) == 2


def test_create_client_validates_before_geocoding(service, db_session, geocoding_provider, make_payload):
    with pytest.raises(InvalidClientData) as exc_info:
        service.create_client(make_payload(city=None, email="not-an-email", alternative_contacts=[]))

    message = str(exc_info.value)
    assert "City is mandatory" in message
    assert "Invalid email format" in message
    assert "At least one alternative contact is required" in message
    assert ", " in message
    assert len(exc_info.value.violations) == 3
    assert geocoding_provider.requests == []
    assert _count(db_session, Client) == 0


def test_create_client_validates_name_length_and_contacts(service, make_payload):
    with pytest.raises(InvalidClientData) as exc_info:
        service.create_client(
            make_payload(
                name="J",
                alternative_contacts=[{"name": "", "dial_code": "+1", "phone_number": "1", "email": "bad"}],
            )
        )

    message = str(exc_info.value)
    assert "Client name must be between 2 and 100 characters" in message
    assert "Name is mandatory" in message
    assert "Invalid email format" in message


def test_create_client_aborts_when_geocoding_fails(service, db_session, geocoding_provider, make_payload):
    geocoding_provider.status = "ZERO_RESULTS"
    geocoding_provider.results = []

    with pytest.raises(GeocodingFailure):
        service.create_client(make_payload())

    assert _count(db_session, Client) == 0
    assert _count(db_session, AlternativeContact) == 0


def test_list_active_orders_by_name_and_skips_deleted(service, db_session):
    _seed(db_session, "alice")
    _seed(db_session, "Bob")
    _seed(db_session, "Carol", deleted=True)
    _seed(db_session, "Aaron")

    names = [record.name for record in service.list_active()]

    assert names == ["Aaron", "Bob", "alice"]


def test_search_by_name_is_case_insensitive(service, db_session):
    _seed(db_session, "Maria Silva")
    _seed(db_session, "Mario Rossi")
    _seed(db_session, "John Marsh")
    _seed(db_session, "Marion Deleted", deleted=True)

    names = [record.name for record in service.search_by_name("MAR")]

    assert names == ["John Marsh", "Maria Silva", "Mario Rossi"]
    assert service.search_by_name("100%") == []


def test_get_by_id_hides_deleted_clients(service, db_session):
    active = _seed(db_session, "Active")
    deleted = _seed(db_session, "Gone", deleted=True)

    assert service.get_by_id(active.id).name == "Active"
    with pytest.raises(ClientNotFound):
        service.get_by_id(deleted.id)
    with pytest.raises(ClientNotFound):
        service.get_by_id(12345)


def test_get_by_email_and_sin(service, db_session):
    record = _seed(db_session, "Lookup", email="lookup@example.com", sin_number="123456789")

    assert service.get_by_email("lookup@example.com").id == record.id
    assert service.get_by_sin_number("123456789").id == record.id
    with pytest.raises(ClientNotFound):
        service.get_by_email("missing@example.com")
    with pytest.raises(ClientNotFound):
        service.get_by_sin_number("000000000")


def test_get_by_email_legacy_mode_requires_blank_sin(service, db_session, monkeypatch):
    monkeypatch.setattr(settings, "email_lookup_requires_blank_sin", True)
    _seed(db_session, "With Sin", email="with.sin@example.com", sin_number="123")
    blank = _seed(db_session, "Blank Sin", email="blank@example.com", sin_number="")

    assert service.get_by_email("blank@example.com").id == blank.id
    with pytest.raises(ClientNotFound):
        service.get_by_email("with.sin@example.com")


def test_update_client_overwrites_fields_and_reconciles_contacts(service, geocoding_provider, make_payload):
    record = service.create_client(make_payload())
    existing_ids = [contact.id for contact in record.alternative_contacts]
    john_id = next(contact.id for contact in record.alternative_contacts if contact.name == "John Doe")
    geocoding_calls_before = len(geocoding_provider.requests)

    updated = service.update_client(
        record.id,
        make_payload(
            name="Jane Smith",
            address="200 King St W",
            city="Ottawa",
            notes=None,
            alternative_contacts=[
                {"id": john_id, "name": "John Smith", "dial_code": "+1", "phone_number": "6135550101"},
                {"name": "Neighbour", "dial_code": "+1", "phone_number": "6135550102"},
            ],
        ),
    )

    assert updated.name == "Jane Smith"
    assert updated.city == "Ottawa"
    assert updated.notes is None
    assert updated.updated_at is not None
    assert (updated.latitude, updated.longitude) == TORONTO
    assert len(geocoding_provider.requests) == geocoding_calls_before

    contacts = {contact.id: contact for contact in updated.alternative_contacts}
    assert set(existing_ids) <= set(contacts)
    assert contacts[john_id].name == "John Smith"
    assert len(contacts) == 3
    assert "Neighbour" in {contact.name for contact in contacts.values()}


def test_update_client_requires_name(service, db_session, make_payload):
    record = _seed(db_session, "Named")

    with pytest.raises(InvalidClientData) as exc_info:
        service.update_client(record.id, make_payload(name=""))

    assert str(exc_info.value) == "Client name is invalid"


def test_update_client_runs_full_validation(service, db_session, make_payload):
    record = _seed(db_session, "Named")

    with pytest.raises(InvalidClientData) as exc_info:
        service.update_client(record.id, make_payload(country=None))

    assert "Country is mandatory" in str(exc_info.value)


def test_update_client_loads_deleted_records(service, db_session, make_payload):
    record = _seed(db_session, "Hidden", deleted=True)

    updated = service.update_client(record.id, make_payload(name="Still Hidden"))

    assert updated.name == "Still Hidden"
    assert updated.deleted is True


def test_update_client_missing(service, make_payload):
    with pytest.raises(ClientNotFound):
        service.update_client(404, make_payload())


def test_soft_delete_and_activate_are_idempotent(service, db_session):
    record = _seed(db_session, "Toggle")

    assert service.soft_delete(record.id).deleted is True
    assert service.soft_delete(record.id).deleted is True
    assert service.activate(record.id).deleted is False
    assert service.activate(record.id).deleted is False


def test_soft_delete_and_activate_missing_client(service):
    with pytest.raises(ClientNotFound):
        service.soft_delete(999)
    with pytest.raises(ClientNotFound):
        service.activate(999)


def test_activate_rejects_conflicting_active_client(service, db_session):
    old = _seed(db_session, "Old", deleted=True, email="dup@example.com", sin_number="111")
    _seed(db_session, "New", email="dup@example.com", sin_number="111")

    with pytest.raises(ClientAlreadyExists):
        service.activate(old.id)

    db_session.expire_all()
    assert db_session.get(Client, old.id).deleted is True


def test_get_by_email_matches_address_as_registered(service, make_payload):
    record = service.create_client(make_payload(email="Jane@Example.COM"))

    assert record.email == "Jane@example.com"
    assert service.get_by_email("Jane@Example.COM").id == record.id
    assert service.get_by_email("Jane@example.com").id == record.id
    with pytest.raises(ClientNotFound):
        service.get_by_email("not-an-email")


def test_update_client_keeps_stored_sin(service, db_session, make_payload):
    record = service.create_client(make_payload())
    original_sin = record.sin_number

    updated = service.update_client(record.id, make_payload(sin_number="111111111"))

    assert updated.sin_number == original_sin
    assert service.get_by_sin_number(original_sin).id == record.id


def test_touch_records_timezone_aware_timestamp(db_session):
    record = _seed(db_session, "Stamped")

    record.touch()

    assert record.updated_at.tzinfo is not None
