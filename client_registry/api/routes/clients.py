from __future__ import annotations

from typing import Any, List

from fastapi import APIRouter, Body, Depends, Query, Response, status
from sqlmodel import Session

from client_registry.api.deps import get_db, get_geocoder
from client_registry.models.client import Client
from client_registry.schemas.client import ClientRead
from client_registry.services.client import ClientService
from client_registry.services.geocoding import GeocodingClient
from client_registry.utils.map_links import generate_map_links

router = APIRouter(prefix="/clients", tags=["clients"])


def _service(session: Session, geocoder: GeocodingClient) -> ClientService:
    return ClientService(session, geocoder)


def _serialize_client(client: Client) -> ClientRead:
    read = ClientRead.model_validate(client, from_attributes=True)
    if not client.has_coordinates:
        return read
    return read.model_copy(update={"map_links": generate_map_links(client.latitude, client.longitude)})


@router.get("", response_model=List[ClientRead])
def list_clients(
    session: Session = Depends(get_db),
    geocoder: GeocodingClient = Depends(get_geocoder),
) -> List[ClientRead]:
    clients = _service(session, geocoder).list_active()
    return [_serialize_client(client) for client in clients]


@router.get("/search", response_model=List[ClientRead])
def search_clients_by_name(
    name: str = Query(...),
    session: Session = Depends(get_db),
    geocoder: GeocodingClient = Depends(get_geocoder),
) -> List[ClientRead]:
    clients = _service(session, geocoder).search_by_name(name)
    return [_serialize_client(client) for client in clients]


@router.get("/search-by-email", response_model=ClientRead)
def get_client_by_email(
    email: str = Query(...),
    session: Session = Depends(get_db),
    geocoder: GeocodingClient = Depends(get_geocoder),
) -> ClientRead:
    return _serialize_client(_service(session, geocoder).get_by_email(email))


@router.get("/search-by-sin", response_model=ClientRead)
def get_client_by_sin_number(
    sin: str = Query(...),
    session: Session = Depends(get_db),
    geocoder: GeocodingClient = Depends(get_geocoder),
) -> ClientRead:
    return _serialize_client(_service(session, geocoder).get_by_sin_number(sin))


@router.patch("/activate/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def activate_client(
    client_id: int,
    session: Session = Depends(get_db),
    geocoder: GeocodingClient = Depends(get_geocoder),
) -> Response:
    _service(session, geocoder).activate(client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{client_id}", response_model=ClientRead)
def get_client(
    client_id: int,
    session: Session = Depends(get_db),
    geocoder: GeocodingClient = Depends(get_geocoder),
) -> ClientRead:
    return _serialize_client(_service(session, geocoder).get_by_id(client_id))


# The body is validated by ClientService so that every violation is reported in one message.
@router.post("", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
def create_client(
    payload: dict[str, Any] = Body(...),
    session: Session = Depends(get_db),
    geocoder: GeocodingClient = Depends(get_geocoder),
) -> ClientRead:
    client = _service(session, geocoder).create_client(payload)
    return _serialize_client(client)


@router.put("/{client_id}", response_model=ClientRead)
def update_client(
    client_id: int,
    payload: dict[str, Any] = Body(...),
    session: Session = Depends(get_db),
    geocoder: GeocodingClient = Depends(get_geocoder),
) -> ClientRead:
    client = _service(session, geocoder).update_client(client_id, payload)
    return _serialize_client(client)


@router.patch("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
def soft_delete_client(
    client_id: int,
    session: Session = Depends(get_db),
    geocoder: GeocodingClient = Depends(get_geocoder),
) -> Response:
    _service(session, geocoder).soft_delete(client_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
