from sqlmodel import Session

from client_registry.db.session import get_session
from client_registry.services.geocoding import GeocodingClient, get_geocoding_client


def get_db() -> Session:
    yield from get_session()


def get_geocoder() -> GeocodingClient:
    return get_geocoding_client()
