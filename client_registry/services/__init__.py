from client_registry.services.client import ClientService
from client_registry.services.contact import ContactService
from client_registry.services.geocoding import GeocodingClient

__all__ = [
    "ClientService",
    "ContactService",
    "GeocodingClient",
]
