from client_registry.schemas import client, common, geocoding

__all__ = [
    "client",
    "common",
    "geocoding",
]
