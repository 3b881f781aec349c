# noqa: F401 to ensure models are imported for metadata
from client_registry.models.client import AlternativeContact, Client

__all__ = [
    "AlternativeContact",
    "Client",
]
