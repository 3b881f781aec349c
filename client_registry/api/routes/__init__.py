from . import clients, health

__all__ = [
    "clients",
    "health",
]
