from client_registry.utils.email_validation import normalize_email
from client_registry.utils.map_links import generate_map_links
from client_registry.utils.tracing import generate_trace_id

__all__ = [
    "generate_map_links",
    "generate_trace_id",
    "normalize_email",
]
