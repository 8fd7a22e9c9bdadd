# Runtime support for the contrast audit engine: settings and host-call retry

from .settings import AuditSettings, load_settings, validate_settings, DEFAULT_PAGE_BACKGROUND
from .retry import create_lookup_retrying, lookup_node

__all__ = [
    "AuditSettings",
    "load_settings",
    "validate_settings",
    "DEFAULT_PAGE_BACKGROUND",
    "create_lookup_retrying",
    "lookup_node",
]
