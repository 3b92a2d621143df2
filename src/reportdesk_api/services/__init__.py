"""Service layer for business logic.

Services flush but never commit; each route commits once per request.
"""

from reportdesk_api.services.activity import record_activity
from reportdesk_api.services.storage import FileStorage, LocalFileStorage, get_file_storage

__all__ = [
    "FileStorage",
    "LocalFileStorage",
    "get_file_storage",
    "record_activity",
]
