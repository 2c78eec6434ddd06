"""Service layer for FitTrack.

Services hold the business logic shared by the endpoints and the CLI.
"""

from fittrack.services.api_keys import ApiKeyService
from fittrack.services.ingest import BatchResult, IngestionDispatcher, SyncResult

__all__ = [
    "ApiKeyService",
    "BatchResult",
    "IngestionDispatcher",
    "SyncResult",
]
