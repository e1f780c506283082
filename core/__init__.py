"""Core service layer for Quote Manager.

Updates:
  v0.3.0 - 2026-10-07 - Export storage backends and the settings-driven factory.
  v0.2.0 - 2026-09-30 - Export sync engine types and remote source helpers.
  v0.1.0 - 2026-09-18 - Surface QuoteStore, QuoteManager and codec helpers.
"""

from .categories import CATEGORY_ALL, compute_categories, resolve_category_filter
from .codec import (
    QuoteImportResult,
    default_export_filename,
    export_quotes,
    export_quotes_to_path,
    import_quotes,
    read_import_file,
)
from .exceptions import (
    FormatError,
    QuoteManagerError,
    StorageUnavailableError,
    TransportError,
    ValidationError,
)
from .factory import build_quote_manager
from .notifications import (
    Notification,
    NotificationCenter,
    NotificationLevel,
    NotificationStatus,
)
from .persistence import QuotePersistence
from .quote_manager import QuoteManager
from .quote_store import QuoteStore
from .remote import HttpRemoteQuoteSource, RemoteQuoteSource
from .storage import (
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
    RedisKeyValueStore,
)
from .sync import PushOutcome, SyncEngine, SyncOutcome, SyncStatus, SyncStatusUpdate

__all__ = [
    "CATEGORY_ALL",
    "FormatError",
    "HttpRemoteQuoteSource",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "Notification",
    "NotificationCenter",
    "NotificationLevel",
    "NotificationStatus",
    "PushOutcome",
    "QuoteImportResult",
    "QuoteManager",
    "QuoteManagerError",
    "QuotePersistence",
    "QuoteStore",
    "RedisKeyValueStore",
    "RemoteQuoteSource",
    "StorageUnavailableError",
    "SyncEngine",
    "SyncOutcome",
    "SyncStatus",
    "SyncStatusUpdate",
    "TransportError",
    "ValidationError",
    "build_quote_manager",
    "compute_categories",
    "default_export_filename",
    "export_quotes",
    "export_quotes_to_path",
    "import_quotes",
    "read_import_file",
    "resolve_category_filter",
]
