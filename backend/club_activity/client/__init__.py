from .api import ApiClient, Navigator, get_error_message, resolve_base_url
from .session_store import SESSION_KEY, SessionStore
from .storage import FileStorage, KeyValueStorage, MemoryStorage

__all__ = [
    "ApiClient",
    "FileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "Navigator",
    "SESSION_KEY",
    "SessionStore",
    "get_error_message",
    "resolve_base_url",
]
