from .live_query import LiveQuery, Subscription
from .local_store import LocalStore

__all__ = [
    "LiveQuery",
    "LocalStore",
    "Subscription",
]
