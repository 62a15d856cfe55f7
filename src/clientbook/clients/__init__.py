from .client_models import ClientRecord, RemoteUser
from .sample_data import SAMPLE_CLIENTS, sample_records

__all__ = [
    "ClientRecord",
    "RemoteUser",
    "SAMPLE_CLIENTS",
    "sample_records",
]
