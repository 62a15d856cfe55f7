from .client_registry import ClientRegistry, MutationResult, SyncResult, build_registry

__all__ = [
    "ClientRegistry",
    "MutationResult",
    "SyncResult",
    "build_registry",
]
