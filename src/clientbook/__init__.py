"""clientbook: local client list with a live view and best-effort remote import."""

__version__ = "0.1.0"
