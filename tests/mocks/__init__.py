"""Mock implementations for baremetal-secrets tests.

Provides mock objects for:
- The Secret store (in-memory, Kubernetes-like conflict semantics)
"""

from .mock_secret_store import MockSecretStore, StoreCall

__all__ = ["MockSecretStore", "StoreCall"]
