"""
Secret store adapters.

Provides the secret record model and the Kubernetes-backed store.
"""

from .base import OwnerReference, SecretStore, StoredSecret

__all__ = [
    "OwnerReference",
    "SecretStore",
    "StoredSecret",
]
