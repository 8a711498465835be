"""
Secret reconciliation.

Provides the credential secret reconciler, the TLS lifecycle manager and the
orchestrator that runs them as one provisioning pass.
"""

from .secret_reconciler import ReconcileResult, SecretReconciler
from .tls_manager import TLS_SECRET_NAME, TLSLifecycleManager
from .orchestrator import (
    DEFAULT_SECRET_SPECS,
    SecretOrchestrator,
    SecretRole,
    SecretSpec,
    create_all_secrets,
    delete_all_secrets,
)

__all__ = [
    "ReconcileResult",
    "SecretReconciler",
    "TLS_SECRET_NAME",
    "TLSLifecycleManager",
    "DEFAULT_SECRET_SPECS",
    "SecretOrchestrator",
    "SecretRole",
    "SecretSpec",
    "create_all_secrets",
    "delete_all_secrets",
]
