"""
Error handling utilities for secret reconciliation.

Provides the error taxonomy, Kubernetes API error mapping and input
validators.
"""

from .errors import (
    SecretsError,
    SecretNotFoundError,
    SecretStoreError,
    SecretConflictError,
    CertificateValidationError,
    GenerationError,
    OwnershipError,
    SecretStageError,
    AggregateDeletionError,
)
from .k8s_handlers import (
    is_retryable_store_error,
    map_api_exception,
    map_transport_error,
)
from .validators import (
    validate_secret_name,
    validate_namespace,
    validate_uid,
    validate_provisioning_ip,
)

__all__ = [
    # Errors
    "SecretsError",
    "SecretNotFoundError",
    "SecretStoreError",
    "SecretConflictError",
    "CertificateValidationError",
    "GenerationError",
    "OwnershipError",
    "SecretStageError",
    "AggregateDeletionError",
    # Kubernetes handlers
    "is_retryable_store_error",
    "map_api_exception",
    "map_transport_error",
    # Validators
    "validate_secret_name",
    "validate_namespace",
    "validate_uid",
    "validate_provisioning_ip",
]
