"""
Kubernetes API error handling utilities.

Maps ApiException status codes to the secret error taxonomy and determines
which errors are worth retrying by the enclosing reconcile loop.
"""

from typing import Any

from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from .errors import (
    SecretConflictError,
    SecretNotFoundError,
    SecretStageError,
    SecretStoreError,
)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


def is_retryable_store_error(exception: Any) -> bool:
    """Determine if a store error is retryable.

    Transient errors like throttling, server errors, optimistic-concurrency
    conflicts and dropped connections should be retried by re-running the
    whole reconcile pass with exponential backoff.

    Args:
        exception: The exception to check

    Returns:
        True if the error is retryable, False otherwise
    """
    if isinstance(exception, SecretStageError):
        exception = exception.root_cause

    if isinstance(exception, SecretStoreError):
        return exception.retryable

    # AggregateDeletionError exposes its own verdict
    retryable = getattr(exception, "retryable", None)
    if isinstance(retryable, bool):
        return retryable

    if isinstance(exception, ApiException):
        return exception.status in RETRYABLE_STATUS_CODES

    return isinstance(exception, Urllib3HTTPError)


def map_api_exception(
    error: ApiException,
    operation: str,
    namespace: str,
    name: str,
) -> Exception:
    """Map a Kubernetes ApiException to a secrets error.

    Args:
        error: The exception raised by the Kubernetes client
        operation: Verb of the failed call (e.g., "get", "update")
        namespace: Namespace of the secret
        name: Name of the secret

    Returns:
        The error to raise in place of the ApiException
    """
    status = error.status

    if status == 404:
        return SecretNotFoundError(namespace, name)

    if status == 409:
        return SecretConflictError(
            f'conflict during {operation} of secret "{name}" in namespace '
            f'"{namespace}": {error.reason}'
        )

    if status in (401, 403):
        return SecretStoreError(
            f'permission denied during {operation} of secret "{name}" in '
            f'namespace "{namespace}": {error.reason}',
            status=status,
        )

    if status == 422:
        return SecretStoreError(
            f'invalid secret "{name}" rejected during {operation}: {error.reason}',
            status=status,
        )

    return SecretStoreError(
        f'{operation} of secret "{name}" in namespace "{namespace}" failed: '
        f"{status} {error.reason}",
        status=status,
        retryable=status in RETRYABLE_STATUS_CODES,
    )


def map_transport_error(
    error: Urllib3HTTPError,
    operation: str,
    namespace: str,
    name: str,
) -> SecretStoreError:
    """Map a connection-level failure (no HTTP response) to a retryable store error."""
    return SecretStoreError(
        f'{operation} of secret "{name}" in namespace "{namespace}" failed: {error}',
        retryable=True,
    )
