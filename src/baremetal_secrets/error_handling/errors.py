"""
Exception hierarchy for secret reconciliation.

NotFound is expected and routed to the create branch by the reconcilers.
Store errors carry the HTTP status (when known) and whether the caller's
reconcile loop should retry. Everything else aborts the pass.
"""

from typing import Optional


class SecretsError(Exception):
    """Base class for all errors raised by baremetal_secrets."""


class SecretNotFoundError(SecretsError):
    """The named secret does not exist in the namespace."""

    def __init__(self, namespace: str, name: str):
        self.namespace = namespace
        self.name = name
        super().__init__(f'secret "{name}" not found in namespace "{namespace}"')


class SecretStoreError(SecretsError):
    """A store call failed (transport, permission, availability).

    Attributes:
        status: HTTP status code reported by the store, if any
        retryable: Whether re-running the whole pass may succeed
    """

    def __init__(self, message: str, status: Optional[int] = None, retryable: bool = False):
        self.status = status
        self.retryable = retryable
        super().__init__(message)


class SecretConflictError(SecretStoreError):
    """Create found an existing object, or update lost an optimistic-concurrency race."""

    def __init__(self, message: str, status: Optional[int] = 409):
        # The next reconcile pass re-reads the object and converges.
        super().__init__(message, status=status, retryable=True)


class CertificateValidationError(SecretsError):
    """An existing certificate could not be parsed."""


class GenerationError(SecretsError):
    """Password, hash or certificate generation failed."""


class OwnershipError(SecretsError):
    """An owner reference could not be attached to a secret."""


class SecretStageError(SecretsError):
    """Wraps a failure with the provisioning stage it happened in.

    Attributes:
        stage: Short stage description, e.g. "failed to create Ironic password"
        cause: The underlying error
    """

    def __init__(self, stage: str, cause: BaseException):
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage}: {cause}")

    @property
    def root_cause(self) -> BaseException:
        """Follow nested stage errors down to the original failure."""
        cause = self.cause
        while isinstance(cause, SecretStageError):
            cause = cause.cause
        return cause


class AggregateDeletionError(SecretsError):
    """Every non-NotFound failure seen while deleting secrets.

    Attributes:
        errors: List of (secret name, error) pairs, in deletion order
    """

    def __init__(self, errors: list[tuple[str, BaseException]]):
        self.errors = list(errors)
        if len(self.errors) == 1:
            name, err = self.errors[0]
            message = f'failed to delete secret "{name}": {err}'
        else:
            details = ", ".join(f'"{name}": {err}' for name, err in self.errors)
            message = f"failed to delete {len(self.errors)} secrets: [{details}]"
        super().__init__(message)

    @property
    def retryable(self) -> bool:
        """True when every collected failure is retryable."""
        return all(getattr(err, "retryable", False) for _, err in self.errors)
