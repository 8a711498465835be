"""
Get-or-create reconciliation for credential secrets.

Credentials are issued once and then left alone: an existing secret is never
regenerated, only adopted by the Provisioning object when it was created
without an owner reference.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from ..config import ProvisioningConfig
from ..error_handling import GenerationError, SecretNotFoundError, SecretsError
from ..ownership import has_owner, set_owner
from ..store.base import SecretStore, StoredSecret

logger = logging.getLogger(__name__)

SecretDataGenerator = Callable[[], dict[str, str]]


class ReconcileResult(Enum):
    """What a reconcile call did to the store."""
    CREATED = "created"
    ADOPTED = "adopted"
    ROTATED = "rotated"
    UNCHANGED = "unchanged"


class SecretReconciler:
    """Reconciles plain credential secrets owned by a Provisioning object.

    Every call performs at most one store mutation (create or update).
    Concurrent calls are safe because create fails when the secret already
    exists and update carries the resource version that was read.
    """

    def __init__(
        self,
        store: SecretStore,
        owner: ProvisioningConfig,
        namespace: Optional[str] = None,
    ):
        """Initialize the reconciler.

        Args:
            store: Secret store to reconcile against
            owner: Provisioning object that owns the secrets
            namespace: Target namespace (default: owner.namespace)
        """
        self.store = store
        self.owner = owner
        self.namespace = namespace or owner.namespace

    def reconcile(self, name: str, generator: SecretDataGenerator) -> ReconcileResult:
        """Ensure the named secret exists and is owned.

        Args:
            name: Secret name
            generator: Produces the secret data; only called when the secret
                       does not exist yet

        Returns:
            CREATED, ADOPTED or UNCHANGED

        Raises:
            OwnershipError: If the owner reference cannot be attached
            GenerationError: If the generator fails
            SecretStoreError: On any store failure other than NotFound
        """
        try:
            existing = self.store.get(self.namespace, name)
        except SecretNotFoundError:
            return self._create(name, generator)

        if has_owner(existing):
            logger.debug(f"Secret {self.namespace}/{name} already exists and is owned")
            return ReconcileResult.UNCHANGED

        set_owner(self.owner, existing)
        self.store.update(existing)
        logger.info(f"Set owner reference on existing secret {self.namespace}/{name}")
        return ReconcileResult.ADOPTED

    def _create(self, name: str, generator: SecretDataGenerator) -> ReconcileResult:
        try:
            data = generator()
        except SecretsError:
            raise
        except Exception as e:
            raise GenerationError(f"failed to generate data for {name}: {e}") from e

        secret = StoredSecret(
            name=name,
            namespace=self.namespace,
            data=data,
        )
        set_owner(self.owner, secret)
        self.store.create(secret)
        logger.info(f"Created secret {self.namespace}/{name}")
        return ReconcileResult.CREATED
