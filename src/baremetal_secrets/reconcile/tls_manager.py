"""
Lifecycle of the Ironic TLS secret.

Unlike the credential secrets, the TLS secret's content is inspected on every
pass: an expired certificate is replaced together with its key. A valid
certificate is never replaced, and an unparsable one aborts the pass instead
of being overwritten.
"""

import logging
from typing import Optional, Protocol

from ..config import ProvisioningConfig
from ..error_handling import SecretNotFoundError, SecretsError, SecretStageError
from ..ownership import has_owner, set_owner
from ..security.certificate_manager import (
    TLS_CERTIFICATE_KEY,
    CertificateManager,
    TLSMaterial,
)
from ..store.base import SecretStore, StoredSecret
from .secret_reconciler import ReconcileResult

logger = logging.getLogger(__name__)

TLS_SECRET_NAME = "metal3-ironic-tls"  # nosec


class CertificateSource(Protocol):
    """Generates certificates and checks their expiry."""

    def generate(self, address: str) -> TLSMaterial: ...

    def is_expired(self, certificate_pem: str) -> bool: ...


class TLSLifecycleManager:
    """Creates, adopts and rotates the TLS secret.

    States of the stored secret and the resulting action:

    - absent: generate and create
    - unowned, valid: set owner, keep certificate
    - unowned, expired: set owner and regenerate in one update
    - owned, valid: nothing
    - owned, expired: regenerate certificate and key in one update
    """

    def __init__(
        self,
        store: SecretStore,
        certificates: Optional[CertificateSource] = None,
        namespace: Optional[str] = None,
        secret_name: str = TLS_SECRET_NAME,
    ):
        """Initialize the manager.

        Args:
            store: Secret store to reconcile against
            certificates: Certificate generator and expiry checker
            namespace: Target namespace (default: the config's namespace)
            secret_name: Name of the TLS secret
        """
        self.store = store
        self.certificates = certificates or CertificateManager()
        self.namespace = namespace
        self.secret_name = secret_name

    def reconcile(self, config: ProvisioningConfig) -> ReconcileResult:
        """Bring the TLS secret to its desired state.

        The certificate is issued for config.provisioning_ip. A change of
        address alone does not trigger a new certificate.

        Args:
            config: The owning Provisioning object

        Returns:
            CREATED, ADOPTED, ROTATED or UNCHANGED

        Raises:
            SecretStageError: Wrapping certificate, ownership or generation
                              failures
            SecretStoreError: On any store failure other than NotFound
        """
        namespace = self.namespace or config.namespace
        try:
            existing = self.store.get(namespace, self.secret_name)
        except SecretNotFoundError:
            return self._create(config, namespace)

        return self._update(config, existing)

    def _generate(self, config: ProvisioningConfig, stage: str) -> TLSMaterial:
        try:
            return self.certificates.generate(config.provisioning_ip)
        except SecretsError as e:
            raise SecretStageError(stage, e) from e

    def _set_owner(self, config: ProvisioningConfig, secret: StoredSecret) -> None:
        try:
            set_owner(config, secret)
        except SecretsError as e:
            raise SecretStageError(
                f"failed to set controller reference of Secret {self.secret_name}", e
            ) from e

    def _create(self, config: ProvisioningConfig, namespace: str) -> ReconcileResult:
        material = self._generate(config, "failed to generate TLS certificate")
        secret = StoredSecret(
            name=self.secret_name,
            namespace=namespace,
            data=material.to_secret_data(),
        )
        self._set_owner(config, secret)
        self.store.create(secret)
        logger.info(f"Created TLS secret {namespace}/{self.secret_name} for {config.provisioning_ip}")
        return ReconcileResult.CREATED

    def _update(self, config: ProvisioningConfig, secret: StoredSecret) -> ReconcileResult:
        adopted = False
        if not has_owner(secret):
            self._set_owner(config, secret)
            adopted = True

        existing_cert = secret.data.get(TLS_CERTIFICATE_KEY, "")
        if existing_cert:
            try:
                expired = self.certificates.is_expired(existing_cert)
            except SecretsError as e:
                raise SecretStageError(
                    "failed to determine expiration date of TLS certificate", e
                ) from e
        else:
            logger.debug(f"TLS secret {secret.namespace}/{secret.name} has no certificate")
            expired = True

        if not adopted and not expired:
            logger.debug(f"TLS secret {secret.namespace}/{secret.name} is owned and valid")
            return ReconcileResult.UNCHANGED

        if expired:
            material = self._generate(config, "failed to generate new TLS certificate")
            secret.data = {**secret.data, **material.to_secret_data()}

        self.store.update(secret)

        if expired:
            logger.info(
                f"Rotated TLS certificate in {secret.namespace}/{secret.name} "
                f"for {config.provisioning_ip}"
            )
            return ReconcileResult.ROTATED

        logger.info(f"Set owner reference on existing TLS secret {secret.namespace}/{secret.name}")
        return ReconcileResult.ADOPTED
