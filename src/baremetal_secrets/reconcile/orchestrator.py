"""
Creation and teardown of every secret the provisioning stack needs.

The secrets are described by an explicit role table rather than module
globals, so callers (and tests) can pass their own.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..config import ProvisioningConfig
from ..error_handling import (
    AggregateDeletionError,
    GenerationError,
    SecretNotFoundError,
    SecretsError,
    SecretStageError,
    validate_secret_name,
)
from ..security.certificate_manager import TLS_CERTIFICATE_KEY, TLS_PRIVATE_KEY_KEY
from ..security.credential_encoder import (
    AUTH_CONFIG_KEY,
    HTPASSWD_KEY,
    PASSWORD_KEY,
    USERNAME_KEY,
    encode_credential,
    generate_password,
)
from ..store.base import SecretStore
from .secret_reconciler import ReconcileResult, SecretDataGenerator, SecretReconciler
from .tls_manager import CertificateSource, TLSLifecycleManager

logger = logging.getLogger(__name__)

PasswordGenerator = Callable[[], str]

MARIADB_PASSWORD_KEY = "password"


class SecretRole(Enum):
    """Logical role of each managed secret."""
    MARIADB = "mariadb"
    IRONIC = "ironic"
    IRONIC_RPC = "ironic-rpc"
    INSPECTOR = "inspector"
    TLS = "tls"


@dataclass(frozen=True)
class SecretSpec:
    """Description of one managed secret.

    Attributes:
        name: Secret name
        keys: Data keys the secret holds
        description: Used in stage error messages (e.g. "Ironic password")
        username: Basic-auth user, for credential secrets
        config_section: INI section of the auth config, for credential secrets
    """
    name: str
    keys: tuple[str, ...]
    description: str
    username: Optional[str] = None
    config_section: Optional[str] = None

    def generate(self, password_generator: PasswordGenerator) -> dict[str, str]:
        """Generate fresh data for this secret.

        Raises:
            GenerationError: If the password generator or encoding fails
        """
        try:
            password = password_generator()
        except SecretsError:
            raise
        except Exception as e:
            raise GenerationError(f"failed to generate password for {self.name}: {e}") from e

        if self.username is None:
            data = {MARIADB_PASSWORD_KEY: password}
        else:
            data = encode_credential(
                self.username, password, self.config_section or self.username
            ).to_secret_data()

        if set(data) != set(self.keys):
            raise GenerationError(
                f"generated keys {sorted(data)} for {self.name} do not match {sorted(self.keys)}"
            )
        return data


CREDENTIAL_KEYS = (USERNAME_KEY, PASSWORD_KEY, HTPASSWD_KEY, AUTH_CONFIG_KEY)

DEFAULT_SECRET_SPECS: dict[SecretRole, SecretSpec] = {
    SecretRole.MARIADB: SecretSpec(
        name="metal3-mariadb-password",  # nosec
        keys=(MARIADB_PASSWORD_KEY,),
        description="Mariadb password",
    ),
    SecretRole.IRONIC: SecretSpec(
        name="metal3-ironic-password",  # nosec
        keys=CREDENTIAL_KEYS,
        description="Ironic password",
        username="ironic-user",
        config_section="ironic",
    ),
    SecretRole.IRONIC_RPC: SecretSpec(
        name="metal3-ironic-rpc-password",  # nosec
        keys=CREDENTIAL_KEYS,
        description="Ironic rpc password",
        username="rpc-user",
        config_section="json_rpc",
    ),
    SecretRole.INSPECTOR: SecretSpec(
        name="metal3-ironic-inspector-password",  # nosec
        keys=CREDENTIAL_KEYS,
        description="Inspector password",
        username="inspector-user",
        config_section="inspector",
    ),
    SecretRole.TLS: SecretSpec(
        name="metal3-ironic-tls",  # nosec
        keys=(TLS_CERTIFICATE_KEY, TLS_PRIVATE_KEY_KEY),
        description="TLS certificate",
    ),
}

CREDENTIAL_ROLES = (
    SecretRole.MARIADB,
    SecretRole.IRONIC,
    SecretRole.IRONIC_RPC,
    SecretRole.INSPECTOR,
)


class SecretOrchestrator:
    """Runs the credential reconcilers and the TLS manager as one pass."""

    def __init__(
        self,
        store: SecretStore,
        config: ProvisioningConfig,
        specs: Optional[dict[SecretRole, SecretSpec]] = None,
        password_generator: PasswordGenerator = generate_password,
        certificates: Optional[CertificateSource] = None,
    ):
        """Initialize the orchestrator.

        Args:
            store: Secret store
            config: The owning Provisioning object
            specs: Role table (default: DEFAULT_SECRET_SPECS)
            password_generator: Source of new passwords
            certificates: Certificate generator and expiry checker
        """
        self.store = store
        self.config = config
        self.specs = specs or DEFAULT_SECRET_SPECS
        missing = set(SecretRole) - set(self.specs)
        if missing:
            raise ValueError(f"no secret spec for roles: {sorted(r.value for r in missing)}")
        for spec in self.specs.values():
            validate_secret_name(spec.name)
        tls_keys = {TLS_CERTIFICATE_KEY, TLS_PRIVATE_KEY_KEY}
        if set(self.specs[SecretRole.TLS].keys) != tls_keys:
            raise ValueError(f"TLS secret spec keys must be {sorted(tls_keys)}")
        self.password_generator = password_generator
        self.reconciler = SecretReconciler(store, config)
        self.tls_manager = TLSLifecycleManager(
            store,
            certificates=certificates,
            secret_name=self.specs[SecretRole.TLS].name,
        )

    def generator_for(self, role: SecretRole) -> SecretDataGenerator:
        """Return the data generator of a credential role."""
        if role is SecretRole.TLS:
            raise ValueError("TLS secret data is produced by the TLS lifecycle manager")
        spec = self.specs[role]
        return lambda: spec.generate(self.password_generator)

    def create_all_secrets(self) -> dict[SecretRole, ReconcileResult]:
        """Reconcile every secret, stopping at the first failure.

        Order: Mariadb, Ironic, Ironic RPC, Inspector, then TLS.

        Returns:
            What each reconcile did, by role

        Raises:
            SecretStageError: Naming the failed stage, chained to the cause
        """
        results: dict[SecretRole, ReconcileResult] = {}

        for role in CREDENTIAL_ROLES:
            spec = self.specs[role]
            try:
                results[role] = self.reconciler.reconcile(spec.name, self.generator_for(role))
            except SecretsError as e:
                raise SecretStageError(f"failed to create {spec.description}", e) from e

        tls_spec = self.specs[SecretRole.TLS]
        try:
            results[SecretRole.TLS] = self.tls_manager.reconcile(self.config)
        except SecretsError as e:
            raise SecretStageError(f"failed to create {tls_spec.description}", e) from e

        return results

    def delete_all_secrets(self) -> list[str]:
        """Delete the credential secrets, continuing past failures.

        The TLS secret is left to garbage collection through its owner
        reference. Missing secrets count as deleted.

        Returns:
            Names of the secrets actually deleted

        Raises:
            AggregateDeletionError: Carrying every non-NotFound failure
        """
        deleted: list[str] = []
        failures: list[tuple[str, BaseException]] = []

        for role in (SecretRole.MARIADB, SecretRole.IRONIC, SecretRole.INSPECTOR, SecretRole.IRONIC_RPC):
            name = self.specs[role].name
            try:
                self.store.delete(self.config.namespace, name)
            except SecretNotFoundError:
                logger.debug(f"Secret {self.config.namespace}/{name} already absent")
                continue
            except SecretsError as e:
                failures.append((name, e))
                continue
            deleted.append(name)
            logger.info(f"Deleted secret {self.config.namespace}/{name}")

        if failures:
            raise AggregateDeletionError(failures)
        return deleted


def create_all_secrets(
    store: SecretStore,
    config: ProvisioningConfig,
    **kwargs,
) -> dict[SecretRole, ReconcileResult]:
    """Reconcile every secret for config. See SecretOrchestrator.create_all_secrets."""
    return SecretOrchestrator(store, config, **kwargs).create_all_secrets()


def delete_all_secrets(
    store: SecretStore,
    config: ProvisioningConfig,
    **kwargs,
) -> list[str]:
    """Delete the credential secrets for config. See SecretOrchestrator.delete_all_secrets."""
    return SecretOrchestrator(store, config, **kwargs).delete_all_secrets()
