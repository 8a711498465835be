"""
Abstract base class for secret store implementations.

Defines the secret record and the interface every store adapter implements.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class OwnerReference:
    """A declarative back-link from a secret to the object that owns it.

    The API server's garbage collector deletes the secret once the owner
    is deleted; nothing in this package evaluates the relation.

    Attributes:
        api_version: API group/version of the owner (e.g. metal3.io/v1alpha1)
        kind: Kind of the owner (e.g. Provisioning)
        name: Name of the owner
        uid: UID of the owner
        controller: Whether the owner is the managing controller
        block_owner_deletion: Keep the owner until this secret is collected
    """
    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = True
    block_owner_deletion: bool = True

    def to_dict(self) -> dict:
        """Convert to the Kubernetes metadata.ownerReferences item shape."""
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "uid": self.uid,
            "controller": self.controller,
            "blockOwnerDeletion": self.block_owner_deletion,
        }


@dataclass
class StoredSecret:
    """A named, namespaced key-value record.

    Attributes:
        name: Secret name
        namespace: Secret namespace
        data: Plaintext key-value pairs
        owner_references: Owner back-references
        resource_version: Version read from the store, sent back on update
        secret_type: Kubernetes secret type
        labels: Metadata labels, preserved across updates
        annotations: Metadata annotations, preserved across updates
        finalizers: Metadata finalizers, preserved across updates
    """
    name: str
    namespace: str
    data: dict[str, str] = field(default_factory=dict)
    owner_references: list[OwnerReference] = field(default_factory=list)
    resource_version: Optional[str] = None
    secret_type: str = "Opaque"
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    finalizers: list[str] = field(default_factory=list)

    def has_owner(self) -> bool:
        """Check if the secret carries any owner reference."""
        return len(self.owner_references) > 0

    def controller_reference(self) -> Optional[OwnerReference]:
        """Return the owner reference marked as controller, if any."""
        for ref in self.owner_references:
            if ref.controller:
                return ref
        return None


class SecretStore(ABC):
    """Abstract base class for namespaced secret stores.

    Implementations rely on the backing store's conditional semantics for
    concurrency safety: create fails if the name exists, and update fails
    if the resource version changed since the secret was read.
    """

    @abstractmethod
    def get(self, namespace: str, name: str) -> StoredSecret:
        """Fetch a secret.

        Raises:
            SecretNotFoundError: If the secret does not exist
            SecretStoreError: On any other failure
        """
        pass

    @abstractmethod
    def create(self, secret: StoredSecret) -> StoredSecret:
        """Create a secret.

        Raises:
            SecretConflictError: If a secret with the same name exists
            SecretStoreError: On any other failure
        """
        pass

    @abstractmethod
    def update(self, secret: StoredSecret) -> StoredSecret:
        """Replace an existing secret.

        Raises:
            SecretNotFoundError: If the secret no longer exists
            SecretConflictError: If the secret changed since it was read
            SecretStoreError: On any other failure
        """
        pass

    @abstractmethod
    def delete(self, namespace: str, name: str) -> None:
        """Delete a secret.

        Raises:
            SecretNotFoundError: If the secret does not exist
            SecretStoreError: On any other failure
        """
        pass
