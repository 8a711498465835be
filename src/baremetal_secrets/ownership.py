"""
Owner references for reconciled secrets.

A secret owned by the Provisioning object is garbage-collected by the API
server when the Provisioning object is deleted. This module only records the
relation; collection is the cluster's job.
"""

from .config import ProvisioningConfig
from .error_handling import OwnershipError
from .store.base import StoredSecret


def has_owner(secret: StoredSecret) -> bool:
    """Check if a secret carries an owner reference."""
    return secret.has_owner()


def set_owner(parent: ProvisioningConfig, child: StoredSecret) -> None:
    """Attach parent as the controller owner of child.

    Calling this again with the same parent leaves child unchanged.

    Args:
        parent: The owning Provisioning object
        child: The secret to mutate

    Raises:
        OwnershipError: If the parent has no name or uid, or if the child
                        is already controlled by a different object
    """
    if not parent.name or not parent.uid:
        raise OwnershipError(
            f'cannot set owner of secret "{child.name}": owner has no name or uid'
        )

    ref = parent.owner_reference()
    existing = child.controller_reference()

    if existing is not None:
        if existing.uid != ref.uid:
            raise OwnershipError(
                f'secret "{child.name}" is already owned by {existing.kind} '
                f'"{existing.name}" ({existing.uid})'
            )
        return

    # Drop a non-controller reference to the same owner before re-adding it
    # as controller, so the owner appears only once.
    child.owner_references = [
        r for r in child.owner_references if r.uid != ref.uid
    ] + [ref]
