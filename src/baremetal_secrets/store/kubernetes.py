"""
Kubernetes Secret store.

Reads and writes core/v1 Secrets through the official kubernetes client.
Values are base64-decoded on read and encoded on write, so callers only
ever see plaintext.
"""

import base64
import logging
from typing import Any, Optional

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from ..error_handling import SecretStoreError, map_api_exception, map_transport_error
from .base import OwnerReference, SecretStore, StoredSecret

logger = logging.getLogger(__name__)


def _b64encode(value: str) -> str:
    return base64.b64encode(value.encode("utf-8")).decode("utf-8")


def _b64decode(value: str) -> str:
    return base64.b64decode(value).decode("utf-8")


class KubernetesSecretStore(SecretStore):
    """SecretStore backed by the Kubernetes core/v1 API."""

    def __init__(self, api: Optional[client.CoreV1Api] = None):
        """Initialize the store.

        Args:
            api: CoreV1Api instance. If not provided, one is built from the
                 already-loaded kube config.
        """
        self.api = api or client.CoreV1Api()

    @classmethod
    def from_environment(cls, kubeconfig: Optional[str] = None) -> "KubernetesSecretStore":
        """Build a store from in-cluster config, falling back to kubeconfig.

        Args:
            kubeconfig: Explicit kubeconfig path; skips the in-cluster attempt

        Returns:
            A configured store
        """
        if kubeconfig:
            config.load_kube_config(config_file=kubeconfig)
        else:
            try:
                config.load_incluster_config()
            except ConfigException:
                logger.debug("Not running in a cluster, loading kubeconfig")
                config.load_kube_config()
        return cls(client.CoreV1Api())

    def _call(self, operation: str, namespace: str, name: str, func, /, **kwargs) -> Any:
        try:
            return func(**kwargs)
        except ApiException as e:
            raise map_api_exception(e, operation, namespace, name) from e
        except Urllib3HTTPError as e:
            raise map_transport_error(e, operation, namespace, name) from e

    @staticmethod
    def _to_model(secret: StoredSecret) -> client.V1Secret:
        owner_references = [
            client.V1OwnerReference(
                api_version=ref.api_version,
                kind=ref.kind,
                name=ref.name,
                uid=ref.uid,
                controller=ref.controller,
                block_owner_deletion=ref.block_owner_deletion,
            )
            for ref in secret.owner_references
        ]
        return client.V1Secret(
            api_version="v1",
            kind="Secret",
            metadata=client.V1ObjectMeta(
                name=secret.name,
                namespace=secret.namespace,
                owner_references=owner_references or None,
                resource_version=secret.resource_version,
                labels=secret.labels or None,
                annotations=secret.annotations or None,
                finalizers=secret.finalizers or None,
            ),
            type=secret.secret_type,
            data={k: _b64encode(v) for k, v in secret.data.items()},
        )

    @staticmethod
    def _from_model(model: client.V1Secret) -> StoredSecret:
        meta = model.metadata
        owner_references = [
            OwnerReference(
                api_version=ref.api_version,
                kind=ref.kind,
                name=ref.name,
                uid=ref.uid,
                controller=bool(ref.controller),
                block_owner_deletion=bool(ref.block_owner_deletion),
            )
            for ref in (meta.owner_references or [])
        ]
        try:
            data = {k: _b64decode(v) for k, v in (model.data or {}).items()}
        except ValueError as e:
            raise SecretStoreError(
                f"Secret {meta.namespace}/{meta.name} holds a value that cannot be decoded: {e}"
            ) from e
        return StoredSecret(
            name=meta.name,
            namespace=meta.namespace,
            data=data,
            owner_references=owner_references,
            resource_version=meta.resource_version,
            secret_type=model.type or "Opaque",
            labels=dict(meta.labels or {}),
            annotations=dict(meta.annotations or {}),
            finalizers=list(meta.finalizers or []),
        )

    def get(self, namespace: str, name: str) -> StoredSecret:
        model = self._call(
            "get", namespace, name,
            self.api.read_namespaced_secret,
            name=name, namespace=namespace,
        )
        return self._from_model(model)

    def create(self, secret: StoredSecret) -> StoredSecret:
        model = self._call(
            "create", secret.namespace, secret.name,
            self.api.create_namespaced_secret,
            namespace=secret.namespace, body=self._to_model(secret),
        )
        return self._from_model(model)

    def update(self, secret: StoredSecret) -> StoredSecret:
        # replace carries metadata.resourceVersion, so a concurrent writer
        # makes this call fail with 409 instead of being overwritten
        model = self._call(
            "update", secret.namespace, secret.name,
            self.api.replace_namespaced_secret,
            name=secret.name, namespace=secret.namespace, body=self._to_model(secret),
        )
        return self._from_model(model)

    def delete(self, namespace: str, name: str) -> None:
        self._call(
            "delete", namespace, name,
            self.api.delete_namespaced_secret,
            name=name, namespace=namespace,
        )
