"""
Configuration handling for baremetal-secrets.

Describes the Provisioning object that owns the secrets: its identity (used
for the owner reference), the namespace secrets live in, and the
provisioning address the TLS certificate is issued for.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from .error_handling.validators import (
    validate_namespace,
    validate_provisioning_ip,
    validate_uid,
)
from .store.base import OwnerReference

DEFAULT_API_VERSION = "metal3.io/v1alpha1"
DEFAULT_KIND = "Provisioning"


@dataclass
class ProvisioningConfig:
    """Configuration for the owning Provisioning object.

    Attributes:
        name: Name of the Provisioning object
        uid: UID of the Provisioning object
        namespace: Namespace the secrets are reconciled into
        provisioning_ip: Address the TLS certificate is bound to
        api_version: API group/version of the Provisioning object
        kind: Kind of the Provisioning object
    """
    name: str
    uid: str
    namespace: str
    provisioning_ip: str
    api_version: str = DEFAULT_API_VERSION
    kind: str = DEFAULT_KIND

    @classmethod
    def from_config_file(cls, path: str) -> "ProvisioningConfig":
        """Load configuration from a YAML file.

        The file may either hold the fields directly, or be a Provisioning
        object manifest (apiVersion/kind/metadata/spec).

        Args:
            path: Path to the YAML file

        Returns:
            The loaded configuration

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file is not a mapping
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(config_path) as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a YAML mapping: {path}")

        if "metadata" in data:
            metadata = data.get("metadata") or {}
            spec = data.get("spec") or {}
            return cls(
                name=metadata.get("name", ""),
                uid=metadata.get("uid", ""),
                namespace=data.get("targetNamespace") or metadata.get("namespace", ""),
                provisioning_ip=spec.get("provisioningIP", ""),
                api_version=data.get("apiVersion", DEFAULT_API_VERSION),
                kind=data.get("kind", DEFAULT_KIND),
            )

        return cls(
            name=data.get("name", ""),
            uid=data.get("uid", ""),
            namespace=data.get("namespace", ""),
            provisioning_ip=data.get("provisioning_ip", ""),
            api_version=data.get("api_version", DEFAULT_API_VERSION),
            kind=data.get("kind", DEFAULT_KIND),
        )

    @classmethod
    def from_env(cls) -> "ProvisioningConfig":
        """Load configuration from environment variables."""
        return cls(
            name=os.environ.get("PROVISIONING_NAME", ""),
            uid=os.environ.get("PROVISIONING_UID", ""),
            namespace=os.environ.get("PROVISIONING_NAMESPACE", ""),
            provisioning_ip=os.environ.get("PROVISIONING_IP", ""),
            api_version=os.environ.get("PROVISIONING_API_VERSION", DEFAULT_API_VERSION),
            kind=os.environ.get("PROVISIONING_KIND", DEFAULT_KIND),
        )

    def validate(self) -> None:
        """Validate that all required fields are present.

        Raises:
            ValueError: If a field is missing or malformed
        """
        if not self.name:
            raise ValueError("Provisioning name is required")
        validate_uid(self.uid)
        validate_namespace(self.namespace)
        self.provisioning_ip = validate_provisioning_ip(self.provisioning_ip)

    def owner_reference(self) -> OwnerReference:
        """Build the controller reference stored on every owned secret."""
        return OwnerReference(
            api_version=self.api_version,
            kind=self.kind,
            name=self.name,
            uid=self.uid,
        )


def load_config(path: Optional[str] = None) -> ProvisioningConfig:
    """Load the provisioning configuration.

    Tries, in order:
    1. The explicit path argument
    2. The file named by PROVISIONING_CONFIG_PATH
    3. PROVISIONING_* environment variables

    Args:
        path: Optional path to a YAML config file

    Returns:
        Validated configuration

    Raises:
        ValueError: If no configuration is found or it is invalid
    """
    config_path = path or os.environ.get("PROVISIONING_CONFIG_PATH")
    if config_path:
        config = ProvisioningConfig.from_config_file(config_path)
        config.validate()
        return config

    if os.environ.get("PROVISIONING_NAME") or os.environ.get("PROVISIONING_UID"):
        config = ProvisioningConfig.from_env()
        config.validate()
        return config

    raise ValueError(
        "No provisioning configuration found. "
        "Pass --config, set PROVISIONING_CONFIG_PATH, or set the "
        "PROVISIONING_NAME, PROVISIONING_UID, PROVISIONING_NAMESPACE and "
        "PROVISIONING_IP environment variables."
    )
