"""
Input validation functions for provisioning configuration.

Provides validation for Kubernetes object names, namespaces, UIDs and the
provisioning address the TLS certificate is bound to.
"""

import ipaddress
import re

# RFC 1123 subdomain, as required for Secret names
_DNS_SUBDOMAIN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")
# RFC 1123 label, as required for namespaces
_DNS_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")


def validate_secret_name(name: str) -> str:
    """Validate a Secret name.

    Args:
        name: The secret name to validate

    Returns:
        The validated name

    Raises:
        ValueError: If the name is not a valid RFC 1123 subdomain
    """
    if not name:
        raise ValueError("Secret name cannot be empty.")

    if len(name) > 253 or not _DNS_SUBDOMAIN.match(name):
        raise ValueError(
            f"Invalid secret name: '{name}'. "
            "Must consist of lower case alphanumeric characters, '-' or '.', "
            "and must start and end with an alphanumeric character."
        )

    return name


def validate_namespace(namespace: str) -> str:
    """Validate a namespace name.

    Args:
        namespace: The namespace to validate

    Returns:
        The validated namespace

    Raises:
        ValueError: If the namespace is not a valid RFC 1123 label
    """
    if not namespace:
        raise ValueError(
            "Namespace cannot be empty. "
            "Hint: Set 'namespace' in the config file or PROVISIONING_NAMESPACE."
        )

    if len(namespace) > 63 or not _DNS_LABEL.match(namespace):
        raise ValueError(
            f"Invalid namespace: '{namespace}'. "
            "Must be at most 63 lower case alphanumeric characters or '-'."
        )

    return namespace


def validate_uid(uid: str) -> str:
    """Validate the UID of the owning object.

    Owner references without a UID are rejected by the API server's
    garbage collector, so an empty value is an error.
    """
    if not uid or not uid.strip():
        raise ValueError(
            "Owner UID cannot be empty. "
            "Hint: Use 'kubectl get provisioning <name> -o jsonpath={.metadata.uid}'."
        )
    return uid


def validate_provisioning_ip(value: str) -> str:
    """Validate the provisioning address.

    Accepts an IPv4/IPv6 address, optionally with a CIDR prefix length
    (the prefix is stripped), or a DNS hostname.

    Args:
        value: The provisioning address

    Returns:
        The address without any prefix length

    Raises:
        ValueError: If the value is empty or neither an IP nor a hostname
    """
    if not value:
        raise ValueError("Provisioning IP cannot be empty.")

    address = value.split("/", 1)[0] if "/" in value else value

    try:
        ipaddress.ip_address(address)
        return address
    except ValueError:
        pass

    if _DNS_SUBDOMAIN.match(address.lower()):
        return address

    raise ValueError(
        f"Invalid provisioning IP: '{value}'. "
        "Must be an IPv4/IPv6 address or a DNS hostname."
    )
