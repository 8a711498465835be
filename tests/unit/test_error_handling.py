"""
Unit tests for error handling utilities.

Tests the error taxonomy, Kubernetes API error mapping and validators.
"""

import pytest
from kubernetes.client.rest import ApiException
from urllib3.exceptions import ProtocolError

from baremetal_secrets.error_handling import (
    AggregateDeletionError,
    CertificateValidationError,
    SecretConflictError,
    SecretNotFoundError,
    SecretStageError,
    SecretStoreError,
    is_retryable_store_error,
    map_api_exception,
    validate_namespace,
    validate_provisioning_ip,
    validate_secret_name,
    validate_uid,
)


# ==================== Error Taxonomy Tests ====================


@pytest.mark.unit
def test_not_found_message():
    """NotFound names the secret and namespace."""
    err = SecretNotFoundError("ns", "metal3-ironic-tls")
    assert str(err) == 'secret "metal3-ironic-tls" not found in namespace "ns"'


@pytest.mark.unit
def test_stage_error_message_and_root_cause():
    """Stage errors prefix the message and unwrap nested stages."""
    root = CertificateValidationError("bad pem")
    inner = SecretStageError("failed to determine expiration date of TLS certificate", root)
    outer = SecretStageError("failed to create TLS certificate", inner)

    assert str(outer) == (
        "failed to create TLS certificate: "
        "failed to determine expiration date of TLS certificate: bad pem"
    )
    assert outer.root_cause is root


@pytest.mark.unit
def test_aggregate_single_error():
    """A single failure reads like a plain error."""
    err = AggregateDeletionError([("a", SecretStoreError("boom"))])
    assert str(err) == 'failed to delete secret "a": boom'


@pytest.mark.unit
def test_aggregate_multiple_errors():
    """Multiple failures are all listed."""
    err = AggregateDeletionError([
        ("a", SecretStoreError("boom")),
        ("b", SecretStoreError("bang")),
    ])
    assert "2 secrets" in str(err)
    assert '"a": boom' in str(err)
    assert '"b": bang' in str(err)


@pytest.mark.unit
def test_aggregate_retryable_only_when_all_retryable():
    """The aggregate is retryable only if every failure is."""
    transient = SecretStoreError("unavailable", status=503, retryable=True)
    permanent = SecretStoreError("forbidden", status=403)

    assert AggregateDeletionError([("a", transient)]).retryable is True
    assert AggregateDeletionError([("a", transient), ("b", permanent)]).retryable is False


# ==================== Kubernetes Handler Tests ====================


@pytest.mark.unit
@pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
def test_map_retryable_status(status):
    """Throttling and server errors are retryable store errors."""
    err = map_api_exception(ApiException(status=status, reason="x"), "get", "ns", "s")
    assert isinstance(err, SecretStoreError)
    assert err.status == status
    assert err.retryable is True


@pytest.mark.unit
def test_map_not_found():
    """404 maps to SecretNotFoundError."""
    err = map_api_exception(ApiException(status=404, reason="Not Found"), "get", "ns", "s")
    assert isinstance(err, SecretNotFoundError)


@pytest.mark.unit
def test_map_conflict():
    """409 maps to a retryable conflict."""
    err = map_api_exception(ApiException(status=409, reason="Conflict"), "update", "ns", "s")
    assert isinstance(err, SecretConflictError)
    assert err.retryable is True
    assert "update" in str(err)


@pytest.mark.unit
@pytest.mark.parametrize("status", [401, 403, 422])
def test_map_permanent(status):
    """Auth and validation failures are not retryable."""
    err = map_api_exception(ApiException(status=status, reason="x"), "create", "ns", "s")
    assert isinstance(err, SecretStoreError)
    assert err.retryable is False


@pytest.mark.unit
def test_is_retryable_store_error():
    """Retryability follows the root cause."""
    transient = SecretStoreError("unavailable", status=503, retryable=True)
    permanent = SecretStoreError("forbidden", status=403)

    assert is_retryable_store_error(transient) is True
    assert is_retryable_store_error(permanent) is False
    assert is_retryable_store_error(SecretStageError("failed to create Ironic password", transient)) is True
    assert is_retryable_store_error(SecretStageError("failed to create Ironic password", permanent)) is False
    assert is_retryable_store_error(CertificateValidationError("bad")) is False
    assert is_retryable_store_error(ApiException(status=503)) is True
    assert is_retryable_store_error(ProtocolError("Connection aborted.")) is True
    assert is_retryable_store_error(ValueError("nope")) is False


# ==================== Validator Tests ====================


@pytest.mark.unit
def test_validate_secret_name_valid():
    """Valid secret name passes validation."""
    assert validate_secret_name("metal3-ironic-tls") == "metal3-ironic-tls"


@pytest.mark.unit
@pytest.mark.parametrize("name", ["", "Upper", "-leading", "trailing-", "under_score"])
def test_validate_secret_name_invalid(name):
    """Invalid secret names raise ValueError."""
    with pytest.raises(ValueError):
        validate_secret_name(name)


@pytest.mark.unit
def test_validate_namespace():
    """Namespaces must be RFC 1123 labels."""
    assert validate_namespace("openshift-machine-api") == "openshift-machine-api"
    with pytest.raises(ValueError, match="cannot be empty"):
        validate_namespace("")
    with pytest.raises(ValueError, match="Invalid namespace"):
        validate_namespace("a.b")


@pytest.mark.unit
def test_validate_uid():
    """UID must be non-blank."""
    assert validate_uid("abc") == "abc"
    with pytest.raises(ValueError):
        validate_uid("  ")


@pytest.mark.unit
@pytest.mark.parametrize("value,expected", [
    ("172.22.0.3", "172.22.0.3"),
    ("172.22.0.3/24", "172.22.0.3"),
    ("fd00:1101::3", "fd00:1101::3"),
    ("fd00:1101::3/64", "fd00:1101::3"),
    ("ironic.example.com", "ironic.example.com"),
])
def test_validate_provisioning_ip_valid(value, expected):
    """IPs, CIDRs and hostnames are accepted."""
    assert validate_provisioning_ip(value) == expected


@pytest.mark.unit
@pytest.mark.parametrize("value", ["", "not an ip!", "under_score.example"])
def test_validate_provisioning_ip_invalid(value):
    """Empty or malformed addresses raise ValueError."""
    with pytest.raises(ValueError):
        validate_provisioning_ip(value)
