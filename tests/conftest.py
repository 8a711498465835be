"""Shared pytest fixtures for baremetal-secrets tests.

Unit tests run against an in-memory secret store; nothing here talks to a
cluster.
"""

from pathlib import Path
from typing import Generator

import pytest

from baremetal_secrets.config import ProvisioningConfig
from baremetal_secrets.security import CertificateManager
from tests.mocks import MockSecretStore

TEST_NAMESPACE = "openshift-machine-api"
TEST_PROVISIONING_IP = "172.22.0.3"

PROVISIONING_ENV_VARS = [
    "PROVISIONING_CONFIG_PATH",
    "PROVISIONING_NAME",
    "PROVISIONING_UID",
    "PROVISIONING_NAMESPACE",
    "PROVISIONING_IP",
    "PROVISIONING_API_VERSION",
    "PROVISIONING_KIND",
]


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "slow: Long-running tests")


@pytest.fixture
def provisioning_config() -> ProvisioningConfig:
    """Provide the owning Provisioning object."""
    return ProvisioningConfig(
        name="provisioning-configuration",
        uid="5f1c2a4e-8b0d-4c61-9d7e-2a7f3b9c1e00",
        namespace=TEST_NAMESPACE,
        provisioning_ip=TEST_PROVISIONING_IP,
    )


@pytest.fixture
def other_config(provisioning_config: ProvisioningConfig) -> ProvisioningConfig:
    """Provide a different owner in the same namespace."""
    return ProvisioningConfig(
        name="other-provisioning",
        uid="0a9b8c7d-6e5f-4a3b-2c1d-0e9f8a7b6c5d",
        namespace=provisioning_config.namespace,
        provisioning_ip=provisioning_config.provisioning_ip,
    )


@pytest.fixture
def secret_store() -> MockSecretStore:
    """Provide an empty in-memory secret store."""
    return MockSecretStore()


@pytest.fixture(scope="session")
def certificate_manager() -> CertificateManager:
    """Provide a certificate manager with default validity."""
    return CertificateManager()


@pytest.fixture(scope="session")
def valid_tls(certificate_manager):
    """A certificate that is well within its validity window."""
    return certificate_manager.generate(TEST_PROVISIONING_IP)


@pytest.fixture(scope="session")
def expiring_tls():
    """A certificate valid for 10 days, inside the 30 day renewal threshold."""
    return CertificateManager(validity_days=10).generate(TEST_PROVISIONING_IP)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Write a flat provisioning config file."""
    import yaml

    config_data = {
        "name": "provisioning-configuration",
        "uid": "5f1c2a4e-8b0d-4c61-9d7e-2a7f3b9c1e00",
        "namespace": TEST_NAMESPACE,
        "provisioning_ip": TEST_PROVISIONING_IP,
    }
    path = tmp_path / "provisioning.yaml"
    with open(path, "w") as f:
        yaml.dump(config_data, f)
    return path


# Autouse fixture for test isolation
@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> Generator[None, None, None]:
    """Remove environment variables that would leak into config loading."""
    for var in PROVISIONING_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield
