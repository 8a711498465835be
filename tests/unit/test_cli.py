"""Tests for the command line entry point."""

from unittest.mock import patch

import pytest
from kubernetes.config.config_exception import ConfigException
from tenacity import wait_none

from baremetal_secrets.cli import build_parser, main, run_create, run_delete
from baremetal_secrets.error_handling import SecretStageError, SecretStoreError
from baremetal_secrets.reconcile import ReconcileResult

MARIADB = "metal3-mariadb-password"


def _flaky_get(store, name, error, failures=1):
    """Make store.get fail `failures` times for `name`, then behave normally."""
    original_get = store.get
    remaining = {"count": failures}

    def get(namespace, secret_name):
        if secret_name == name and remaining["count"] > 0:
            remaining["count"] -= 1
            raise error
        return original_get(namespace, secret_name)

    store.get = get


@pytest.mark.unit
class TestParser:
    """Tests for argument parsing."""

    def test_create(self):
        args = build_parser().parse_args(["--config", "p.yaml", "create"])
        assert args.command == "create"
        assert args.config == "p.yaml"
        assert args.verbose is False

    def test_command_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


@pytest.mark.unit
class TestMain:
    """Tests for main."""

    def test_create(self, config_file, secret_store):
        """create reconciles every secret and exits 0."""
        code = main(["--config", str(config_file), "create"], store=secret_store)

        assert code == 0
        assert len(secret_store.secrets) == 5

    def test_delete(self, config_file, secret_store):
        """delete removes the credential secrets and exits 0."""
        main(["--config", str(config_file), "create"], store=secret_store)

        code = main(["--config", str(config_file), "delete"], store=secret_store)

        assert code == 0
        assert [name for _, name in secret_store.secrets] == ["metal3-ironic-tls"]

    def test_permanent_failure(self, config_file, secret_store):
        """A non-retryable failure exits 1 after a single attempt."""
        secret_store.fail("get", MARIADB, SecretStoreError("forbidden", status=403))

        code = main(["--config", str(config_file), "create"], store=secret_store)

        assert code == 1
        assert len([c for c in secret_store.calls if c.name == MARIADB]) == 1

    def test_missing_config(self, secret_store):
        """No configuration exits 2."""
        assert main(["create"], store=secret_store) == 2

    def test_missing_cluster_config(self, config_file):
        """No in-cluster config and no kubeconfig exits 2."""
        with patch("baremetal_secrets.store.kubernetes.config") as mock_config:
            mock_config.load_incluster_config.side_effect = ConfigException("not in cluster")
            mock_config.load_kube_config.side_effect = ConfigException("Invalid kube-config file")

            code = main(["--config", str(config_file), "create"])

        assert code == 2

    def test_config_from_env(self, config_file, secret_store, monkeypatch):
        """PROVISIONING_CONFIG_PATH is honoured."""
        monkeypatch.setenv("PROVISIONING_CONFIG_PATH", str(config_file))

        assert main(["-v", "create"], store=secret_store) == 0


@pytest.mark.unit
class TestRetry:
    """The whole pass is retried on transient store errors only."""

    def test_transient_error_retried(self, secret_store, provisioning_config):
        """A transient failure is followed by a successful pass."""
        _flaky_get(secret_store, MARIADB, SecretStoreError("unavailable", status=503, retryable=True))

        results = run_create.retry_with(wait=wait_none())(secret_store, provisioning_config)

        assert all(r is ReconcileResult.CREATED for r in results.values())

    def test_gives_up_after_three_attempts(self, secret_store, provisioning_config):
        """Persistent transient failures are re-raised after three passes."""
        error = SecretStoreError("unavailable", status=503, retryable=True)
        _flaky_get(secret_store, MARIADB, error, failures=5)

        with pytest.raises(SecretStageError) as exc_info:
            run_create.retry_with(wait=wait_none())(secret_store, provisioning_config)

        assert exc_info.value.cause is error
        assert secret_store.mutations() == []

    def test_delete_retried(self, secret_store, provisioning_config):
        """A transient delete failure is retried."""
        original_delete = secret_store.delete
        remaining = {"count": 1}

        def delete(namespace, name):
            if name == MARIADB and remaining["count"] > 0:
                remaining["count"] -= 1
                raise SecretStoreError("unavailable", status=503, retryable=True)
            return original_delete(namespace, name)

        secret_store.delete = delete

        assert run_delete.retry_with(wait=wait_none())(secret_store, provisioning_config) == []
