"""
baremetal-secrets - command line entry point.

Runs a single reconcile pass (create) or teardown (delete) against the
cluster. Transient store failures re-run the whole pass with exponential
backoff; everything else fails the command.
"""

import argparse
import logging
import sys
from typing import Optional

from kubernetes.config.config_exception import ConfigException
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from . import __version__
from .config import ProvisioningConfig, load_config
from .error_handling import SecretsError, is_retryable_store_error
from .reconcile import ReconcileResult, SecretOrchestrator, SecretRole
from .store.base import SecretStore

logger = logging.getLogger("baremetal-secrets")


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging to stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


@retry(
    retry=retry_if_exception(is_retryable_store_error),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    stop=stop_after_attempt(3),
    reraise=True,
)
def run_create(store: SecretStore, config: ProvisioningConfig) -> dict[SecretRole, ReconcileResult]:
    """Reconcile all secrets.

    Automatic retry of the whole pass on transient store failures (throttling,
    server errors, conflicts, dropped connections) with exponential backoff.
    Every stage is idempotent, so re-running completed stages is a no-op.
    """
    return SecretOrchestrator(store, config).create_all_secrets()


@retry(
    retry=retry_if_exception(is_retryable_store_error),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    stop=stop_after_attempt(3),
    reraise=True,
)
def run_delete(store: SecretStore, config: ProvisioningConfig) -> list[str]:
    """Delete the credential secrets, retrying when every failure was transient."""
    return SecretOrchestrator(store, config).delete_all_secrets()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="baremetal-secrets",
        description="Reconcile credential secrets for a bare-metal provisioning stack.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        help="Path to the Provisioning YAML (default: PROVISIONING_CONFIG_PATH or PROVISIONING_* env vars)",
    )
    parser.add_argument("--kubeconfig", help="Path to a kubeconfig file (default: in-cluster, then ~/.kube/config)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("create", help="Create missing secrets, adopt unowned ones, rotate an expired TLS certificate")
    subparsers.add_parser("delete", help="Delete the credential secrets")
    return parser


def _build_store(kubeconfig: Optional[str]) -> SecretStore:
    from .store.kubernetes import KubernetesSecretStore

    return KubernetesSecretStore.from_environment(kubeconfig)


def main(argv: Optional[list[str]] = None, store: Optional[SecretStore] = None) -> int:
    """Main entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])
        store: Secret store to use instead of the cluster

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    if store is None:
        try:
            store = _build_store(args.kubeconfig)
        except ConfigException as e:
            logger.error(f"Cannot load cluster configuration: {e}")
            return 2

    logger.info(
        f"baremetal-secrets v{__version__}: {args.command} in namespace {config.namespace} "
        f"for {config.kind} {config.name}"
    )

    try:
        if args.command == "create":
            results = run_create(store, config)
            for role, result in results.items():
                logger.info(f"{role.value}: {result.value}")
        else:
            deleted = run_delete(store, config)
            logger.info(f"Deleted {len(deleted)} secret(s)")
    except SecretsError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
