"""
baremetal-secrets - credential secrets for a bare-metal provisioning stack.

This package reconciles the database password, the HTTP basic-auth
credentials of the Ironic API, JSON-RPC and inspector services, and the
Ironic TLS certificate into namespaced Kubernetes Secrets owned by the
Provisioning object they belong to.
"""

__version__ = "0.1.0"
