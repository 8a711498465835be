"""Tests for baremetal-secrets.

Test Structure:
    tests/
    ├── conftest.py          # Shared pytest fixtures
    ├── unit/                # Unit tests (no external deps)
    │   ├── test_cli.py
    │   ├── test_config.py
    │   ├── test_certificate_manager.py
    │   ├── test_credential_encoder.py
    │   ├── test_error_handling.py
    │   ├── test_kubernetes_store.py
    │   ├── test_orchestrator.py
    │   ├── test_ownership.py
    │   ├── test_secret_reconciler.py
    │   └── test_tls_manager.py
    └── mocks/               # Mock implementations
        └── mock_secret_store.py

Usage:
    # Run all tests
    pytest

    # Run only unit tests
    pytest -m unit

    # Run with verbose output
    pytest -v
"""
