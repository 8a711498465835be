"""
Security components for credential secrets.

Provides basic-auth credential encoding and TLS certificate management.
"""

from .certificate_manager import (
    CertificateManager,
    TLSMaterial,
    generate_tls_certificate,
    is_tls_certificate_expired,
)
from .credential_encoder import (
    EncodedCredential,
    encode_credential,
    generate_password,
    hash_password,
)

__all__ = [
    "CertificateManager",
    "TLSMaterial",
    "generate_tls_certificate",
    "is_tls_certificate_expired",
    "EncodedCredential",
    "encode_credential",
    "generate_password",
    "hash_password",
]
