"""
TLS certificate management for the Ironic endpoints.

Generates the self-signed certificate served on the provisioning address and
decides when an existing certificate is due for replacement.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from ipaddress import ip_address
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
)
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from ..error_handling import CertificateValidationError, GenerationError

TLS_CERTIFICATE_KEY = "tls.crt"
TLS_PRIVATE_KEY_KEY = "tls.key"


@dataclass
class TLSMaterial:
    """A certificate and its private key.

    Attributes:
        certificate: Certificate PEM
        private_key: PKCS8 private key PEM
    """
    certificate: str
    private_key: str

    def to_secret_data(self) -> dict[str, str]:
        """Convert to the TLS secret's fixed key set."""
        return {
            TLS_CERTIFICATE_KEY: self.certificate,
            TLS_PRIVATE_KEY_KEY: self.private_key,
        }


class CertificateManager:
    """Issues and inspects the provisioning TLS certificate."""

    DEFAULT_KEY_SIZE = 2048
    DEFAULT_CERT_VALIDITY_DAYS = 730  # 2 years
    DEFAULT_RENEWAL_THRESHOLD = timedelta(days=30)
    ORGANIZATION = "metal3"

    def __init__(
        self,
        validity_days: Optional[int] = None,
        renewal_threshold: Optional[timedelta] = None,
        key_size: Optional[int] = None,
    ):
        """Initialize the certificate manager.

        Args:
            validity_days: Lifetime of generated certificates
            renewal_threshold: Remaining lifetime below which a certificate
                               counts as expired
            key_size: RSA key size in bits
        """
        self.validity_days = validity_days or self.DEFAULT_CERT_VALIDITY_DAYS
        self.renewal_threshold = (
            renewal_threshold if renewal_threshold is not None else self.DEFAULT_RENEWAL_THRESHOLD
        )
        self.key_size = key_size or self.DEFAULT_KEY_SIZE

    def _generate_private_key(self) -> rsa.RSAPrivateKey:
        """Generate an RSA private key."""
        return rsa.generate_private_key(
            public_exponent=65537,
            key_size=self.key_size,
        )

    def _key_to_pem(self, key: rsa.RSAPrivateKey) -> str:
        """Convert private key to PEM string."""
        return key.private_bytes(
            encoding=Encoding.PEM,
            format=PrivateFormat.PKCS8,
            encryption_algorithm=NoEncryption(),
        ).decode()

    def _cert_to_pem(self, cert: x509.Certificate) -> str:
        """Convert certificate to PEM string."""
        return cert.public_bytes(Encoding.PEM).decode()

    @staticmethod
    def _subject_alt_name(address: str) -> x509.GeneralName:
        try:
            return x509.IPAddress(ip_address(address))
        except ValueError:
            return x509.DNSName(address)

    def generate(self, address: str) -> TLSMaterial:
        """Generate a self-signed certificate for the provisioning address.

        Args:
            address: Provisioning IP (or hostname), used as subject CN and SAN

        Returns:
            The new certificate and key

        Raises:
            GenerationError: If the address is empty or signing fails
        """
        if not address:
            raise GenerationError("cannot generate TLS certificate: provisioning address is empty")

        key = self._generate_private_key()

        name = x509.Name([
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, self.ORGANIZATION),
            x509.NameAttribute(NameOID.COMMON_NAME, address),
        ])

        now = datetime.now(timezone.utc)
        try:
            cert = (
                x509.CertificateBuilder()
                .subject_name(name)
                .issuer_name(name)
                .public_key(key.public_key())
                .serial_number(x509.random_serial_number())
                .not_valid_before(now)
                .not_valid_after(now + timedelta(days=self.validity_days))
                .add_extension(
                    x509.BasicConstraints(ca=True, path_length=0),
                    critical=True,
                )
                .add_extension(
                    x509.KeyUsage(
                        digital_signature=True,
                        key_encipherment=True,
                        key_cert_sign=True,
                        crl_sign=False,
                        content_commitment=False,
                        data_encipherment=False,
                        key_agreement=False,
                        encipher_only=False,
                        decipher_only=False,
                    ),
                    critical=True,
                )
                .add_extension(
                    x509.ExtendedKeyUsage([ExtendedKeyUsageOID.SERVER_AUTH]),
                    critical=False,
                )
                .add_extension(
                    x509.SubjectAlternativeName([self._subject_alt_name(address)]),
                    critical=False,
                )
                .sign(key, hashes.SHA256())
            )
        except (ValueError, TypeError) as e:
            raise GenerationError(f"failed to sign TLS certificate for {address}: {e}") from e

        return TLSMaterial(
            certificate=self._cert_to_pem(cert),
            private_key=self._key_to_pem(key),
        )

    def load_certificate(self, certificate_pem: str) -> x509.Certificate:
        """Parse a PEM certificate.

        Raises:
            CertificateValidationError: If the PEM cannot be parsed
        """
        try:
            return x509.load_pem_x509_certificate(certificate_pem.encode())
        except ValueError as e:
            raise CertificateValidationError(f"failed to parse TLS certificate: {e}") from e

    def is_expired(self, certificate_pem: str, now: Optional[datetime] = None) -> bool:
        """Check whether a certificate is expired or about to expire.

        Args:
            certificate_pem: Certificate PEM
            now: Reference time (default: current UTC time)

        Returns:
            True if less than renewal_threshold of validity remains

        Raises:
            CertificateValidationError: If the PEM cannot be parsed
        """
        cert = self.load_certificate(certificate_pem)
        now = now or datetime.now(timezone.utc)
        return now + self.renewal_threshold >= cert.not_valid_after_utc


_default_manager = CertificateManager()


def generate_tls_certificate(address: str) -> TLSMaterial:
    """Generate a certificate and key for the provisioning address."""
    return _default_manager.generate(address)


def is_tls_certificate_expired(certificate_pem: str) -> bool:
    """Check an existing certificate with the default renewal threshold."""
    return _default_manager.is_expired(certificate_pem)
