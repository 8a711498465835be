"""
HTTP basic-auth credential encoding for Ironic services.

Turns a (username, password) pair into the three forms stored in each
credential secret: the plaintext pair, an htpasswd line and an
oslo.config style auth section.
"""

import secrets
import string
from dataclasses import dataclass

import bcrypt

from ..error_handling import GenerationError

# Same cost as the htpasswd default
BCRYPT_COST = 5

# Ironic's basic-auth verifier hard-codes the "2y" tag produced by htpasswd.
# bcrypt emits "2b". Both are the same algorithm for ASCII input; only the
# tag character is rewritten, never the salt or digest. httpd would fall
# back to its "2a" bug workarounds for other tags.
HTPASSWD_BCRYPT_PREFIX = "$2y$"

USERNAME_KEY = "username"
PASSWORD_KEY = "password"
HTPASSWD_KEY = "htpasswd"
AUTH_CONFIG_KEY = "auth-config"

AUTH_CONFIG_TEMPLATE = """[{section}]
auth_type = http_basic
username = {username}
password = {password}
"""


@dataclass
class EncodedCredential:
    """A credential in every form its consumers read.

    Attributes:
        username: Basic-auth user name
        password: Plaintext password
        htpasswd: "username:hash" line for the auth file
        auth_config: INI section for the consuming service's config loader
    """
    username: str
    password: str
    htpasswd: str
    auth_config: str

    def to_secret_data(self) -> dict[str, str]:
        """Convert to the credential secret's fixed key set."""
        return {
            USERNAME_KEY: self.username,
            PASSWORD_KEY: self.password,
            HTPASSWD_KEY: self.htpasswd,
            AUTH_CONFIG_KEY: self.auth_config,
        }


def hash_password(password: str, cost: int = BCRYPT_COST) -> str:
    """Hash a password with bcrypt and normalize the version tag to 2y.

    Args:
        password: The plaintext password
        cost: bcrypt cost factor

    Returns:
        The hash, e.g. "$2y$05$<22 char salt><31 char digest>"

    Raises:
        GenerationError: If hashing fails
    """
    try:
        hashed = bytearray(bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=cost)))
    except (ValueError, TypeError) as e:
        raise GenerationError(f"failed to hash password: {e}") from e

    hashed[2] = ord("y")
    return hashed.decode("ascii")


def build_auth_config(section: str, username: str, password: str) -> str:
    """Build the INI auth section for a service."""
    return AUTH_CONFIG_TEMPLATE.format(section=section, username=username, password=password)


def encode_credential(username: str, password: str, config_section: str) -> EncodedCredential:
    """Encode a credential for storage.

    Args:
        username: Basic-auth user name
        password: Plaintext password
        config_section: INI section name (ironic, json_rpc or inspector)

    Returns:
        The encoded credential

    Raises:
        GenerationError: If hashing fails
    """
    return EncodedCredential(
        username=username,
        password=password,
        htpasswd=f"{username}:{hash_password(password)}",
        auth_config=build_auth_config(config_section, username, password),
    )


def generate_password(length: int = 16) -> str:
    """Generate a secure random password.

    Only ASCII letters and digits are used: the value is embedded verbatim in
    an INI file and an htpasswd line.

    Args:
        length: Password length (default 16)

    Returns:
        A cryptographically secure random password
    """
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))
