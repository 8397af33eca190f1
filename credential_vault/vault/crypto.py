"""
Vault Crypto Core — Salt composition, key derivation and serialization.

Every credential in the vault is produced and checked by the same routine:

    combined_salt = vault_salt ++ account_salt ++ utf8(master_password)
    derived_key   = PBKDF2-HMAC-SHA256(password, combined_salt, iterations)

The master password fingerprint uses the vault salt alone:

    fingerprint = hex(PBKDF2-HMAC-SHA256(master_password, vault_salt)[:3])

Security Note:
    Never log passwords, salts or derived keys.
    The fingerprint is 24 bits long; a different master password shows the
    same tag with probability of about 1 in 16.7 million.
"""
import base64
import binascii
import logging
from typing import Union

from cryptography.hazmat.primitives import constant_time, hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

logger = logging.getLogger("credential_vault.vault")

SALT_LEN = 16  # vault and account salts
CREDENTIAL_LEN = 32  # SHA-256 output length
FINGERPRINT_LEN = 3  # bytes rendered as hex
DEFAULT_ITERATIONS = 10_000
MAX_ITERATIONS = 2**31 - 1  # OpenSSL PBKDF2 takes a C int


# ---------------------------------------------------------------------------
# Key derivation
# ---------------------------------------------------------------------------

def compose_salt(vault_salt: bytes, account_salt: bytes, master_password: str) -> bytes:
    """Build the salt that binds a credential to vault, account and master password.

    Args:
        vault_salt: Vault-wide salt.
        account_salt: Per-credential salt.
        master_password: Session master password.

    Returns:
        ``vault_salt + account_salt + master_password`` (UTF-8,
        surrogates passed through), in that order.
    """
    return vault_salt + account_salt + master_password.encode("utf-8", "surrogatepass")


def derive_key(
    password: Union[str, bytes],
    salt: bytes,
    iterations: int,
    length: int = CREDENTIAL_LEN,
) -> bytes:
    """Derive a fixed-length key using PBKDF2-HMAC-SHA256.

    Args:
        password: Secret to stretch. ``str`` values are UTF-8 encoded
            (lone surrogates pass through).
        salt: Salt bytes (any length, including the composed salt).
        iterations: PBKDF2 iteration count.
        length: Output length in bytes.

    Returns:
        ``length`` derived bytes.
    """
    if isinstance(password, str):
        password = password.encode("utf-8", "surrogatepass")
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=length,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password)


def keys_equal(expected: bytes, actual: bytes) -> bool:
    """Compare two derived keys in constant time."""
    return constant_time.bytes_eq(expected, actual)


def fingerprint(master_password: str, vault_salt: bytes, iterations: int) -> str:
    """Render a short lowercase hex tag for the master password.

    Args:
        master_password: Session master password.
        vault_salt: Vault-wide salt, used directly as the PBKDF2 salt.
        iterations: PBKDF2 iteration count of the vault.

    Returns:
        Hex string of the first ``FINGERPRINT_LEN`` derived bytes.
    """
    key = derive_key(master_password, vault_salt, iterations)
    return key[:FINGERPRINT_LEN].hex()


# ---------------------------------------------------------------------------
# Bytes serialization
# ---------------------------------------------------------------------------

def b64encode(value: bytes) -> str:
    """Encode bytes as an ASCII base64 string for JSON documents."""
    return base64.b64encode(value).decode("ascii")


def b64decode(value: str, length: int, field: str) -> bytes:
    """Decode a base64 field and check its length.

    Args:
        value: base64 text.
        length: Required decoded length.
        field: Field name used in error messages.

    Returns:
        Decoded bytes.

    Raises:
        ValueError: If value is not valid base64 or has the wrong length.
    """
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a base64 string")
    try:
        raw = base64.b64decode(value, validate=True)
    except binascii.Error as err:
        raise ValueError(f"{field} is not valid base64: {err}") from err
    if len(raw) != length:
        raise ValueError(
            f"{field} must decode to exactly {length} bytes, got {len(raw)}"
        )
    return raw
