"""Credential Vault — Salted, key-derived credentials bound to a master password.

Security Note (Threat Model):
    The master password is held in process memory for the whole session.
    A memory dump of the running process could expose it together with
    any password typed during the session.
    This is an accepted limitation: the vault only protects the
    persisted file, never the running process.
"""

from .credential_vault import (
    CredentialVault,
    StoredCredential,
    Bound,
    Unbound,
    UNBOUND,
)
from .config import VaultConfig
from .exceptions import (
    VaultError,
    InvalidConfig,
    AccountNotFound,
    WrongPassword,
    MasterPasswordNotSet,
    VaultFormatError,
)
from .storage import encode_vault, decode_vault, load_vault, save_vault

__all__ = [
    "CredentialVault",
    "StoredCredential",
    "Bound",
    "Unbound",
    "UNBOUND",
    "VaultConfig",
    "VaultError",
    "InvalidConfig",
    "AccountNotFound",
    "WrongPassword",
    "MasterPasswordNotSet",
    "VaultFormatError",
    "encode_vault",
    "decode_vault",
    "load_vault",
    "save_vault",
]
