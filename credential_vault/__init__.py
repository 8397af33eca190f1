"""Credential Vault.

Local, single-user vault of password-derived credentials.
"""
from .version import __version__
from .vault import CredentialVault, StoredCredential

__all__ = ["__version__", "CredentialVault", "StoredCredential"]
