"""
Vault Exceptions — Error taxonomy for the credential vault.

Security Note:
    ``WrongPassword`` carries the same message whether the account password
    or the session master password was wrong. Callers must not try to tell
    the two cases apart.
"""


class VaultError(Exception):
    """Base class for every error raised by the credential vault."""


class InvalidConfig(VaultError, ValueError):
    """Invalid vault configuration (e.g. a non-positive iteration count)."""


class AccountNotFound(VaultError, KeyError):
    """The requested account is not stored in the vault."""

    def __init__(self, account: str):
        self.account = account
        super().__init__(account)

    def __str__(self) -> str:
        return f"Account {self.account!r} does not exist"


class WrongPassword(VaultError):
    """The attempted password does not match the stored credential."""

    def __init__(self, message: str = "Incorrect password"):
        super().__init__(message)


class MasterPasswordNotSet(VaultError):
    """A credential operation was attempted on an unbound vault session."""

    def __init__(self, message: str = "Master password has not been set"):
        super().__init__(message)


class VaultFormatError(VaultError):
    """A persisted vault blob could not be decoded."""
