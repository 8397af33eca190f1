"""
CredentialVault — Salted, key-derived credentials bound to a master password.

Provides the public API of the vault:
- ``create(iterations)`` — new vault with a fresh vault salt
- ``set_master_password(value)`` / ``bind(value)`` — session master password
- ``store_password(account, password)`` — derive and store a credential
- ``remove_password(account)`` — drop a credential (no-op if absent)
- ``verify_password(account, attempted)`` — check an attempted password
- ``fingerprint_master_password()`` — short tag of the master password
- ``count()`` / ``contains(account)`` / ``sample_random_account()``

Security Note:
    The master password lives only in the session state, which is never
    part of the persisted snapshot. Never log passwords, salts or keys.
"""
import logging
import random
import secrets
from dataclasses import dataclass, field
from typing import Callable, Iterator, Optional, Union

from .config import validate_iterations
from .crypto import (
    CREDENTIAL_LEN,
    DEFAULT_ITERATIONS,
    SALT_LEN,
    compose_salt,
    derive_key,
    fingerprint,
    keys_equal,
)
from .exceptions import AccountNotFound, MasterPasswordNotSet, WrongPassword

logger = logging.getLogger("credential_vault.vault")

RandomBytes = Callable[[int], bytes]


@dataclass(frozen=True)
class StoredCredential:
    """A derived key together with the account salt it was derived with."""

    derived_key: bytes
    account_salt: bytes

    def __post_init__(self):
        if len(self.derived_key) != CREDENTIAL_LEN:
            raise ValueError(
                f"derived_key must be {CREDENTIAL_LEN} bytes, "
                f"got {len(self.derived_key)}"
            )
        if len(self.account_salt) != SALT_LEN:
            raise ValueError(
                f"account_salt must be {SALT_LEN} bytes, "
                f"got {len(self.account_salt)}"
            )


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------

class Unbound:
    """Session state before a master password has been supplied."""

    def __repr__(self) -> str:
        return "<Unbound>"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Unbound)

    def __hash__(self) -> int:
        return hash(Unbound)


UNBOUND = Unbound()


@dataclass(frozen=True)
class Bound:
    """Session state holding the master password for the current run."""

    master_password: str = field(repr=False)

    def __repr__(self) -> str:
        return "<Bound>"


SessionState = Union[Unbound, Bound]


class CredentialVault:
    """Vault of per-account credentials.

    Each credential is ``PBKDF2(password, vault_salt ++ account_salt ++ master)``
    so it can only be reproduced with this vault, this account's salt and
    the master password in use when it was stored.

    ``vault_salt`` and ``iterations`` are fixed at creation. The session
    state starts ``Unbound`` both for new and loaded vaults.
    """

    def __init__(
        self,
        iterations: int,
        vault_salt: bytes,
        entries: Optional[dict[str, StoredCredential]] = None,
        random_bytes: RandomBytes = secrets.token_bytes,
        rng: Optional[random.Random] = None,
    ):
        self._iterations = validate_iterations(iterations)
        if len(vault_salt) != SALT_LEN:
            raise ValueError(
                f"vault_salt must be {SALT_LEN} bytes, got {len(vault_salt)}"
            )
        self._vault_salt = bytes(vault_salt)
        self._entries: dict[str, StoredCredential] = dict(entries or {})
        self._random_bytes = random_bytes
        self._rng = rng if rng is not None else secrets.SystemRandom()
        self._session: SessionState = UNBOUND

    def __repr__(self) -> str:
        return (
            f'<CredentialVault [iterations:{self._iterations}, '
            f'session:{self._session!r}] accounts={len(self._entries)}>'
        )

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        iterations: int = DEFAULT_ITERATIONS,
        random_bytes: RandomBytes = secrets.token_bytes,
        rng: Optional[random.Random] = None,
    ) -> "CredentialVault":
        """Create an empty vault with a fresh random vault salt.

        Args:
            iterations: PBKDF2 cost factor, must be a positive integer.
            random_bytes: Source of random bytes for salts.
            rng: Random chooser used by ``sample_random_account``.

        Returns:
            New, unbound CredentialVault.

        Raises:
            InvalidConfig: If iterations is missing, zero or negative.
        """
        iterations = validate_iterations(iterations)
        vault = cls(
            iterations=iterations,
            vault_salt=random_bytes(SALT_LEN),
            random_bytes=random_bytes,
            rng=rng,
        )
        logger.info("Created new vault (iterations=%d)", iterations)
        return vault

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def iterations(self) -> int:
        return self._iterations

    @property
    def vault_salt(self) -> bytes:
        return self._vault_salt

    @property
    def entries(self) -> dict[str, StoredCredential]:
        """Read-only copy of the account to credential mapping."""
        return dict(self._entries)

    @property
    def session(self) -> SessionState:
        return self._session

    @property
    def is_bound(self) -> bool:
        return isinstance(self._session, Bound)

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def bind(self, master_password: str) -> Bound:
        """Return a session handle for master_password without storing it."""
        return Bound(master_password)

    def set_master_password(self, value: str) -> None:
        """Replace the session master password.

        No validation is done on the content; the empty string is accepted.
        """
        self._session = self.bind(value)

    def _resolve(self, session: Optional[Bound]) -> Bound:
        current = session if session is not None else self._session
        if not isinstance(current, Bound):
            raise MasterPasswordNotSet()
        return current

    def _salt(self, account_salt: bytes, session: Bound) -> bytes:
        return compose_salt(self._vault_salt, account_salt, session.master_password)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def store_password(
        self, account: str, password: str, session: Optional[Bound] = None,
    ) -> None:
        """Derive and store the credential for account.

        A fresh account salt is generated on every call; any previous
        credential for the account is replaced.

        Args:
            account: Account identifier.
            password: Account password to derive from.
            session: Session handle; defaults to the vault's current session.

        Raises:
            MasterPasswordNotSet: If no bound session is available.
        """
        bound = self._resolve(session)
        account_salt = self._random_bytes(SALT_LEN)
        derived = derive_key(
            password, self._salt(account_salt, bound), self._iterations,
        )
        replaced = account in self._entries
        self._entries[account] = StoredCredential(
            derived_key=derived, account_salt=account_salt,
        )
        logger.debug(
            "Vault store: account=%s replaced=%s", account, replaced,
        )

    def remove_password(self, account: str) -> None:
        """Remove the credential for account. Missing accounts are ignored."""
        if self._entries.pop(account, None) is not None:
            logger.debug("Vault remove: account=%s", account)

    def verify_password(
        self, account: str, attempted: str, session: Optional[Bound] = None,
    ) -> None:
        """Check attempted against the stored credential of account.

        Args:
            account: Account identifier.
            attempted: Password to check.
            session: Session handle; defaults to the vault's current session.

        Raises:
            AccountNotFound: If account is not stored.
            WrongPassword: If the derived key does not match. This is also
                the outcome when the session master password differs from
                the one used at store time.
            MasterPasswordNotSet: If no bound session is available.
        """
        stored = self._entries.get(account)
        if stored is None:
            raise AccountNotFound(account)
        bound = self._resolve(session)
        attempt = derive_key(
            attempted, self._salt(stored.account_salt, bound), self._iterations,
        )
        if not keys_equal(stored.derived_key, attempt):
            logger.debug("Vault verify failed: account=%s", account)
            raise WrongPassword()
        logger.debug("Vault verify ok: account=%s", account)

    def fingerprint_master_password(self, session: Optional[Bound] = None) -> str:
        """Short lowercase hex tag of the session master password.

        Derived with the vault salt alone, so it is stable across sessions
        for the same vault and master password. A mismatch with the tag the
        user remembers means the master password is likely wrong; a match
        is only indicative.
        """
        bound = self._resolve(session)
        return fingerprint(bound.master_password, self._vault_salt, self._iterations)

    def count(self) -> int:
        return len(self._entries)

    def contains(self, account: str) -> bool:
        return account in self._entries

    def accounts(self) -> list[str]:
        return list(self._entries)

    def sample_random_account(self) -> Optional[str]:
        """Pick a stored account uniformly at random, or None if empty."""
        if not self._entries:
            return None
        return self._rng.choice(list(self._entries))

    # --- Magic Methods ---

    def __len__(self) -> int:
        return self.count()

    def __contains__(self, account: object) -> bool:
        return account in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._entries))
