"""
Vault Storage — Encoding of the persisted snapshot and file hand-off.

Snapshot format (orjson document, bytes fields base64-encoded):

    {"format": 1,
     "iterations": <int>,
     "vault_salt": <b64, 16 bytes>,
     "entries": {<account>: {"derived_key": <b64, 32 bytes>,
                             "account_salt": <b64, 16 bytes>}}}

Security Note:
    The session master password (and anything derived from it alone, such
    as the fingerprint) is never written to the snapshot.
"""
import os
import logging
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

import orjson

from .credential_vault import CredentialVault, StoredCredential
from .crypto import CREDENTIAL_LEN, SALT_LEN, b64decode, b64encode
from .exceptions import InvalidConfig, VaultFormatError

logger = logging.getLogger("credential_vault.vault")

FORMAT_VERSION = 1

PathLike = Union[str, "os.PathLike[str]"]


# ---------------------------------------------------------------------------
# Snapshot codec
# ---------------------------------------------------------------------------

def snapshot(vault: CredentialVault) -> dict[str, Any]:
    """Return the persistable fields of a vault as a JSON-ready dict."""
    return {
        "format": FORMAT_VERSION,
        "iterations": vault.iterations,
        "vault_salt": b64encode(vault.vault_salt),
        "entries": {
            account: {
                "derived_key": b64encode(cred.derived_key),
                "account_salt": b64encode(cred.account_salt),
            }
            for account, cred in vault.entries.items()
        },
    }


def encode_vault(vault: CredentialVault) -> bytes:
    """Serialize a vault snapshot to bytes.

    Args:
        vault: Vault to encode.

    Returns:
        orjson-encoded snapshot.
    """
    return orjson.dumps(snapshot(vault), option=orjson.OPT_SORT_KEYS)


def decode_vault(data: bytes, **kwargs: Any) -> CredentialVault:
    """Rebuild a vault from an encoded snapshot.

    Args:
        data: Bytes produced by ``encode_vault``.
        kwargs: Extra arguments for ``CredentialVault`` (e.g. ``random_bytes``).

    Returns:
        Unbound CredentialVault with the persisted iterations, salt and entries.

    Raises:
        VaultFormatError: If the data is not a valid snapshot.
    """
    try:
        parsed = orjson.loads(data)
    except orjson.JSONDecodeError as err:
        raise VaultFormatError(f"Vault data is not valid JSON: {err}") from err
    if not isinstance(parsed, dict):
        raise VaultFormatError("Vault data must be a JSON object")

    version = parsed.get("format")
    if version != FORMAT_VERSION:
        raise VaultFormatError(f"Unsupported vault format: {version!r}")
    missing = {"iterations", "vault_salt", "entries"} - parsed.keys()
    if missing:
        raise VaultFormatError(
            f"Vault data is missing field(s): {sorted(missing)}"
        )
    raw_entries = parsed["entries"]
    if not isinstance(raw_entries, dict):
        raise VaultFormatError("Vault entries must be a JSON object")

    try:
        vault_salt = b64decode(parsed["vault_salt"], SALT_LEN, "vault_salt")
        entries: dict[str, StoredCredential] = {}
        for account, item in raw_entries.items():
            if not isinstance(item, dict):
                raise ValueError(f"Entry {account!r} must be a JSON object")
            entries[account] = StoredCredential(
                derived_key=b64decode(
                    item.get("derived_key"), CREDENTIAL_LEN, "derived_key",
                ),
                account_salt=b64decode(
                    item.get("account_salt"), SALT_LEN, "account_salt",
                ),
            )
        vault = CredentialVault(
            iterations=parsed["iterations"],
            vault_salt=vault_salt,
            entries=entries,
            **kwargs,
        )
    except (ValueError, InvalidConfig) as err:
        raise VaultFormatError(f"Invalid vault data: {err}") from err
    return vault


# ---------------------------------------------------------------------------
# File hand-off
# ---------------------------------------------------------------------------

def load_vault(path: PathLike, **kwargs: Any) -> Optional[CredentialVault]:
    """Load a vault from path.

    Args:
        path: Location of the persisted vault.
        kwargs: Extra arguments for ``CredentialVault``.

    Returns:
        The decoded vault, or None if the file does not exist.

    Raises:
        VaultFormatError: If the file content cannot be decoded.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except FileNotFoundError:
        logger.debug("No vault at %s", path)
        return None
    vault = decode_vault(data, **kwargs)
    logger.info("Vault loaded from %s: %d account(s)", path, vault.count())
    return vault


def save_vault(vault: CredentialVault, path: PathLike) -> None:
    """Persist vault to path, replacing any previous file atomically.

    The snapshot is written to a temporary file in the same directory and
    moved into place with ``os.replace``.
    """
    path = Path(path)
    data = encode_vault(vault)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent,
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise
    logger.info("Vault saved to %s: %d account(s)", path, vault.count())
