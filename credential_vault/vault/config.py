"""
Vault Configuration — Validated settings for creating and storing a vault.

Reads settings from environment variables:
    VAULT_ITERATIONS = <integer in 1..2**31-1>, used only for new vaults
    VAULT_STORE_FILE = <path to the persisted vault>

Security Note:
    The master password is never part of the configuration.
"""
import os
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from .crypto import DEFAULT_ITERATIONS, MAX_ITERATIONS
from .exceptions import InvalidConfig

logger = logging.getLogger("credential_vault.vault")

DEFAULT_STORE_FILE = "store.bin"


def validate_iterations(value: Any) -> int:
    """Check a PBKDF2 iteration count.

    Args:
        value: Candidate iteration count.

    Returns:
        The iteration count as ``int``.

    Raises:
        InvalidConfig: If value is missing, not an integer, or outside
            1..MAX_ITERATIONS.
    """
    if value is None:
        raise InvalidConfig("Iteration count must be specified")
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfig(
            f"Iteration count must be an integer, got {type(value).__name__}"
        )
    if value <= 0:
        raise InvalidConfig(
            f"Iteration count must be a positive integer, got {value}"
        )
    if value > MAX_ITERATIONS:
        raise InvalidConfig(
            f"Iteration count cannot exceed {MAX_ITERATIONS}, got {value}"
        )
    return value


class VaultConfig(BaseModel):
    """Validated vault configuration."""

    iterations: int = Field(default=DEFAULT_ITERATIONS, ge=1, le=MAX_ITERATIONS)
    store_file: Path = Field(default=Path(DEFAULT_STORE_FILE))

    @field_validator("store_file")
    @classmethod
    def validate_store_file(cls, v: Path) -> Path:
        """Reject an empty store path."""
        if not str(v).strip() or str(v) == ".":
            raise ValueError("store_file cannot be empty")
        return v

    @classmethod
    def from_env(cls, **overrides: Any) -> "VaultConfig":
        """Create VaultConfig from environment, with explicit overrides.

        Args:
            overrides: Values taking precedence over the environment
                (``None`` values are ignored).

        Returns:
            Populated VaultConfig instance.

        Raises:
            InvalidConfig: If a value fails validation.
        """
        values: dict[str, Any] = {}
        if "VAULT_ITERATIONS" in os.environ:
            values["iterations"] = os.environ["VAULT_ITERATIONS"]
        if "VAULT_STORE_FILE" in os.environ:
            values["store_file"] = os.environ["VAULT_STORE_FILE"]
        values.update({k: v for k, v in overrides.items() if v is not None})
        try:
            config = cls(**values)
        except ValidationError as err:
            raise InvalidConfig(str(err)) from err
        logger.debug(
            "Vault config: iterations=%d store_file=%s",
            config.iterations, config.store_file,
        )
        return config
