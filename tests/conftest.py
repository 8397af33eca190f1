import random
import itertools

import pytest

from credential_vault.vault import CredentialVault

# Keep PBKDF2 cheap in tests that do not look at the cost factor.
FAST_ITERATIONS = 1


class CountingBytes:
    """Deterministic stand-in for secrets.token_bytes."""

    def __init__(self):
        self._counter = itertools.count(1)
        self.calls = 0

    def __call__(self, n: int) -> bytes:
        self.calls += 1
        value = next(self._counter)
        return value.to_bytes(n, "big")


@pytest.fixture
def counting_bytes():
    return CountingBytes()


@pytest.fixture
def vault():
    """An empty vault bound to a master password."""
    v = CredentialVault.create(FAST_ITERATIONS)
    v.set_master_password("master-secret")
    return v


@pytest.fixture
def seeded_vault(counting_bytes):
    """A bound vault with deterministic salts and sampling."""
    v = CredentialVault.create(
        FAST_ITERATIONS, random_bytes=counting_bytes, rng=random.Random(1234),
    )
    v.set_master_password("master-secret")
    return v
