"""
Shared fixtures.

Argon2 is run with the cheapest parameters it accepts so the suite
stays fast; the parameters travel in the header, so every code path
is the same as with the production defaults.
"""
import pytest

from passvault.utils.crypto_utils import KdfParams
from passvault.utils.Entry import Entry, Vault


@pytest.fixture
def fast_params():
    return KdfParams(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def vault_path(tmp_path):
    return tmp_path / "vault.pvlt"


@pytest.fixture
def sample_vault():
    return Vault([
        Entry("Bank", username="alice", secret="x", url="bank.example", notes="", folder="Finance"),
        Entry("Email", username="alice@example.com", secret="p@ssW0rd!", url="https://mail.example.com",
              notes="Recovery codes in the safe\nsecond line"),
        Entry("Wi-Fi", secret="ünïcødé-パスワード", folder="Home"),
    ])
