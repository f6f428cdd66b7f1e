"""
PasswordVault engine - encrypted local credential storage,
password generation and strength scoring.
"""
from passvault.config.config_vault import VERSION as __version__
from passvault.utils.Entry import Entry, Vault, encode_vault, decode_vault
from passvault.utils.crypto_utils import KdfParams
from passvault.utils.errors import (
    VaultError, VaultNotFound, WrongPasswordOrCorrupt,
    FormatError, VaultIOError, InvalidPolicy,
)
from passvault.utils.vault_utils import (
    load_vault, save_vault, change_master_password, vault_exists,
)
from passvault.utils.password_generator import (
    GeneratorPolicy, generate_password, generate_passphrase,
)
from passvault.utils.password_utils import check_password_strength, strength_analysis
from passvault.utils.background import (
    load_vault_async, save_vault_async, change_master_password_async,
)

__all__ = [
    "Entry", "Vault", "encode_vault", "decode_vault", "KdfParams",
    "VaultError", "VaultNotFound", "WrongPasswordOrCorrupt",
    "FormatError", "VaultIOError", "InvalidPolicy",
    "load_vault", "save_vault", "change_master_password", "vault_exists",
    "GeneratorPolicy", "generate_password", "generate_passphrase",
    "check_password_strength", "strength_analysis",
    "load_vault_async", "save_vault_async", "change_master_password_async",
]
