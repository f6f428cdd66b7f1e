# config_vault.py
"""
Configuration constants
"""
from pathlib import Path
# ==============================================================
# Vault settings
# ==============================================================
# Software version
VERSION = "1.0.0"

# Default location of the encrypted vault file
BASE_DIR = Path.home()
VAULT_FILE = BASE_DIR / "password_vault.pvlt"

# File format. DO NOT CHANGE once vaults exist.
FORMAT_MAGIC = b"PVLT"
FORMAT_VERSION = 1
SUPPORTED_VERSIONS = (1,)

# Length of generated random salt
SALT_LEN = 16

# Argon2id parameters used for NEW vaults.
# Existing vaults keep the parameters stored in their header.
ARGON_TIME = 3             # Iterations - controls CPU cost
ARGON_MEMORY = 64 * 1024   # 64 MiB - controls RAM cost (KiB)
ARGON_PARALLELISM = 2
ARGON_HASH_LEN = 32        # bytes - Encryption key size - DO NOT CHANGE

# Bounds a header must respect before we spend time deriving a key.
ARGON_TIME_MAX = 64
ARGON_MEMORY_MAX = 4 * 1024 * 1024  # 4 GiB
ARGON_PARALLELISM_MAX = 64

# ChaCha20Poly1305 nonce length. DO NOT CHANGE
NONCE_LEN = 12
TAG_LEN = 16

# Permissions for newly written vault files
VAULT_FILE_MODE = 0o600

# Folder assigned to entries without one
DEFAULT_FOLDER = "General"

# Worker threads for background load/save
BACKGROUND_WORKERS = 2

# ==============================================================
# Password generation defaults
# ==============================================================
PASS_DEFAULTS = {
    "length": 20,                    # Default generated password length
    "min_length": 4,                 # Practical minimum for generated passwords
    "use_uppercase": True,
    "use_numbers": True,
    "use_symbols": True,
    "max_consecutive": 3,            # Reject "aaaa", "1111", etc.
    "symbols_pool": "!@#$%^&*()_+-=[]{}",
}
PASSPHRASE_DEFAULTS = {
    "word_count": 5,
    "separator": "-",
}

# ==============================================================
# Strength scoring
# ==============================================================
# Upper bounds (bits, exclusive) for scores 0..3. Anything above is 4.
STRENGTH_THRESHOLDS = (28, 36, 60, 128)
STRENGTH_MIN_LENGTH = 8              # Shorter passwords cap at SHORT_PASSWORD_CAP
SHORT_PASSWORD_CAP = 1
PATTERN_CAP = 0                      # Cap for "aaaa" / "1234" / "dcba"
MIN_SEQUENCE_LEN = 3
AUDIT_STRENGTH_THRESHOLD = 3         # Scores below this are flagged by audit
ZXCVBN_MAX_LENGTH = 100

# ==============================================================
# Display & formatting
# ==============================================================
UTF8 = "utf-8"
LOG_FILE = "error.log"

# length of visible title when displaying entries
TITLE_LEN = 18
USERNAME_LEN = 22
FOLDER_LEN = 12

# separator
SEP_LG = "="*50
SEP_SM = "-"*50

# ==============================================================
# Optional: local overrides
# Local configuration file overrides standard config values
# ==============================================================
try:
    from passvault.config.config_local import *
except ImportError:
    pass  # No local config - use defaults above
