import os
import struct
import logging
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path

from passvault.config.config_vault import *
from passvault.config.logging_config import timestamp
from passvault.utils.crypto_utils import (
    KdfParams, derive_key, new_nonce, new_salt, open_sealed, seal, wipe
)
from passvault.utils.Entry import Vault, decode_vault, encode_vault
from passvault.utils.errors import (
    FormatError, VaultIOError, VaultNotFound, WrongPasswordOrCorrupt
)

logger = logging.getLogger(__name__)

# magic, version, salt length
_PREFIX = struct.Struct("<4sBB")
# time cost, memory cost (KiB), parallelism, nonce length
_COSTS = struct.Struct("<IIBB")

# One lock per canonical vault path, serializes the write-then-rename sequence.
# Entries are never removed: the registry grows by one lock per distinct
# path saved in this process, which stays small for a single-user vault.
_path_locks: dict[str, threading.Lock] = {}
_path_locks_guard = threading.Lock()


@dataclass(frozen=True)
class VaultHeader:
    """
    Unencrypted vault file header.

    Layout (little-endian):
        magic(4) | version(1) | salt_len(1) | salt | time_cost(4) |
        memory_cost(4) | parallelism(1) | nonce_len(1) | nonce

    Every field is readable before a key exists. The serialized header is
    the associated data of the AEAD seal, so editing any byte of it makes
    the vault fail to open.
    """
    salt: bytes
    params: KdfParams
    nonce: bytes
    version: int = FORMAT_VERSION

    def to_bytes(self) -> bytes:
        return b"".join((
            _PREFIX.pack(FORMAT_MAGIC, self.version, len(self.salt)),
            self.salt,
            _COSTS.pack(
                self.params.time_cost,
                self.params.memory_cost,
                self.params.parallelism,
                len(self.nonce),
            ),
            self.nonce,
        ))

    @classmethod
    def parse(cls, raw: bytes) -> tuple["VaultHeader", bytes, bytes]:
        """
        Split raw file bytes into header, header bytes and ciphertext.

        Returns:
            (header, header_bytes, ciphertext). header_bytes is the exact
            slice of the file used as associated data.

        Raises:
            FormatError: Bad magic, unsupported version, truncated file,
                or header values outside the accepted bounds.
        """
        if len(raw) < _PREFIX.size:
            raise FormatError("File too short to be a vault")

        magic, version, salt_len = _PREFIX.unpack_from(raw, 0)
        if magic != FORMAT_MAGIC:
            raise FormatError("Not a vault file (bad magic bytes)")
        if version not in SUPPORTED_VERSIONS:
            raise FormatError(f"Unsupported vault format version: {version}")
        if salt_len < SALT_LEN:
            raise FormatError(f"Salt too short: {salt_len} bytes")

        offset = _PREFIX.size
        salt = raw[offset:offset + salt_len]
        offset += salt_len

        if len(raw) < offset + _COSTS.size:
            raise FormatError("Truncated vault header")
        time_cost, memory_cost, parallelism, nonce_len = _COSTS.unpack_from(raw, offset)
        offset += _COSTS.size

        if nonce_len != NONCE_LEN:
            raise FormatError(f"Unsupported nonce length: {nonce_len}")
        nonce = raw[offset:offset + nonce_len]
        offset += nonce_len

        ciphertext = raw[offset:]
        if len(nonce) != nonce_len or len(ciphertext) < TAG_LEN:
            raise FormatError("Truncated vault file")

        params = KdfParams(time_cost, memory_cost, parallelism).validate()
        header = cls(salt=salt, params=params, nonce=nonce, version=version)
        return header, raw[:offset], ciphertext


def _path_lock(path: Path) -> threading.Lock:
    """Lock shared by every save to the same file, however the path is spelled."""
    canonical = os.path.normcase(os.path.realpath(path))
    with _path_locks_guard:
        return _path_locks.setdefault(canonical, threading.Lock())


def vault_exists(path: str | os.PathLike = VAULT_FILE) -> bool:
    return Path(path).is_file()


def read_header(path: str | os.PathLike) -> VaultHeader:
    """
    Read and parse only the header of a vault file. No key is derived.

    Raises:
        VaultNotFound: If the path does not exist.
        VaultIOError: If the file cannot be read.
        FormatError: If the header is invalid.
    """
    return VaultHeader.parse(_read_file(Path(path)))[0]


def _read_file(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError:
        raise VaultNotFound(f"No vault found at {path}") from None
    except OSError as e:
        msg = f"Could not read vault {path}: {e}"
        logger.error(f"[{timestamp()}] {msg}\n")
        raise VaultIOError(msg) from e


def load_vault(path: str | os.PathLike, password: str) -> Vault:
    """
    Decrypt the vault stored at path.

    Reads the file, parses the header, derives the key with the salt and
    Argon2 parameters found there, authenticates and decrypts the
    ciphertext, then decodes it. Either the whole vault is returned or an
    error is raised.

    Args:
        path: Vault file location.
        password: Master password.

    Returns:
        The decrypted Vault.

    Raises:
        VaultNotFound: If the path does not exist.
        FormatError: If the header is unreadable or the version unsupported.
        WrongPasswordOrCorrupt: If AEAD verification fails.
        VaultIOError: If the file cannot be read.
    """
    path = Path(path)
    raw = _read_file(path)

    try:
        header, header_bytes, ciphertext = VaultHeader.parse(raw)
    except FormatError as e:
        logger.error(f"[{timestamp()}] Invalid vault header in {path}: {e}\n")
        raise

    key = derive_key(password, header.salt, header.params)
    try:
        plaintext = open_sealed(key, header.nonce, ciphertext, header_bytes)
    except WrongPasswordOrCorrupt:
        logger.error(f"[{timestamp()}] Wrong master password or vault is corrupted: {path}\n")
        raise
    finally:
        wipe(key)

    return decode_vault(plaintext)


def save_vault(path: str | os.PathLike, password: str, vault: Vault,
               params: KdfParams | None = None) -> None:
    """
    Securely save the vault to disk.

    Keeps the salt of the existing file (a fresh one is generated for a
    new vault), derives the key, encodes and seals the vault under a new
    random nonce, and replaces the file atomically.

    Args:
        path: Vault file location.
        password: Master password.
        vault: Vault to persist.
        params: Argon2 parameters. Defaults to those of the existing file,
            or the configured defaults for a new vault.

    Raises:
        ValueError: If params are outside the accepted Argon2 bounds.
        FormatError: If an entry cannot be stored as it is (see
            Entry.check). Raised before anything is written.
        VaultIOError: If writing, syncing or renaming fails. The previous
            file, if any, is left untouched.

    Side Effects:
        Atomically overwrites the vault file on disk.
    """
    path = Path(path)
    params = _checked_params(params)
    with _path_lock(path):
        salt, params = _salt_and_params(path, params)
        _write_vault(path, password, vault, salt, params)


def change_master_password(path: str | os.PathLike, old_password: str,
                           new_password: str, params: KdfParams | None = None) -> Vault:
    """
    Change the master password for the vault.

    Verifies the current password by loading the vault, then re-encrypts
    it under a new random salt and the current default Argon2 parameters
    (or params). The file is replaced atomically.

    Returns:
        The vault that was re-encrypted.

    Raises:
        ValueError: If the new password is empty or params are out of bounds.
        Any error load_vault or save_vault can raise.

    Security Notes:
        - Current password must be verified before changes occur.
        - A new random salt is generated.
    """
    if not new_password:
        raise ValueError("Master password cannot be empty!")

    path = Path(path)
    params = _checked_params(params)
    with _path_lock(path):
        vault = load_vault(path, old_password)
        _write_vault(path, new_password, vault, new_salt(), params or KdfParams())
    logger.info(f"[{timestamp()}] Master password changed for {path}")
    return vault


def _checked_params(params: KdfParams | None) -> KdfParams | None:
    """Caller-supplied Argon2 params, validated. Out of bounds raises ValueError."""
    if params is None:
        return None
    try:
        return params.validate()
    except FormatError as e:
        raise ValueError(f"Invalid Argon2 parameters: {e}") from None


def _salt_and_params(path: Path, params: KdfParams | None) -> tuple[bytes, KdfParams]:
    """Salt and params for the next save of path."""
    try:
        header = read_header(path)
    except VaultNotFound:
        return new_salt(), params or KdfParams()
    except FormatError as e:
        # Unreadable file gets replaced as if it were a new vault
        logger.error(f"[{timestamp()}] Replacing unreadable vault header in {path}: {e}\n")
        return new_salt(), params or KdfParams()
    return header.salt, params or header.params


def _write_vault(path: Path, password: str, vault: Vault,
                 salt: bytes, params: KdfParams) -> None:
    # Encode first so an entry that cannot be stored fails before any work
    plaintext = encode_vault(vault)

    header = VaultHeader(salt=salt, params=params, nonce=new_nonce())
    header_bytes = header.to_bytes()

    key = derive_key(password, salt, params)
    try:
        ciphertext = seal(key, header.nonce, plaintext, header_bytes)
    finally:
        wipe(key)

    try:
        _atomic_write(path, header_bytes + ciphertext)
    except OSError as e:
        msg = f"Could not save vault {path}: {e}"
        logger.error(f"[{timestamp()}] {msg}\n")
        raise VaultIOError(msg) from e


def _atomic_write(path: Path, data: bytes) -> None:
    """
    Write data to a temporary file beside path, sync it, then rename over path.

    A crash at any point leaves either the old file or the new one, never
    a mix. The temporary file is created with owner-only permissions.
    """
    directory = path.parent
    fd, tmp = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno()) # force to disk
        os.chmod(tmp, VAULT_FILE_MODE)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise

    _fsync_dir(directory)


def _fsync_dir(directory: Path) -> None:
    """Persist the rename itself. Not available on Windows."""
    if os.name == "nt":
        return
    try:
        fd = os.open(directory, os.O_RDONLY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
    except OSError as e:
        # Some filesystems refuse fsync on directories; the rename is already done.
        logger.warning(f"[{timestamp()}] Could not sync directory {directory}: {e}")
