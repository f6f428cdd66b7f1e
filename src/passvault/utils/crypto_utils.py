import secrets
from dataclasses import dataclass

from argon2.exceptions import HashingError
from argon2.low_level import hash_secret_raw, Type
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

from passvault.config.config_vault import *
from passvault.utils.errors import FormatError, WrongPasswordOrCorrupt


@dataclass(frozen=True)
class KdfParams:
    """
    Argon2id cost parameters.

    Stored in every vault header so that changing the defaults in
    config_vault never invalidates an existing vault.
    """
    time_cost: int = ARGON_TIME
    memory_cost: int = ARGON_MEMORY   # KiB
    parallelism: int = ARGON_PARALLELISM

    def validate(self) -> "KdfParams":
        """
        Check the parameters are within the accepted bounds.

        Raises:
            FormatError: If any parameter is out of range. Bounds keep a
                hostile header from requesting an absurd amount of work.
        """
        if not 1 <= self.parallelism <= ARGON_PARALLELISM_MAX:
            raise FormatError(f"Unsupported Argon2 parallelism: {self.parallelism}")
        if not 1 <= self.time_cost <= ARGON_TIME_MAX:
            raise FormatError(f"Unsupported Argon2 time cost: {self.time_cost}")
        if not 8 * self.parallelism <= self.memory_cost <= ARGON_MEMORY_MAX:
            raise FormatError(f"Unsupported Argon2 memory cost: {self.memory_cost}")
        return self


def new_salt() -> bytes:
    """Fresh random salt for a new vault or a master password change."""
    return secrets.token_bytes(SALT_LEN)


def new_nonce() -> bytes:
    """Fresh random nonce. Called on every save, never reused."""
    return secrets.token_bytes(NONCE_LEN)


def derive_key(pw: str | bytes, salt: bytes, params: KdfParams | None = None) -> bytearray:
    """
    Derive a symmetric encryption key from a password and salt using Argon2id.

    Applies the Argon2id hashing function to produce a fixed-length
    key suitable for use with ChaCha20-Poly1305.

    Args:
        pw: Master password, as text or raw UTF-8 bytes.
        salt: Cryptographic salt as raw bytes.
        params: Argon2 cost parameters. Defaults to the configured ones.

    Returns:
        A 32-byte key in a bytearray so the caller can wipe it.

    Raises:
        FormatError: If the parameters are out of bounds.
        ValueError: If Argon2 rejects the password or salt.

    Security:
        - Argon2id provides resistance to brute force attacks.
        - Deterministic: same password, salt and params give the same key.
        - The salt is not secret but must be unique per vault.
    """
    params = (params or KdfParams()).validate()
    if isinstance(pw, str):
        pw = pw.encode(UTF8)
    try:
        key = hash_secret_raw(
            secret=pw,
            salt=salt,
            time_cost=params.time_cost,
            memory_cost=params.memory_cost,
            parallelism=params.parallelism,
            hash_len=ARGON_HASH_LEN,
            type=Type.ID
        )
    except HashingError as e:
        raise ValueError(f"Key derivation failed: {e}") from e
    return bytearray(key)


def seal(key: bytes, nonce: bytes, plaintext: bytes, associated_data: bytes) -> bytes:
    """
    Encrypt plaintext using ChaCha20-Poly1305 with associated data.

    Args:
        key: 32-byte key from derive_key.
        nonce: 12-byte nonce. Must never repeat for the same key.
        plaintext: Serialized vault bytes.
        associated_data: Header bytes, authenticated but not encrypted.

    Returns:
        Ciphertext followed by the 16-byte authentication tag.
    """
    aead = ChaCha20Poly1305(bytes(key))
    return aead.encrypt(
        nonce=nonce,
        data=plaintext,
        associated_data=associated_data
    )


def open_sealed(key: bytes, nonce: bytes, ciphertext: bytes, associated_data: bytes) -> bytes:
    """
    Decrypt and authenticate a ChaCha20-Poly1305 payload.

    Any modification to the ciphertext, tag, nonce or associated data
    causes decryption to fail.

    Returns:
        The plaintext bytes.

    Raises:
        WrongPasswordOrCorrupt: If authentication fails. No further detail
            is given, a wrong key and a damaged file look the same.

    Security:
        - Authentication is verified before plaintext is released.
        - No partial plaintext is returned on failure.
    """
    aead = ChaCha20Poly1305(bytes(key))
    try:
        return aead.decrypt(
            nonce=nonce,
            data=ciphertext,
            associated_data=associated_data
        )
    except InvalidTag:
        raise WrongPasswordOrCorrupt() from None


def wipe(buf: bytearray) -> None:
    """Overwrite a mutable buffer with zeros."""
    for i in range(len(buf)):
        buf[i] = 0

