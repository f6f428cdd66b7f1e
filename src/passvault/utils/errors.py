"""
Error kinds surfaced by the vault engine.

Callers branch on the exception class, never on the message text.
"""


class VaultError(Exception):
    """Base class for every error raised by passvault."""


class VaultNotFound(VaultError, FileNotFoundError):
    """
    The vault path does not exist.

    A normal first-run condition: the caller decides whether to create
    a new vault.
    """


class WrongPasswordOrCorrupt(VaultError):
    """
    Authentication of the vault failed.

    Raised for a wrong master password and for any tampering with the
    header or ciphertext. The two causes are deliberately indistinguishable.
    """

    def __init__(self, message: str = "Wrong master password or vault is corrupted"):
        super().__init__(message)


class FormatError(VaultError, ValueError):
    """Header is unreadable, the version is unsupported, or decoded data is malformed."""


class VaultIOError(VaultError, OSError):
    """Filesystem failure while reading, writing, syncing or renaming a vault."""


class InvalidPolicy(VaultError, ValueError):
    """The password generator was asked for something it cannot produce."""
