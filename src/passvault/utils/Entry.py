from dataclasses import dataclass, field
from typing import List
import json

from passvault.config.config_vault import UTF8, DEFAULT_FOLDER
from passvault.utils.errors import FormatError

# Serialized field order. Fixed so encoding is deterministic.
ENTRY_FIELDS = ("title", "username", "secret", "url", "notes", "folder")


@dataclass
class Entry:
    """
    Represents a single vault entry.

    Stores a credential and the metadata shown alongside it.
    """
    title: str
    username: str = ''
    secret: str = ''
    url: str = ''
    notes: str = ''
    folder: str = DEFAULT_FOLDER

    def __post_init__(self): # logic after the built-in __init__ method has been called.
        """
        Validate and normalize required fields.

        Ensures the title field is a non-empty string.
        """
        if not isinstance(self.title, str):
            raise TypeError("Title must be a string")

        self.title = self.title.strip()
        if not self.title:
            raise ValueError("Title cannot be empty")

        if not self.folder:
            self.folder = DEFAULT_FOLDER

    def __repr__(self):
        return (
            f"Entry(title={self.title}, "
            f"username={self.username}, "
            f"secret=<hidden>, "
            f"url={self.url}, "
            f"folder={self.folder})"
        )

    def to_dict(self) -> dict:
        """
        Serialize entry to a dictionary.

        Returns:
            Dictionary representation of the entry, keys in ENTRY_FIELDS order.
        """
        return {
            "title": self.title,
            "username": self.username,
            "secret": self.secret,
            "url": self.url,
            "notes": self.notes,
            "folder": self.folder,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Entry":
        """
        Create an entry from decoded storage data.

        Args:
            data: Stored entry data.

        Returns:
            Reconstructed Entry instance.

        Raises:
            FormatError: If a field is missing, has the wrong type, or the
                title is empty.
        """
        if not isinstance(data, dict):
            raise FormatError("Entry data must be an object")

        if "title" not in data:
            raise FormatError("Entry is missing a title")

        values = {
            name: data.get(name, DEFAULT_FOLDER if name == "folder" else "")
            for name in ENTRY_FIELDS
        }
        _check_strings(values)

        try:
            return cls(**values)
        except ValueError as e:
            raise FormatError(str(e)) from e

    def check(self) -> "Entry":
        """
        Confirm the entry would read back exactly as it is now.

        Fields can be edited freely after construction, so this is run
        on every entry before it is encoded.

        Raises:
            FormatError: If a field is not a string, the title is empty or
                has surrounding whitespace, or the folder is empty.
        """
        _check_strings(self.to_dict())
        if not self.title.strip():
            raise FormatError("Title cannot be empty")
        if self.title != self.title.strip():
            raise FormatError(f"Title has surrounding whitespace: {self.title!r}")
        if not self.folder:
            raise FormatError(f"Folder cannot be empty (entry '{self.title}')")
        return self


def _check_strings(values: dict) -> None:
    for name, value in values.items():
        if not isinstance(value, str):
            raise FormatError(f"Entry field '{name}' must be a string")


@dataclass
class Vault:
    """
    Ordered collection of entries.

    Order is insertion order and only matters for display.
    """
    entries: List[Entry] = field(default_factory=list)

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def add(self, entry: Entry) -> Entry:
        self.entries.append(entry)
        return entry

    def remove(self, index: int) -> Entry:
        return self.entries.pop(index)

    def folders(self) -> list[str]:
        """Distinct folder names in first-seen order."""
        return list(dict.fromkeys(e.folder for e in self.entries))

    def search(self, query: str) -> list[int]:
        """
        Indexes of entries matching every whitespace-separated term.

        Matches case-insensitively against title, username, url, notes
        and folder. Secrets are never searched.
        """
        terms = query.lower().split()
        hits = []
        for i, e in enumerate(self.entries):
            searchable_str = " ".join([e.title, e.username, e.url, e.notes, e.folder]).lower()
            if all(term in searchable_str for term in terms):
                hits.append(i)
        return hits


def encode_vault(vault: Vault) -> bytes:
    """
    Serialize a vault to compact JSON bytes.

    Deterministic for the same entries in the same order.

    Returns:
        UTF-8 encoded JSON bytes.

    Raises:
        FormatError: If an entry would not decode back to itself
            (see Entry.check).
    """
    return json.dumps(
        {"entries": [e.check().to_dict() for e in vault.entries]},
        separators=(",", ":"),
        ensure_ascii=False,
    ).encode(UTF8)


def decode_vault(raw: bytes) -> Vault:
    """
    Deserialize a vault from JSON bytes.

    No best-effort recovery: the bytes were authenticated before they
    got here, so anything malformed means a codec mismatch.

    Args:
        raw: UTF-8 encoded JSON bytes.

    Returns:
        Reconstructed Vault.

    Raises:
        FormatError: If the bytes are not a valid encoded vault.
    """
    if not isinstance(raw, (bytes, bytearray)):
        raise TypeError("Input must be bytes")

    try:
        data = json.loads(bytes(raw).decode(UTF8))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise FormatError(f"Vault payload is not valid JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
        raise FormatError("Vault payload must contain an 'entries' list")

    return Vault([Entry.from_dict(item) for item in data["entries"]])
