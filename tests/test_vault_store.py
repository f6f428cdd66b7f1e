import os
import stat
import threading

import pytest

from passvault.utils import vault_utils
from passvault.utils.crypto_utils import KdfParams
from passvault.utils.Entry import Entry, Vault
from passvault.utils.errors import (
    FormatError, VaultError, VaultIOError, VaultNotFound, WrongPasswordOrCorrupt
)
from passvault.utils.vault_utils import (
    VaultHeader, change_master_password, load_vault, read_header, save_vault, vault_exists
)


# ── Round trip ─────────────────────────────────────────────────────────
def test_round_trip_preserves_entries_and_order(vault_path, sample_vault, fast_params):
    save_vault(vault_path, "pw", sample_vault, fast_params)
    loaded = load_vault(vault_path, "pw")
    assert loaded == sample_vault
    assert [e.title for e in loaded] == ["Bank", "Email", "Wi-Fi"]


def test_empty_vault_round_trip(vault_path, fast_params):
    save_vault(vault_path, "pw", Vault(), fast_params)
    assert load_vault(vault_path, "pw") == Vault()


def test_correct_horse_scenario(vault_path, fast_params):
    with pytest.raises(VaultNotFound):
        load_vault(vault_path, "correct-horse")

    vault = Vault()
    vault.add(Entry(title="Bank", username="alice", secret="x",
                    url="bank.example", notes="", folder="Finance"))
    save_vault(vault_path, "correct-horse", vault, fast_params)

    loaded = load_vault(vault_path, "correct-horse")
    assert loaded.entries == [Entry("Bank", "alice", "x", "bank.example", "", "Finance")]

    with pytest.raises(WrongPasswordOrCorrupt):
        load_vault(vault_path, "wrong-pw")


def test_plaintext_never_on_disk(vault_path, sample_vault, fast_params):
    save_vault(vault_path, "pw", sample_vault, fast_params)
    raw = vault_path.read_bytes()
    for secret in (b"alice", b"p@ssW0rd!", b"Finance", b"bank.example"):
        assert secret not in raw


# ── Errors ─────────────────────────────────────────────────────────────
def test_missing_file_is_not_found(vault_path):
    with pytest.raises(VaultNotFound) as exc:
        load_vault(vault_path, "pw")
    assert isinstance(exc.value, FileNotFoundError)
    assert isinstance(exc.value, VaultError)
    assert not vault_exists(vault_path)


@pytest.mark.parametrize("password", ["", "pw ", "PW", "pw2"])
def test_wrong_password(vault_path, sample_vault, fast_params, password):
    save_vault(vault_path, "pw", sample_vault, fast_params)
    with pytest.raises(WrongPasswordOrCorrupt):
        load_vault(vault_path, password)


@pytest.mark.parametrize("raw", [
    b"",
    b"PVL",
    b"NOPE\x01\x10" + b"\x00" * 80,
    b"PVLT\x02\x10" + b"\x00" * 80,
    b"PVLT\x01\x08" + b"\x00" * 80,
])
def test_unreadable_header_is_format_error(vault_path, raw):
    vault_path.write_bytes(raw)
    with pytest.raises(FormatError):
        load_vault(vault_path, "pw")


def test_truncated_file_is_format_error(vault_path, sample_vault, fast_params):
    save_vault(vault_path, "pw", sample_vault, fast_params)
    raw = vault_path.read_bytes()
    header = read_header(vault_path)
    header_len = len(header.to_bytes())

    for cut in (header_len - 1, header_len, header_len + 15):
        vault_path.write_bytes(raw[:cut])
        with pytest.raises(FormatError):
            load_vault(vault_path, "pw")


def test_future_version_rejected_before_derivation(vault_path, sample_vault, fast_params, monkeypatch):
    save_vault(vault_path, "pw", sample_vault, fast_params)
    raw = bytearray(vault_path.read_bytes())
    raw[4] = 2
    vault_path.write_bytes(bytes(raw))

    def no_derive(*args, **kwargs):
        raise AssertionError("key derived for unsupported version")

    monkeypatch.setattr(vault_utils, "derive_key", no_derive)
    with pytest.raises(FormatError, match="version"):
        load_vault(vault_path, "pw")


def test_every_single_byte_flip_is_detected(vault_path, fast_params):
    vault = Vault([Entry("Bank", "alice", "x", "bank.example", "", "Finance")])
    save_vault(vault_path, "pw", vault, fast_params)
    original = vault_path.read_bytes()

    for i in range(len(original)):
        tampered = bytearray(original)
        tampered[i] ^= 0x01
        vault_path.write_bytes(bytes(tampered))
        with pytest.raises((WrongPasswordOrCorrupt, FormatError)):
            load_vault(vault_path, "pw")


def test_directory_path_is_io_error(tmp_path):
    with pytest.raises(VaultIOError):
        load_vault(tmp_path, "pw")


# ── Header ─────────────────────────────────────────────────────────────
def test_header_layout(vault_path, fast_params):
    save_vault(vault_path, "pw", Vault(), fast_params)
    raw = vault_path.read_bytes()
    assert raw[:4] == b"PVLT"
    assert raw[4] == 1

    header, header_bytes, ciphertext = VaultHeader.parse(raw)
    assert header.params == fast_params
    assert len(header.salt) == 16
    assert len(header.nonce) == 12
    assert header_bytes == header.to_bytes()
    assert raw == header_bytes + ciphertext


def test_salt_kept_and_nonce_fresh_across_saves(vault_path, sample_vault, fast_params):
    save_vault(vault_path, "pw", sample_vault, fast_params)
    first = read_header(vault_path)
    save_vault(vault_path, "pw", sample_vault)
    second = read_header(vault_path)

    assert second.salt == first.salt
    assert second.params == first.params
    assert second.nonce != first.nonce


def test_new_vaults_get_distinct_salts(tmp_path, fast_params):
    save_vault(tmp_path / "a.pvlt", "pw", Vault(), fast_params)
    save_vault(tmp_path / "b.pvlt", "pw", Vault(), fast_params)
    assert read_header(tmp_path / "a.pvlt").salt != read_header(tmp_path / "b.pvlt").salt


def test_vault_saved_with_old_params_still_opens(vault_path, sample_vault):
    old = KdfParams(time_cost=2, memory_cost=16, parallelism=2)
    save_vault(vault_path, "pw", sample_vault, old)
    assert read_header(vault_path).params == old
    assert load_vault(vault_path, "pw") == sample_vault


def test_unreadable_existing_file_replaced_on_save(vault_path, sample_vault, fast_params):
    vault_path.write_bytes(b"garbage")
    save_vault(vault_path, "pw", sample_vault, fast_params)
    assert load_vault(vault_path, "pw") == sample_vault


@pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
def test_vault_file_is_owner_only(vault_path, fast_params):
    save_vault(vault_path, "pw", Vault(), fast_params)
    assert stat.S_IMODE(vault_path.stat().st_mode) == 0o600


# ── Crash safety ───────────────────────────────────────────────────────
def test_failed_rename_leaves_original_untouched(vault_path, sample_vault, fast_params, monkeypatch):
    save_vault(vault_path, "pw", sample_vault, fast_params)
    before = vault_path.read_bytes()

    def crash(src, dst):
        raise OSError("simulated power loss")

    monkeypatch.setattr(vault_utils.os, "replace", crash)
    changed = Vault(sample_vault.entries + [Entry("New")])
    with pytest.raises(VaultIOError):
        save_vault(vault_path, "pw", changed)

    monkeypatch.undo()
    assert vault_path.read_bytes() == before
    assert load_vault(vault_path, "pw") == sample_vault
    assert sorted(p.name for p in vault_path.parent.iterdir()) == ["vault.pvlt"]


def test_failed_sync_leaves_no_file(vault_path, fast_params, monkeypatch):
    def broken_fsync(fd):
        raise OSError("I/O error")

    monkeypatch.setattr(vault_utils.os, "fsync", broken_fsync)
    with pytest.raises(VaultIOError) as exc:
        save_vault(vault_path, "pw", Vault(), fast_params)
    assert isinstance(exc.value, OSError)

    monkeypatch.undo()
    assert list(vault_path.parent.iterdir()) == []


def test_missing_directory_is_io_error(tmp_path, fast_params):
    with pytest.raises(VaultIOError):
        save_vault(tmp_path / "nope" / "vault.pvlt", "pw", Vault(), fast_params)


@pytest.mark.parametrize("field, value", [
    ("title", ""),
    ("title", "   "),
    ("title", " Bank "),
    ("username", None),
    ("secret", 1234),
    ("folder", ""),
])
def test_unstorable_edit_is_rejected_and_file_kept(vault_path, sample_vault, fast_params, field, value):
    save_vault(vault_path, "pw", sample_vault, fast_params)
    before = vault_path.read_bytes()

    edited = load_vault(vault_path, "pw")
    setattr(edited.entries[0], field, value)
    with pytest.raises(FormatError):
        save_vault(vault_path, "pw", edited)

    assert vault_path.read_bytes() == before
    assert load_vault(vault_path, "pw") == sample_vault
    assert sorted(p.name for p in vault_path.parent.iterdir()) == ["vault.pvlt"]


@pytest.mark.parametrize("params", [
    KdfParams(time_cost=0, memory_cost=8, parallelism=1),
    KdfParams(time_cost=1, memory_cost=4, parallelism=1),
    KdfParams(time_cost=1, memory_cost=8, parallelism=0),
])
def test_out_of_bounds_params_rejected_before_write(vault_path, sample_vault, fast_params, params):
    save_vault(vault_path, "pw", sample_vault, fast_params)
    before = vault_path.read_bytes()

    with pytest.raises(ValueError) as exc:
        save_vault(vault_path, "pw", sample_vault, params)
    assert not isinstance(exc.value, FormatError)

    with pytest.raises(ValueError) as exc:
        change_master_password(vault_path, "pw", "new", params)
    assert not isinstance(exc.value, FormatError)

    assert vault_path.read_bytes() == before


# ── Concurrency ────────────────────────────────────────────────────────
def test_same_file_shares_one_lock(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert vault_utils._path_lock(tmp_path / "v.pvlt") is vault_utils._path_lock("v.pvlt")
    assert vault_utils._path_lock("./sub/../v.pvlt") is vault_utils._path_lock("v.pvlt")
    assert vault_utils._path_lock("w.pvlt") is not vault_utils._path_lock("v.pvlt")


def test_concurrent_saves_do_not_interleave(vault_path, fast_params):
    save_vault(vault_path, "pw", Vault(), fast_params)
    vaults = [Vault([Entry(f"Entry {n}", secret="s" * n)]) for n in range(8)]
    errors = []

    def worker(v):
        try:
            save_vault(vault_path, "pw", v)
        except Exception as e:  # pragma: no cover - reported below
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(v,)) for v in vaults]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert load_vault(vault_path, "pw") in vaults
    assert sorted(p.name for p in vault_path.parent.iterdir()) == ["vault.pvlt"]


def test_load_after_save_sees_new_content(vault_path, sample_vault, fast_params):
    save_vault(vault_path, "pw", Vault(), fast_params)
    assert len(load_vault(vault_path, "pw")) == 0
    save_vault(vault_path, "pw", sample_vault)
    assert load_vault(vault_path, "pw") == sample_vault


# ── Change master password ─────────────────────────────────────────────
def test_change_master_password(vault_path, sample_vault, fast_params):
    save_vault(vault_path, "old", sample_vault, fast_params)
    old_salt = read_header(vault_path).salt

    returned = change_master_password(vault_path, "old", "new", fast_params)

    assert returned == sample_vault
    assert read_header(vault_path).salt != old_salt
    assert load_vault(vault_path, "new") == sample_vault
    with pytest.raises(WrongPasswordOrCorrupt):
        load_vault(vault_path, "old")


def test_change_master_password_requires_current(vault_path, sample_vault, fast_params):
    save_vault(vault_path, "old", sample_vault, fast_params)
    before = vault_path.read_bytes()
    with pytest.raises(WrongPasswordOrCorrupt):
        change_master_password(vault_path, "guess", "new", fast_params)
    assert vault_path.read_bytes() == before


def test_change_master_password_rejects_empty(vault_path, sample_vault, fast_params):
    save_vault(vault_path, "old", sample_vault, fast_params)
    with pytest.raises(ValueError):
        change_master_password(vault_path, "old", "", fast_params)
    assert load_vault(vault_path, "old") == sample_vault
