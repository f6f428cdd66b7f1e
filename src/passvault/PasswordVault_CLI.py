"""
PasswordVault - a secure offline password manager
"""
# ==============================================================
# Standard imports
# ==============================================================
import sys
import time
import logging
import getpass
from pathlib import Path

# ==============================================================
# Other imports
# ==============================================================
from passvault.config.config_vault import *
from passvault.config.logging_config import setup_logging, timestamp
from passvault.utils.Entry import Entry, Vault
from passvault.utils.errors import (
    FormatError, VaultIOError, VaultNotFound, WrongPasswordOrCorrupt
)
from passvault.utils.background import (
    load_vault_async, save_vault_async, change_master_password_async, shutdown
)
from passvault.utils.password_generator import generate_passphrase, random_password
from passvault.utils.password_utils import audit_vault, strength_analysis
from passvault.utils.user_input import ask_password, ask_policy, get_int, get_note_from_user, get_yes_no

logger = logging.getLogger(__name__)

MAX_UNLOCK_ATTEMPTS = 3

# ==============================================================
# Functions
# ==============================================================

def wait_for(future, message: str):
    """Show a message while a background operation runs, then return its result."""
    print(f" {message}...", flush=True)
    return future.result()


def unlock(path: Path) -> tuple[Vault, str]:
    """
    Unlock the vault at path, or create one if none exists.

    Returns:
        (vault, master password)

    Raises:
        SystemExit: If the user gives up, the passwords do not match,
            or the file is not a readable vault.
    """
    for _ in range(MAX_UNLOCK_ATTEMPTS):
        master_pw = getpass.getpass("Master password: ")
        try:
            vault = wait_for(load_vault_async(path, master_pw), "Unlocking")
            print("Vault unlocked successfully.")
            return vault, master_pw

        except VaultNotFound:
            print(f"\n No vault found at {path}.")
            if not get_yes_no(" Create a new vault?"):
                sys.exit(0)
            confirm_pw = getpass.getpass("Confirm master password: ")
            if master_pw != confirm_pw or not master_pw:
                print("Passwords do not match or are empty.")
                sys.exit(1)
            vault = Vault()
            wait_for(save_vault_async(path, master_pw, vault), "Creating vault")
            print("New vault created.")
            return vault, master_pw

        except WrongPasswordOrCorrupt:
            print("Wrong master password or vault is corrupted!")
            time.sleep(1)

        except (FormatError, VaultIOError) as e:
            print(f"Cannot open vault: {e}")
            sys.exit(1)

    sys.exit(1)


def save(path: Path, master_pw: str, vault: Vault) -> bool:
    try:
        wait_for(save_vault_async(path, master_pw, vault), "Saving")
    except (FormatError, VaultIOError) as e:
        print(f"Save failed, previous vault kept: {e}")
        return False
    return True


def display_entry(entry: Entry, show_pass: bool = False) -> None:
    """
    Display a vault entry in a human-readable format.

    Args:
        entry: Entry to display.
        show_pass: If True, reveal the plaintext password.
    """
    print(f"\n{SEP_LG}")
    print(f"Title        : {entry.title}")
    if entry.username:
        print(f"Username     : {entry.username}")

    if show_pass:
        print(f"Password     : {entry.secret}")
    elif entry.secret:
        print(f"Password     : {'*' * PASS_DEFAULTS['length']}")

    if entry.url:
        print(f"URL          : {entry.url}")
    print(f"Folder       : {entry.folder}")

    notes = entry.notes.strip()
    if notes:
        print("Notes")
        print(f"{SEP_SM}\n{notes}\n{SEP_SM}")
    print(SEP_LG)


def list_entries(vault: Vault, query: str = "") -> list[int]:
    """
    Print entries matching query, sorted by folder then title.

    Returns:
        Vault indexes in the order displayed.
    """
    if not vault.entries:
        print("Empty vault — no entries yet.")
        return []

    indexes = vault.search(query) if query else list(range(len(vault)))
    if not indexes:
        print("  No entries found.")
        return []

    indexes.sort(key=lambda i: (vault.entries[i].folder.lower(), vault.entries[i].title.lower()))

    print(SEP_SM)
    print(f" {'Entry':>5}   {'Folder':<{FOLDER_LEN}} {'Title':<{TITLE_LEN}} {'Username':<{USERNAME_LEN}}")
    print(SEP_SM)
    for n, i in enumerate(indexes):
        e = vault.entries[i]
        folder = _clip(e.folder, FOLDER_LEN)
        title = _clip(e.title, TITLE_LEN)
        username = _clip(e.username, USERNAME_LEN)
        # Print starting at 1 for ease of use
        print(f"{n+1:>6}   {folder:<{FOLDER_LEN}} {title:<{TITLE_LEN}} {username:<{USERNAME_LEN}}")
    return indexes


def _clip(text: str, width: int) -> str:
    return text if len(text) <= width else text[:width-3] + "..."


def edit_entry(entry: Entry) -> Entry | None:
    """
    Interactive editor for a single entry.

    Returns:
        The edited copy, or None if the user cancelled.
    """
    edited = Entry(**entry.to_dict())
    while True:
        display_entry(edited)
        print(
            f"\n--- Editing Menu --- \n"
            f"   1. Edit Title         5. Edit Notes \n"
            f"   2. Edit Username      6. Edit Folder \n"
            f"   3. Edit Password      7. Save Entry \n"
            f"   4. Edit URL           8. Cancel (discard changes)"
        )
        choice = input(" > ").strip()

        if choice == "1":
            new_title = input(f"New title [{edited.title}]: ").strip()
            if new_title:
                edited.title = new_title
        elif choice == "2":
            edited.username = input(f"New username [{edited.username}]: ").strip()
        elif choice == "3":
            new_pw = ask_password("New password")
            if new_pw is not None:
                edited.secret = new_pw
        elif choice == "4":
            edited.url = input(f"New URL [{edited.url}]: ").strip()
        elif choice == "5":
            edited.notes = get_note_from_user()
        elif choice == "6":
            edited.folder = input(f"New folder [{edited.folder}]: ").strip() or DEFAULT_FOLDER
        elif choice == "7":
            return edited
        elif choice == "8":
            print("All changes discarded.")
            return None
        else:
            print("   Invalid option — choose 1-8")


def entry_menu(path: Path, master_pw: str, vault: Vault, index: int) -> None:
    """View, edit or delete the entry at index. Changes are saved immediately."""
    while True:
        entry = vault.entries[index]
        display_entry(entry)
        print("\n--- Entry Menu ---\n"
              "(S) Show Password    (E) Edit Entry\n"
              "(A) Analyze Password (D) Delete Entry\n"
              "(Enter) Main Menu", end="\n > ")
        choice = input().strip().lower()

        if choice == "s":
            display_entry(entry, show_pass=True)
        elif choice == "a":
            show_strength(entry.secret)
        elif choice == "e":
            edited = edit_entry(entry)
            if edited is not None:
                vault.entries[index] = edited
                if save(path, master_pw, vault):
                    print("\nEntry updated and saved successfully!")
        elif choice == "d":
            confirm = input("\nDelete this entry permanently? (type 'del' to confirm): ")
            if confirm.strip().lower() == "del":
                vault.remove(index)
                if save(path, master_pw, vault):
                    print("\nEntry deleted.")
                return
        elif choice in {"", "q"}:
            return
        else:
            print("Invalid Choice")


def show_strength(password: str) -> None:
    report = strength_analysis(password)
    print(f"\nScore 0 (terrible) to 4 (great) : {report['score']}")
    if report["warning"]:
        print(f"Warning: {report['warning']}")
    if report["suggestions"]:
        print("Suggestions:")
        for suggestion in report["suggestions"]:
            print(f" {suggestion}")
    if report["crack_times"]:
        print("Crack times:")
        for category, display in report["crack_times"].items():
            print(f" {category} : {display}")


def print_audit(vault: Vault) -> None:
    results = audit_vault(vault)
    if not results:
        print("\n   Congratulations Zero Issues Found")
        return

    print("\n     Password Issues Found  (Sorted by severity)")
    print(SEP_LG)
    for r in results:
        line = f"{_clip(r['title'], TITLE_LEN):<{TITLE_LEN}} {_clip(r['username'], USERNAME_LEN):<{USERNAME_LEN}}"
        if r["strength"] is not None:
            line += f" Strength: {r['strength']}"
        if r["reused"] is not None:
            line += f" | Reused: {r['reused']}"
        print(line)


# ==============================================================
# MAIN
# ==============================================================
def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    path = Path(argv[0]) if argv else VAULT_FILE

    setup_logging()
    print("- Password Manager —\n")

    vault, master_pw = unlock(path)

    try:
        while True:
            print("\n--- Main Menu ---")
            print("\n 1) New Entry    2) Get Entry    3) Generate    4) Check Strength"
                  "\n 7) Quit         9) More Options")
            choice = input(" > ").strip()
            print()

            # == ADD ENTRY =====================================
            if choice == "1":
                title = input("Title (required): ").strip()
                if not title:
                    print("Title cannot be empty!")
                    continue
                entry = Entry(title)
                entry.username = input("Username: ").strip()
                entry.url = input("URL: ").strip()
                entry.folder = input(f"Folder [{DEFAULT_FOLDER}]: ").strip() or DEFAULT_FOLDER
                entry.notes = get_note_from_user()

                secret = ask_password("New password")
                if secret is None:
                    continue
                entry.secret = secret

                vault.add(entry)
                if save(path, master_pw, vault):
                    entry_menu(path, master_pw, vault, len(vault) - 1)

            # == GET ENTRY =======================================
            elif choice == "2":
                query = input("Search (Enter shows all): ").strip()
                indexes = list_entries(vault, query)
                if not indexes:
                    continue
                while True:
                    selection = get_int("\n Select entry: ", default=0)
                    # Quit back to main
                    if selection is None or selection == 0:
                        break
                    if selection > len(indexes):
                        print(f"   Invalid. Select 1 - {len(indexes)} or (q) to quit")
                        continue
                    entry_menu(path, master_pw, vault, indexes[selection - 1])
                    break

            # == GENERATE =======================================
            elif choice == "3":
                policy = ask_policy()
                if policy is not None:
                    try:
                        print(f"\n Generated: {random_password(policy)}")
                    except ValueError as e:
                        print(f"\n  {e}")

            # == STRENGTH =======================================
            elif choice == "4":
                show_strength(getpass.getpass("Password to check: "))

            # == QUIT ===============================================
            elif choice in {"7", "q"}:
                print("Goodbye!")
                return 0

            # == OPTIONS ===============================================
            elif choice == "9":
                print()
                print("  change_pass  - Changes master password and re-encrypts the vault.")
                print("  audit_vault  - Reports weak and reused passwords.")
                print("  passphrase   - Generates a passphrase.")

            # == CHANGE MASTER PW ===================================
            elif choice == "change_pass":
                old_pw = getpass.getpass("Current master password: ")
                new_pw = getpass.getpass("Enter New master password: ")
                confirm = getpass.getpass("Confirm new master password: ")
                if new_pw != confirm:
                    print("New passwords do not match!")
                    continue
                try:
                    vault = wait_for(
                        change_master_password_async(path, old_pw, new_pw),
                        "Re-encrypting vault",
                    )
                except WrongPasswordOrCorrupt:
                    print("Current password is incorrect.")
                    continue
                except ValueError as e:
                    print(e)
                    continue
                master_pw = new_pw
                print("Master password changed successfully!")

            # == AUDIT VAULT ===================================
            elif choice == "audit_vault":
                print_audit(vault)

            elif choice == "passphrase":
                print(f" Generated: {generate_passphrase()}")

            else:
                print("Invalid Choice")
    except (EOFError, KeyboardInterrupt):
        logger.info(f"[{timestamp()}] Session ended by user")
        print("\nGoodbye!")
        return 0
    finally:
        shutdown()


if __name__ == "__main__":
    sys.exit(main())
