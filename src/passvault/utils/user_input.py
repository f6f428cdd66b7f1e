import re
import getpass

from passvault.config.config_vault import PASS_DEFAULTS
from passvault.utils.errors import InvalidPolicy
from passvault.utils.password_generator import GeneratorPolicy, random_password, generate_passphrase
from passvault.utils.password_utils import check_password_strength


def get_int(prompt: str, default: int | None = None) -> int | None:
    """
    Ask for a non-negative whole number until one is given.

    Enter accepts default when there is one; 'q' gives up.

    Returns:
        The number, the default, or None on 'q'.
    """
    while True:
        val = input(prompt).strip()
        if not val and default is not None:
            return default
        if val.lower() == "q":
            return None
        if re.fullmatch(r"[0-9]+", val):
            return int(val)
        print("   Invalid — numbers only  (q) to quit")


def get_yes_no(prompt: str) -> bool:
    return input(f"{prompt} (y/n): ").strip().lower() == "y"


def get_note_from_user(prompt: str = "Enter notes:") -> str:
    """
    Prompt the user to enter a multi-line note.

    Input continues until the user presses Enter three times consecutively.
    Pressing Enter once immediately will result in an empty note.

    Args:
        prompt: Text displayed to the user before input begins.

    Returns:
        The entered note with preserved line breaks. Returns an empty string
        if no note content is provided.
    """
    print(f"{prompt} (Enter 3x to end or 1x to leave empty)")
    note = ""
    consecutive_empty = 0

    while True:
        line = input()
        if line == "":
            consecutive_empty += 1
            if consecutive_empty >= 3 or (consecutive_empty == 1 and note == ""):
                break
        else:
            consecutive_empty = 0
            note += line + "\n"

    return note.strip()


def ask_policy() -> GeneratorPolicy | None:
    """Ask for a custom generator policy. None if the user quits."""
    length = get_int(
        f"\n  Length (Enter for default of {PASS_DEFAULTS['length']}): ",
        default=PASS_DEFAULTS["length"],
    )
    if length is None:
        return None
    if length < PASS_DEFAULTS["min_length"]:
        print(f"  Length too short, using {PASS_DEFAULTS['length']}.")
        length = PASS_DEFAULTS["length"]
    return GeneratorPolicy(
        length=length,
        use_uppercase=not input("  Uppercase? (Y/n): ").strip().lower() == "n",
        use_numbers=not input("  Numbers? (Y/n): ").strip().lower() == "n",
        use_symbols=not input("  Symbols? (Y/n): ").strip().lower() == "n",
        exclude_chars=input("  Characters to exclude (Enter for none): ").strip(),
    )


def ask_password(prompt: str = "Password") -> str | None:
    """
    Prompt the user to enter or generate a password.

    The user may manually enter a password, generate one with the
    default policy, customize the policy, or generate a passphrase.
    The prompt loops until a password is accepted or the user quits.

    Args:
        prompt: Prompt displayed to the user.

    Returns:
        The accepted password string, or None if the user chooses to quit.

    Side Effects:
        Prompts for user input.
        Prints generated passwords and their strength.
    """
    while True:
        print(f"\n{prompt}:")
        print(f"  • Type 'g' → generate strong {PASS_DEFAULTS['length']}-char password")
        print("  • Type 'c' → generate customizable random password")
        print("  • Type 'p' → generate passphrase")
        print("  • Type 'q' → quit")
        print("  • Press Enter to type your own")
        choice = input(" → ").strip().lower()

        if choice == "":
            pw = getpass.getpass("Enter password: ")
            print(f"  Strength (0-4): {check_password_strength(pw)}")
            return pw

        elif choice in {"g", "c", "p"}:
            try:
                if choice == "g":
                    pw = random_password()
                elif choice == "p":
                    pw = generate_passphrase()
                else:
                    policy = ask_policy()
                    if policy is None:
                        continue
                    pw = random_password(policy)
            except InvalidPolicy as e:
                print(f"\n  {e}")
                continue

            print(f" Generated: {pw}")
            print(f" Strength (0-4): {check_password_strength(pw)}")
            if not get_yes_no("\n Accept this password?"):
                continue
            return pw

        elif choice == "q":
            return None
        else:
            print("Invalid — press Enter, 'g', 'c' or 'p'")
