import string
import secrets
import logging
from dataclasses import dataclass

from passvault.config.config_vault import *
from passvault.utils.errors import InvalidPolicy
from passvault.utils.wordlist import WORDLIST

logger = logging.getLogger(__name__)

_sysrand = secrets.SystemRandom()


@dataclass
class GeneratorPolicy:
    """
    Character-class policy for random passwords.

    Lowercase letters are always a candidate class. Characters in
    exclude_chars are removed from every class.
    """
    length: int = PASS_DEFAULTS["length"]
    use_uppercase: bool = PASS_DEFAULTS["use_uppercase"]
    use_numbers: bool = PASS_DEFAULTS["use_numbers"]
    use_symbols: bool = PASS_DEFAULTS["use_symbols"]
    exclude_chars: str = ""

    def pools(self) -> list[str]:
        """
        Character pools of the enabled classes after exclusion.

        Classes emptied by exclude_chars are dropped.
        """
        classes = [string.ascii_lowercase]
        if self.use_uppercase:
            classes.append(string.ascii_uppercase)
        if self.use_numbers:
            classes.append(string.digits)
        if self.use_symbols:
            classes.append(PASS_DEFAULTS["symbols_pool"])

        exclude = set(self.exclude_chars)
        pools = []
        for chars in classes:
            pool = ''.join(c for c in chars if c not in exclude)
            if pool:
                pools.append(pool)
            else:
                logger.debug(f"Character class '{chars[:3]}...' fully excluded")
        return pools


def random_password(policy: GeneratorPolicy | None = None) -> str:
    """
    Generate a strong, cryptographically secure random password.

    One character is drawn from each available class, the remainder is
    filled from the union of all classes, and the result is shuffled so
    the guaranteed picks are not at predictable positions. Randomness is
    provided by the `secrets` module.

    Args:
        policy: Length and character classes to use. Defaults to
            PASS_DEFAULTS.

    Returns:
        A randomly generated password.

    Raises:
        InvalidPolicy: If length is below 1 or exclusion leaves no characters.

    Security Notes:
        - Uses cryptographically secure randomness.
        - Contains at least one character of every available class when
          length allows.
        - Limits excessive consecutive identical characters.
    """
    policy = policy or GeneratorPolicy()

    if not isinstance(policy.length, int) or policy.length < 1:
        raise InvalidPolicy(f"Password length must be at least 1, got {policy.length}")

    pools = policy.pools()
    if not pools:
        raise InvalidPolicy("No characters left to choose from after exclusions")

    all_chars = ''.join(pools)

    # Step 1: Guarantee one pick per class. When length is shorter than
    # the number of classes, a random subset of classes is guaranteed.
    guaranteed = list(pools)
    _sysrand.shuffle(guaranteed)
    password = [secrets.choice(pool) for pool in guaranteed[:policy.length]]

    # Step 2: Fill the rest randomly
    remaining = policy.length - len(password)
    password.extend(secrets.choice(all_chars) for _ in range(remaining))

    # Step 3: Shuffle all the characters
    _sysrand.shuffle(password)
    pw = ''.join(password)

    # Step 4: Ensure no excessive consecutive identical chars, reshuffle if needed.
    # A single distinct character cannot be rearranged into anything else.
    if len(set(password)) == 1:
        return pw

    max_shuffles = 1000
    shuffle_count = 0
    while max_consecutive_chars(pw) > PASS_DEFAULTS["max_consecutive"]:
        _sysrand.shuffle(password)
        pw = ''.join(password)
        shuffle_count += 1
        if shuffle_count >= max_shuffles:
            break

    return pw


def generate_password(length: int = PASS_DEFAULTS["length"],
                      use_uppercase: bool = PASS_DEFAULTS["use_uppercase"],
                      use_numbers: bool = PASS_DEFAULTS["use_numbers"],
                      use_symbols: bool = PASS_DEFAULTS["use_symbols"],
                      exclude_chars: str = "") -> str:
    """Flat-argument form of random_password for front-ends."""
    return random_password(GeneratorPolicy(
        length=length,
        use_uppercase=use_uppercase,
        use_numbers=use_numbers,
        use_symbols=use_symbols,
        exclude_chars=exclude_chars,
    ))


def generate_passphrase(word_count: int = PASSPHRASE_DEFAULTS["word_count"],
                        separator: str = PASSPHRASE_DEFAULTS["separator"]) -> str:
    """
    Generate a diceware-style passphrase from the built-in word list.

    Raises:
        InvalidPolicy: If word_count is below 1.
    """
    if not isinstance(word_count, int) or word_count < 1:
        raise InvalidPolicy(f"Word count must be at least 1, got {word_count}")
    return separator.join(secrets.choice(WORDLIST) for _ in range(word_count))


def max_consecutive_chars(pw: str) -> int:
    """
    Determine the longest run of identical consecutive characters.

    Args:
        pw: Password string to analyze.

    Returns:
        Length of the longest sequence of identical consecutive characters.
    """
    if not pw:
        return 0

    max_run = 1
    current_run = 1

    for a, b in zip(pw, pw[1:]):
        if a == b:
            current_run += 1
            if current_run > max_run:
                max_run = current_run
        else:
            current_run = 1

    return max_run
