import math
import string
import hashlib
import logging
from collections import defaultdict

from zxcvbn import zxcvbn

from passvault.config.config_vault import *
from passvault.utils.Entry import Vault

logger = logging.getLogger(__name__)

# Size of each character class when it appears in a password.
# Anything that is not a letter or digit counts as a symbol.
_CLASS_SIZES = (
    (frozenset(string.ascii_lowercase), 26),
    (frozenset(string.ascii_uppercase), 26),
    (frozenset(string.digits), 10),
)
_SYMBOL_CLASS_SIZE = len(string.punctuation) + 1  # printable symbols + space


def alphabet_size(password: str) -> int:
    """
    Size of the alphabet implied by the character classes present.

    A password containing only lowercase letters and digits has an
    alphabet of 36, one that adds a symbol grows to 69, and so on.
    """
    size = 0
    remaining = set(password)
    for chars, class_size in _CLASS_SIZES:
        if remaining & chars:
            size += class_size
            remaining -= chars
    if remaining:
        size += _SYMBOL_CLASS_SIZE
    return size


def entropy_bits(password: str) -> float:
    """
    Naive brute-force entropy estimate: length * log2(alphabet size).

    Returns:
        Estimated bits, 0.0 for an empty password.
    """
    if not password:
        return 0.0
    return len(password) * math.log2(alphabet_size(password))


def is_repetition(password: str) -> bool:
    """True for a single character repeated, e.g. "aaaa"."""
    return len(password) >= 2 and len(set(password)) == 1


def is_sequence(password: str) -> bool:
    """
    True for a run of consecutive code points in either direction.

    "1234", "abcd" and "dcba" are sequences. Shorter than
    MIN_SEQUENCE_LEN never counts.
    """
    if len(password) < MIN_SEQUENCE_LEN:
        return False
    steps = {ord(b) - ord(a) for a, b in zip(password, password[1:])}
    return steps == {1} or steps == {-1}


def bits_to_score(bits: float) -> int:
    """Map an entropy estimate to a 0-4 bucket using STRENGTH_THRESHOLDS."""
    for score, limit in enumerate(STRENGTH_THRESHOLDS):
        if bits < limit:
            return score
    return len(STRENGTH_THRESHOLDS)


def check_password_strength(password: str) -> int:
    """
    Estimate how hard a password is to guess.

    Entropy is computed from length and the character classes present,
    mapped to a score, then capped for patterns that brute-force
    estimates overrate:

        - a single repeated character, or a monotonic sequence: PATTERN_CAP
        - shorter than STRENGTH_MIN_LENGTH: SHORT_PASSWORD_CAP

    Deterministic, and for a fixed set of character classes a longer
    password never scores lower.

    Returns:
        Score 0 (terrible) to 4 (great). Empty passwords score 0.
    """
    if not password:
        return 0

    score = bits_to_score(entropy_bits(password))

    if is_repetition(password) or is_sequence(password):
        score = min(score, PATTERN_CAP)

    if len(password) < STRENGTH_MIN_LENGTH:
        score = min(score, SHORT_PASSWORD_CAP)

    return score


def strength_analysis(password: str) -> dict:
    """
    Offline password strength report for display.

    Combines the deterministic score with the zxcvbn estimate,
    https://pypi.org/project/zxcvbn/ (Python port of the Dropbox library),
    which also detects common passwords, names, dates and keyboard
    patterns and gives feedback.

    Returns:
        dict with keys "score", "zxcvbn_score", "warning", "suggestions"
        and "crack_times". Only "score" is meaningful for an empty password.
    """
    report = {
        "score": check_password_strength(password),
        "zxcvbn_score": 0,
        "warning": "",
        "suggestions": [],
        "crack_times": {},
    }
    if not password:
        return report

    # zxcvbn gets slow on long inputs
    results = zxcvbn(password[:ZXCVBN_MAX_LENGTH], max_length=ZXCVBN_MAX_LENGTH)

    report["zxcvbn_score"] = results["score"]
    report["warning"] = results["feedback"]["warning"]
    report["suggestions"] = list(results["feedback"]["suggestions"])
    report["crack_times"] = {
        category: str(display)
        for category, display in results["crack_times_display"].items()
    }
    return report


def severity(result_entry: dict) -> tuple:
    """
    Return a sortable severity key for an audit result.

    Weakest passwords first, then most reused. Untested values sort last.
    """
    strength = result_entry.get("strength")
    strength_val = strength if strength is not None else 99

    # Negate reuse, higher value is higher priority
    reused = result_entry.get("reused")
    reused_val = -(reused or 0)

    return (strength_val, reused_val)


def audit_vault(vault: Vault, *,
                test_strength: bool = True,
                test_reuse: bool = True,
                strength_threshold: int = AUDIT_STRENGTH_THRESHOLD) -> list[dict]:
    """
    Audits vault passwords for security issues.

    Entries without a secret are ignored.

    Args:
        vault: Decrypted vault.
        test_strength: Flag secrets scoring below strength_threshold.
        test_reuse: Flag secrets shared by more than one entry.
        strength_threshold: Minimum acceptable score.

    Returns:
        list[dict] sorted by severity, one per entry with an issue:
            - "index" (int): position in vault.entries
            - "title" (str)
            - "username" (str)
            - "strength" (int | None): score if weak, else None
            - "reused" (int | None): size of the reuse group, else None
    """
    pw_groups = defaultdict(list)
    results = {}

    for index, entry in enumerate(vault.entries):
        # Ignore entries with no password
        if not entry.secret:
            continue

        results[index] = {
            "index": index,
            "title": entry.title,
            "username": entry.username,
            "strength": None,
            "reused": None,
        }

        if test_strength:
            strength = check_password_strength(entry.secret)
            if strength < strength_threshold:
                results[index]["strength"] = strength

        if test_reuse:
            pw_hash = hashlib.sha256(entry.secret.encode(UTF8)).hexdigest()
            pw_groups[pw_hash].append(index)

    # Mark reused passwords if a group is larger than one
    for indexes in pw_groups.values():
        if len(indexes) > 1:
            for index in indexes:
                results[index]["reused"] = len(indexes)

    issues = [
        r for r in results.values()
        if r["strength"] is not None or r["reused"] is not None
    ]
    logger.debug(f"Audit found {len(issues)} issue(s) in {len(vault)} entries")
    return sorted(issues, key=severity)
