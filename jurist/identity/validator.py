"""National identification number (IIN) checksum validation."""

import re

_IIN_RE = re.compile(r"[0-9]{12}")

FIRST_PASS_WEIGHTS = (1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11)
SECOND_PASS_WEIGHTS = (3, 4, 5, 6, 7, 8, 9, 10, 11, 1, 2)


def _weighted_mod11(digits: list[int], weights: tuple[int, ...]) -> int:
    return sum(d * w for d, w in zip(digits, weights)) % 11


def is_valid_national_id(value: str) -> bool:
    """Check a 12-digit national ID against its mod-11 control digit.

    The first eleven digits are weighted 1..11 and summed modulo 11. A result
    of 10 is not a usable control digit, so the sum is recomputed with the
    shifted weights 3..11,1,2. The final value must equal the twelfth digit
    (a second-pass 10 can never match and the ID is rejected).

    Args:
        value: Candidate ID string

    Returns:
        True if the ID is well-formed and the checksum matches
    """
    if not isinstance(value, str) or not _IIN_RE.fullmatch(value):
        return False

    digits = [int(ch) for ch in value]
    check = _weighted_mod11(digits[:11], FIRST_PASS_WEIGHTS)
    if check == 10:
        check = _weighted_mod11(digits[:11], SECOND_PASS_WEIGHTS)

    return check == digits[11]
