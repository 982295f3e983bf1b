"""ISO 3779 check digit validation and VIN structure validation.

This module implements the structural and checksum rules for 17-character
Vehicle Identification Numbers, and the composed ``validate`` entry point
used by the candidate merger.

References:
    - ISO 3779:2009 - Road vehicles -- Vehicle identification number (VIN)
    - 49 CFR Part 565 - VIN requirements (check digit algorithm)
"""

import re

from .normalizer import normalize
from .types import ValidationOutcome

VIN_LENGTH = 17
CHECK_DIGIT_INDEX = 8

# 33 symbols: A-Z without I, O, Q, plus digits
VIN_ALPHABET = frozenset("ABCDEFGHJKLMNPRSTUVWXYZ0123456789")

_VIN_PATTERN = re.compile(f"^[{''.join(sorted(VIN_ALPHABET))}]{{{VIN_LENGTH}}}$")

# ISO 3779 transliteration table (I, O, Q are not assigned)
TRANSLITERATION = {
    "A": 1, "B": 2, "C": 3, "D": 4, "E": 5, "F": 6, "G": 7, "H": 8,
    "J": 1, "K": 2, "L": 3, "M": 4, "N": 5, "P": 7, "R": 9,
    "S": 2, "T": 3, "U": 4, "V": 5, "W": 6, "X": 7, "Y": 8, "Z": 9,
    "0": 0, "1": 1, "2": 2, "3": 3, "4": 4,
    "5": 5, "6": 6, "7": 7, "8": 8, "9": 9,
}  # fmt: skip

# Position 9 (index 8) is the check digit itself and carries weight 0
POSITION_WEIGHTS = (8, 7, 6, 5, 4, 3, 2, 10, 0, 9, 8, 7, 6, 5, 4, 3, 2)


def is_valid_structure(text: str) -> bool:
    """Validate VIN structure.

    True iff the text is exactly 17 characters drawn from the VIN alphabet
    (digits and A-Z excluding I, O, Q). Anchored match, no substring search.

    Args:
        text: Candidate string (already normalized)

    Returns:
        True if structure is valid, False otherwise

    Example:
        >>> is_valid_structure("1M8GDM9AXKP042788")
        True
        >>> is_valid_structure("1M8GDM9AXKPO42788")  # Contains 'O'
        False
        >>> is_valid_structure("1M8GDM9AXKP04278")  # 16 chars
        False
    """
    return bool(_VIN_PATTERN.match(text))


def calculate_check_digit(vin: str) -> str:
    """Calculate the ISO 3779 check character for a 17-character VIN.

    Algorithm:
    1. Transliterate each character to a digit value
    2. Multiply by the positional weight (the check position weighs 0)
    3. Sum all products and take the remainder mod 11
    4. Remainder 10 is written as 'X', otherwise the decimal digit

    Args:
        vin: 17-character VIN (the character at index 8 is ignored)

    Returns:
        Expected check character ('0'-'9' or 'X')

    Raises:
        ValueError: If input is not exactly 17 characters
        ValueError: If input contains characters outside the table

    Example:
        >>> calculate_check_digit("1M8GDM9AXKP042788")
        'X'
    """
    if len(vin) != VIN_LENGTH:
        raise ValueError(f"Expected {VIN_LENGTH} characters, got {len(vin)}")

    try:
        total = sum(
            TRANSLITERATION[char] * POSITION_WEIGHTS[pos]
            for pos, char in enumerate(vin)
        )
    except KeyError as e:
        raise ValueError(f"Invalid character in VIN: {e.args[0]}") from e

    remainder = total % 11
    return "X" if remainder == 10 else str(remainder)


def validate_checksum(vin: str) -> bool:
    """Validate the check character at position 9.

    Fails closed: malformed input returns False instead of raising.

    Args:
        vin: 17-character VIN

    Returns:
        True if the check character matches, False otherwise

    Example:
        >>> validate_checksum("1M8GDM9AXKP042788")
        True
        >>> validate_checksum("1M8GDM9A1KP042788")
        False
    """
    try:
        expected = calculate_check_digit(vin)
    except ValueError:
        return False

    return vin[CHECK_DIGIT_INDEX] == expected


def validate(
    raw: str,
    verify_checksum: bool,
    substitute_confusables: bool = False,
) -> ValidationOutcome:
    """Normalize and validate a candidate string.

    Args:
        raw: Candidate text (raw or already normalized)
        verify_checksum: Require a passing ISO 3779 check digit
        substitute_confusables: Apply O->0, I->1, Q->0 during normalization

    Returns:
        VALID with the canonical VIN, INVALID_CHECKSUM when the structure is
        right but the check digit is not, INVALID otherwise.
    """
    text = normalize(raw, substitute_confusables=substitute_confusables)

    if not is_valid_structure(text):
        return ValidationOutcome.invalid()

    if not verify_checksum:
        return ValidationOutcome.valid(text)

    if validate_checksum(text):
        return ValidationOutcome.valid(text)

    return ValidationOutcome.invalid_checksum(text)


def is_vin_alphabet(text: str) -> bool:
    """Check that every character belongs to the 33-symbol VIN alphabet."""
    return all(char in VIN_ALPHABET for char in text)
