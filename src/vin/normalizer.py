"""Text normalization for raw OCR output.

Recognized text is cleaned into a canonical candidate string before any
structural check:

1. Trim leading/trailing whitespace
2. Uppercase
3. Remove separator noise (``*``, space, ``-``, ``_``, ``:``)
4. Optionally map OCR-confusable letters to digits (O->0, I->1, Q->0)

Step 4 is a per-entry-point policy. The live camera path substitutes, the
still-image path does not and relies on the structural alphabet (which
excludes I, O and Q) to reject ambiguous reads.

Example:
    >>> normalize(" 1m8-gdm9a xkp042788 ")
    '1M8GDM9AXKP042788'
    >>> normalize("1M8GDM9AXKPO42788", substitute_confusables=True)
    '1M8GDM9AXKP042788'
"""

from .types import ConfusablePolicy

# Characters OCR commonly inserts between VIN groups
NOISE_CHARS = "* -_:"

CONFUSABLE_SUBSTITUTIONS = {"O": "0", "I": "1", "Q": "0"}

_NOISE_TABLE = str.maketrans("", "", NOISE_CHARS)
_CONFUSABLE_TABLE = str.maketrans(CONFUSABLE_SUBSTITUTIONS)

# (required total length, literal prefix) pairs, checked in order.
# The "1"/"0" spellings are what the labels look like after substitution.
KNOWN_PREFIXES = (
    (20, "VIN"),
    (20, "V1N"),
    (26, "CHASSISN0"),
    (26, "CHASSISNO"),
    (26, "CHASS1SN0"),
    (24, "CHASSIS"),
    (24, "CHASS1S"),
)


def normalize(raw: str, substitute_confusables: bool = False) -> str:
    """Clean a raw recognized string into a canonical candidate.

    Never raises; an empty result is rejected later by the length check.

    Args:
        raw: Raw OCR text.
        substitute_confusables: Map O->0, I->1, Q->0 after cleaning.

    Returns:
        Normalized string (uppercase, separators removed).
    """
    text = raw.strip().upper().translate(_NOISE_TABLE)
    if substitute_confusables:
        text = text.translate(_CONFUSABLE_TABLE)
    return text


def normalize_with_policy(raw: str, policy: ConfusablePolicy) -> str:
    """Normalize according to a named confusable-character policy."""
    return normalize(raw, substitute_confusables=policy == ConfusablePolicy.SUBSTITUTE)


def strip_known_prefix(text: str) -> str:
    """Remove a known non-VIN label prefix when the remainder is 17 characters.

    The removal is gated on the exact total length, so a 17-character VIN
    that happens to start with "VIN" is left untouched.

    Args:
        text: Normalized candidate text.

    Returns:
        Text without the label prefix, or the input unchanged.

    Example:
        >>> strip_known_prefix("VIN1M8GDM9AXKP042788")
        '1M8GDM9AXKP042788'
        >>> strip_known_prefix("VIN8GDM9AXKP042788")[:3]
        'VIN'
    """
    for length, prefix in KNOWN_PREFIXES:
        if len(text) == length and text.startswith(prefix):
            return text[len(prefix):]
    return text
