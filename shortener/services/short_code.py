"""
Short Code Generation

Maps the link store's counter to a short code using bijective base-26
numeration over the lowercase alphabet:

    1 -> "a", 26 -> "z", 27 -> "aa", 702 -> "zz", 703 -> "aaa"

Why bijective base-26?
- Injective over positive integers: distinct counters never share a code
- Code length only grows as the counter grows
- Only [a-z] characters, so codes are URL-path-safe without escaping
"""

import string

ALPHABET = string.ascii_lowercase
BASE = len(ALPHABET)


def encode_base26(number: int) -> str:
    """
    Encode a positive integer as a lowercase short code.

    Args:
        number: Counter value, must be >= 1

    Returns:
        Short code made of [a-z]

    Example:
        encode_base26(1) -> "a"
        encode_base26(28) -> "ab"
    """
    if not isinstance(number, int) or isinstance(number, bool) or number < 1:
        raise ValueError(f"Short codes are generated from positive integers, got {number!r}")

    chars = []
    while number > 0:
        number, remainder = divmod(number - 1, BASE)
        chars.append(ALPHABET[remainder])

    return ''.join(reversed(chars))


def decode_base26(short_code: str) -> int:
    """
    Decode a short code back to the counter value it was generated from.

    Args:
        short_code: Code made of [a-z]

    Returns:
        The counter value

    Raises:
        ValueError: If the code is empty or contains other characters
    """
    if not short_code:
        raise ValueError("Short code is empty")

    number = 0
    for char in short_code:
        index = ALPHABET.find(char)
        if index < 0:
            raise ValueError(f"Invalid short code character {char!r} in {short_code!r}")
        number = number * BASE + index + 1
    return number
