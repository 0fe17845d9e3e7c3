# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Generate short CSS-safe aliases from integer indexes."""

LEADING_ALPHABET: str = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
TRAILING_ALPHABET: str = LEADING_ALPHABET + "0123456789"


def generate(index: int) -> str:
    """Generate the alias for one allocation index.

    The first character is drawn from letters only, so every alias is a
    valid CSS identifier. Indexes enumerate ``a … Z``, then ``aa … Z9``,
    then ``aaa`` and so on, without gaps or repeats.

    Args:
        index: Zero-based allocation index.

    Returns:
        Alias string for the index.

    Raises:
        ValueError: If index is negative.
    """
    if index < 0:
        raise ValueError(f"Alias index must be non-negative: {index}")

    remaining = index
    trailing_length = 0
    block_size = len(LEADING_ALPHABET)
    while remaining >= block_size:
        remaining -= block_size
        trailing_length += 1
        block_size *= len(TRAILING_ALPHABET)

    chars: list[str] = []
    for _ in range(trailing_length):
        remaining, digit = divmod(remaining, len(TRAILING_ALPHABET))
        chars.append(TRAILING_ALPHABET[digit])
    chars.append(LEADING_ALPHABET[remaining])
    return "".join(reversed(chars))
