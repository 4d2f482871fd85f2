# terrain_generator/hashing.py

"""
================================================================================
SEEDED HASHING
================================================================================
Deterministic string/number -> 32-bit integer hashing. Used to key the RNG and
to derive tile seed identifiers.

This hash has no cryptographic properties. It is a determinism tool only and
must not be used where adversarial seed collisions matter.
================================================================================
"""
import math

UINT32_MASK = 0xFFFFFFFF


def to_int32(value: int) -> int:
    """Wraps an arbitrary integer to a signed 32-bit value."""
    value &= UINT32_MASK
    return value - 0x100000000 if value & 0x80000000 else value


def to_uint32(value: int) -> int:
    """Wraps an arbitrary integer to an unsigned 32-bit value."""
    return value & UINT32_MASK


def _utf16_code_units(text: str):
    # Strings are hashed per UTF-16 code unit so that characters outside the
    # BMP contribute their surrogate pair, not a single code point.
    data = text.encode("utf-16-le")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def rolling_hash(text: str) -> int:
    """
    The raw rolling hash h = (h << 5) - h + c, truncated to a signed 32-bit
    integer after every character. Returns the signed result.
    """
    h = 0
    for code in _utf16_code_units(text):
        h = to_int32((h << 5) - h + code)
    return h


def seed_hash(value) -> int:
    """
    Hashes a seed to a non-zero unsigned 32-bit integer.

    Numbers are truncated towards zero and reinterpreted as uint32. Strings go
    through the rolling hash and take its absolute value. Zero is a fixed point
    of the RNG state and is replaced by 1, so an empty string hashes to 1.
    """
    if isinstance(value, bool):
        raise TypeError("Seed must be a string or a number, not bool.")
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return 1
        return to_uint32(int(value)) or 1
    if isinstance(value, str):
        return abs(rolling_hash(value)) or 1
    raise TypeError(f"Seed must be a string or a number, got {type(value).__name__}.")


def seed_text(value) -> str:
    """Formats a seed for embedding in derived strings. Integral floats print without a fraction."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
