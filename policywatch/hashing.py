"""
Fast content hash.

A polynomial rolling hash (h = h * 31 + code point, wrapped to a signed
fixed-width integer) rendered in base 36. It is only an equality pre-check
before the diff pipeline runs; it is not a content address and carries no
security properties. At 32 bits, two different documents collide with
probability about 2**-32 per comparison; pass bits=64 to widen it.
"""

DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
SUPPORTED_WIDTHS = (32, 64)


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    out = []
    while value:
        value, rem = divmod(value, 36)
        out.append(DIGITS[rem])
    return sign + "".join(reversed(out))


def rolling_hash(content: str, bits: int = 32) -> int:
    """Signed `bits`-wide rolling hash of the string's code points."""
    if bits not in SUPPORTED_WIDTHS:
        raise ValueError(f"Unsupported hash width {bits}; use one of {SUPPORTED_WIDTHS}")
    mask = (1 << bits) - 1
    h = 0
    for ch in content:
        h = (h * 31 + ord(ch)) & mask
    if h >= 1 << (bits - 1):
        h -= 1 << bits
    return h


def content_hash(content: str, bits: int = 32) -> str:
    return _to_base36(rolling_hash(content, bits))
