"""Content fingerprints and identifier generation.

:func:`fingerprint` is a small, deterministic, **non-cryptographic** digest
used for change detection, section ids and snapshot dedup.  Collisions are
possible and tolerated.  Anything that needs a unique identifier (blocks,
documents, history entries) must use :func:`new_id` instead.
"""

from __future__ import annotations

import uuid

_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_int32(value: int) -> int:
    """Wrap *value* into the signed 32-bit range."""
    value &= 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def _utf16_units(text: str) -> list[int]:
    """Return the UTF-16 code units of *text* (surrogate pairs split)."""
    raw = text.encode("utf-16-le", "surrogatepass")
    return [int.from_bytes(raw[i:i + 2], "little") for i in range(0, len(raw), 2)]


def to_base36(value: int) -> str:
    """Render a non-negative integer in lowercase base-36."""
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36_DIGITS[rem])
    return "".join(reversed(digits))


def fingerprint(text: str) -> str:
    """Return a compact fingerprint of *text*.

    The accumulator is a signed 32-bit integer updated as
    ``h = (h << 5) - h + unit`` for every UTF-16 code unit of the input.
    The absolute value is rendered in base-36.

    Parameters
    ----------
    text:
        Any string, including the empty string.

    Returns
    -------
    str
        A short lowercase base-36 string.

    Examples
    --------
    >>> fingerprint("")
    '0'
    >>> fingerprint("a")
    '2p'
    """
    h = 0
    for unit in _utf16_units(text):
        h = _to_int32((h << 5) - h + unit)
    return to_base36(abs(h))


def new_id() -> str:
    """Return a fresh random identifier (UUID4, canonical string form)."""
    return str(uuid.uuid4())
