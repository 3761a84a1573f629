"""Vector codec — float vectors to and from little-endian float32 bytes."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence

_DTYPE = np.dtype("<f4")
_ITEM_SIZE = _DTYPE.itemsize


def encode_vector(vector: Sequence[float]) -> bytes:
    """Encode *vector* as ``4 * len(vector)`` little-endian float32 bytes.

    Components keep their order.  NaN and infinities are stored as-is.
    """
    return np.asarray(vector, dtype=_DTYPE).tobytes()


def decode_vector(data: bytes) -> list[float]:
    """Decode bytes written by :func:`encode_vector`.

    Trailing bytes that do not form a whole 4-byte component are dropped,
    so truncated data decodes to a shorter vector instead of failing.
    """
    usable = len(data) - len(data) % _ITEM_SIZE
    return np.frombuffer(data[:usable], dtype=_DTYPE).tolist()
