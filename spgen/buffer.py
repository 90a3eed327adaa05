"""
Secure buffer: fixed-length mutable storage for password characters.

The content lives in a single bytearray that is overwritten with zeros
before the buffer is released. Use it as a context manager so the wipe
happens on every exit path:

    with SecureBuffer(20) as buf:
        buf[0] = "A"
        ...
    # every byte of buf's storage is now zero
"""

from __future__ import annotations

import logging
from typing import Optional, Union

logger = logging.getLogger(__name__)


class SecureBuffer:
    """
    Owned, fixed-length, non-copyable byte buffer that is zeroed on release.
    """

    def __init__(self, length: int) -> None:
        if length < 0:
            raise ValueError("Buffer length must not be negative.")
        self._data: Optional[bytearray] = bytearray(length)
        self._length = length
        self._finalized = False

    # --- construction ---

    def __setitem__(self, index: int, value: Union[str, int]) -> None:
        data = self._require_data()
        if self._finalized:
            raise BufferError("SecureBuffer is finalized and read-only.")
        if isinstance(value, str):
            if len(value) != 1:
                raise ValueError("SecureBuffer holds one character per index.")
            value = ord(value)
        data[index] = value

    def __getitem__(self, index: int) -> str:
        return chr(self._require_data()[index])

    def write(self, offset: int, chunk: "SecureBuffer") -> None:
        """Copy another buffer's bytes in place starting at offset."""
        data = self._require_data()
        if self._finalized:
            raise BufferError("SecureBuffer is finalized and read-only.")
        source = chunk._require_data()
        data[offset : offset + len(source)] = source

    def shuffle(self, rng) -> None:
        """Permute the content in place (Fisher-Yates via rng.shuffle)."""
        data = self._require_data()
        if self._finalized:
            raise BufferError("SecureBuffer is finalized and read-only.")
        rng.shuffle(data)

    def finalize(self) -> None:
        self._require_data()
        self._finalized = True

    # --- consumption ---

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def wiped(self) -> bool:
        return self._data is None

    def view(self) -> memoryview:
        """Read-only view over the storage; no copy is made."""
        return memoryview(self._require_data()).toreadonly()

    def decode(self, encoding: str = "ascii") -> str:
        """
        Return the content as text.

        The returned str is an immutable copy that cannot be wiped, so call
        this only right before handing the text to an output stream.
        """
        return self._require_data().decode(encoding)

    # --- release ---

    def wipe(self) -> None:
        """Overwrite every byte with zero and drop the storage. Idempotent."""
        if self._data is None:
            return
        self._zero()
        logger.debug("Wiped secure buffer of %d bytes", self._length)

    def _zero(self) -> None:
        data = self._data
        if data is None:
            return
        for i in range(len(data)):
            data[i] = 0
        self._data = None

    def __enter__(self) -> "SecureBuffer":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.wipe()

    def __del__(self) -> None:
        # Last resort for buffers that never went through a with-block.
        if getattr(self, "_data", None) is not None:
            self._zero()

    # --- ownership ---

    def __copy__(self):
        raise TypeError("SecureBuffer cannot be copied.")

    def __deepcopy__(self, memo):
        raise TypeError("SecureBuffer cannot be copied.")

    def __reduce__(self):
        raise TypeError("SecureBuffer cannot be pickled.")

    def __len__(self) -> int:
        return self._length

    def __repr__(self) -> str:
        if self._data is None:
            return "SecureBuffer(wiped)"
        return f"SecureBuffer({self._length} chars)"

    __str__ = __repr__

    def _require_data(self) -> bytearray:
        if self._data is None:
            raise BufferError("SecureBuffer has already been wiped.")
        return self._data
