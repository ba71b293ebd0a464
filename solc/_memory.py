"""
Memory bridge to the native allocator.

Justification: Every buffer that crosses the boundary lives in libsolc's own
allocator. Buffers the library returns are released with ``solidity_free``;
buffers the library will read or own (callback results) are allocated with
``solidity_alloc``. Python-owned memory is never handed to the library, and
native memory is never released by Python's memory management.

Callers must hold the invocation gate.
"""

from __future__ import annotations

import ctypes

from ._bindings import get_lib
from .exceptions import InvalidInputError, SolcError

__all__ = [
    "allocate",
    "copy_into",
    "release",
    "reset",
    "read_string",
    "store_string",
    "encode_text",
]


def allocate(size: int) -> int:
    """Allocate ``size`` bytes inside the native allocator.

    Returns the buffer address. Raises MemoryError if the library returns NULL.
    """
    address = get_lib().solidity_alloc(size)
    if not address:
        raise MemoryError(f"solidity_alloc({size}) returned NULL")
    return address


def copy_into(address: int, data: bytes) -> None:
    """Copy exactly ``len(data)`` bytes into a native buffer.

    The destination must be at least ``len(data)`` bytes. ``data`` includes
    the trailing NUL when the buffer holds a C string.
    """
    ctypes.memmove(address, data, len(data))


def release(address: int) -> None:
    """Return a library-owned buffer to the native allocator."""
    get_lib().solidity_free(address)


def reset() -> None:
    """Run the library's global reset.

    Frees everything the library allocated during the last call, including
    callback buffers it took ownership of. Runs after every top-level compile.
    """
    get_lib().solidity_reset()


def encode_text(text: str, what: str = "input") -> bytes:
    """Encode ``text`` as UTF-8, rejecting embedded NUL bytes."""
    data = text.encode("utf-8")
    position = data.find(b"\0")
    if position != -1:
        raise InvalidInputError(
            f"{what} contains a NUL byte at position {position}",
            details={"position": position, "what": what},
        )
    return data


def read_string(address: int | None) -> str:
    """Copy a NUL-terminated native string into a Python str."""
    if not address:
        raise SolcError("unexpected null pointer from native library", code="INTERNAL_ERROR")
    return ctypes.string_at(address).decode("utf-8", errors="replace")


def store_string(text: str) -> int:
    """Copy ``text`` into a fresh native buffer and return its address.

    Ownership of the buffer passes to the library; it is reclaimed at the next
    ``reset()``.
    """
    data = encode_text(text, what="callback result") + b"\0"
    address = allocate(len(data))
    copy_into(address, data)
    return address
