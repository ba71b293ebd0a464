"""
Compiler façade over libsolc.

All compile-family calls share one sequence::

    encode input -> [wrap callback] -> acquire gate -> solidity_compile
    -> copy output -> solidity_free(output) -> solidity_reset -> release gate
    -> [destroy callback] -> return str

``solidity_reset`` runs on every path out of the native call, so no state
leaks into the next caller. Compiler diagnostics are part of the returned JSON
and never raised.

Example:
    >>> import json
    >>> import solc
    >>> output = solc.compile(json.dumps({
    ...     "language": "Solidity",
    ...     "sources": {"c.sol": {"content": "contract C {}"}},
    ...     "settings": {"outputSelection": {"*": {"*": ["evm.bytecode"]}}},
    ... }))
    >>> "contracts" in json.loads(output)
    True
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from . import _callback, _memory
from ._bindings import cast_to_void_p, get_lib
from ._gate import InvocationGate
from ._logging import scoped_logger
from .exceptions import CallbackError
from .types import ReadCallback

__all__ = ["version", "license", "compile", "compile_with_callback", "compile_standard"]

log = scoped_logger("compile")

# One gate for the whole process: libsolc state is global.
_gate = InvocationGate()


def version() -> str:
    """Return the compiler version string (e.g. ``0.8.26+commit.8a97fa7a``)."""
    raw = get_lib().solidity_version()
    return raw.decode("utf-8", errors="replace") if raw else ""


def license() -> str:
    """Return the complete license text of the native compiler."""
    raw = get_lib().solidity_license()
    return raw.decode("utf-8", errors="replace") if raw else ""


def compile(input_json: str) -> str:
    """Compile a Standard JSON input and return the Standard JSON output.

    Imports that are not part of ``sources`` are reported as errors in the
    output, since no read callback is available.

    Raises
    ------
    InvalidInputError
        If ``input_json`` contains a NUL byte.
    PoisonedLockError
        If an earlier native call terminated abnormally.
    LibraryNotFoundError
        If the native library cannot be loaded.
    """
    return _solidity_compile(input_json, None)


def compile_with_callback(input_json: str, read: ReadCallback) -> str:
    """Compile a Standard JSON input, resolving extra files through ``read``.

    ``read(kind, data)`` is called synchronously on the calling thread, while
    the compiler is locked, e.g. ``read("source", "d.sol")``. It returns
    ``ReadResult.success(content)`` (or the content as a ``str``) or
    ``ReadResult.failure(message)``; a failure surfaces as an error entry in
    the output JSON. The callback must not start another compile.

    Raises
    ------
    CallbackError
        If ``read`` raised. The original exception is the ``__cause__``.
    InvalidInputError
        If ``input_json`` contains a NUL byte.
    PoisonedLockError
        If an earlier native call terminated abnormally.
    TypeError
        If ``read`` is not callable.
    """
    if not callable(read):
        raise TypeError(f"read callback must be callable, not {type(read).__name__}")
    return _solidity_compile(input_json, read)


def compile_standard(
    standard_input: Mapping[str, Any],
    read: ReadCallback | None = None,
) -> dict[str, Any]:
    """Compile a Standard JSON input given as a mapping and decode the output."""
    input_json = json.dumps(standard_input)
    output = _solidity_compile(input_json, read)
    return json.loads(output)


def _solidity_compile(input_json: str, read: ReadCallback | None) -> str:
    request = _memory.encode_text(input_json)
    lib = get_lib()

    callback = None
    context = None
    if read is not None:
        trampoline, context = _callback.wrap(read)
        callback = cast_to_void_p(trampoline)

    handle = None
    try:
        with _gate:
            output = _invoke(lib, request, callback, context)
    finally:
        if context is not None:
            handle = _callback.unwrap_and_destroy(context)

    if handle is not None and handle.error is not None:
        error = handle.error
        if not isinstance(error, Exception):
            raise error
        raise CallbackError(
            f"read callback raised {type(error).__name__}: {error}",
            details={"calls": handle.calls},
        ) from error
    return output


def _invoke(lib: Any, request: bytes, callback: Any, context: Any) -> str:
    """Run one native compile. Caller holds the gate."""
    log.debug(
        "Invoking native compiler",
        extra={"input_bytes": len(request), "with_callback": callback is not None},
    )
    try:
        address = lib.solidity_compile(request, callback, context)
        try:
            return _memory.read_string(address)
        finally:
            if address:
                _memory.release(address)
    finally:
        _memory.reset()
