"""
solc exceptions.

This module defines the exception hierarchy for the binding:

    SolcError (base)
    ├── InvalidInputError - Text cannot cross the boundary (embedded NUL)
    ├── LibraryNotFoundError - Native libsolc could not be located or loaded
    ├── StateError - Binding used in an invalid state
    │   ├── PoisonedLockError - A prior native call terminated abnormally
    │   └── ReentrantCallError - Compile invoked from inside a read callback
    └── CallbackError - The read callback raised instead of returning

Compiler diagnostics (syntax errors, missing imports, type errors) are NOT
exceptions. They are returned inside the output JSON ``errors`` array.

Usage:
    try:
        output = solc.compile(input_json)
    except solc.InvalidInputError:
        print("Input contains a NUL byte")
    except solc.SolcError as e:
        print(f"Error {e.code}: {e}")
        print(f"Details: {e.details}")
"""

from typing import Any

__all__ = [
    # Base
    "SolcError",
    # Input
    "InvalidInputError",
    # Loading
    "LibraryNotFoundError",
    # State
    "StateError",
    "PoisonedLockError",
    "ReentrantCallError",
    # Callback
    "CallbackError",
]


class SolcError(Exception):
    """
    Base exception for all binding errors.

    Attributes
    ----------
    message : str
        Human-readable error description.
    code : str
        Stable, string-based error code (e.g., "INVALID_INPUT").
        Use this for programmatic error handling.
    details : dict[str, Any]
        Structured context (e.g., {"position": 12}).

    Example
    -------
    >>> try:
    ...     solc.compile('{"sources": "\\x00"}')
    ... except solc.SolcError as e:
    ...     print(f"Error code: {e.code}")
    Error code: INVALID_INPUT
    """

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.args[0]!r}, code={self.code!r})"


# =============================================================================
# Input Errors
# =============================================================================


class InvalidInputError(SolcError, ValueError):
    """
    Text that cannot be represented as a NUL-terminated native string.

    Raised before any native call when the compile input (or content returned
    by a read callback) contains an embedded NUL byte. Not retried; the caller
    can recover by supplying different input.
    """

    def __init__(
        self,
        message: str,
        code: str = "INVALID_INPUT",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


# =============================================================================
# Loading Errors
# =============================================================================


class LibraryNotFoundError(SolcError, OSError):
    """
    The native compiler library could not be located or loaded.

    Set ``SOLC_LIB_PATH`` to the full path of the shared library, or
    ``SOLC_LIB_DIR`` to the directory containing it.
    """

    def __init__(
        self,
        message: str,
        code: str = "LIBRARY_NOT_FOUND",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


# =============================================================================
# State Errors
# =============================================================================


class StateError(SolcError, RuntimeError):
    """
    Binding used in an invalid state.

    Raised for lifecycle violations such as destroying a callback context
    twice.
    """

    def __init__(
        self,
        message: str,
        code: str = "INVALID_STATE",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)


class PoisonedLockError(StateError):
    """
    The invocation gate is poisoned.

    A previous critical section terminated abnormally while holding the gate,
    so the native library's global state can no longer be trusted. This is
    fatal for the rest of the process: restart it to compile again.
    """

    def __init__(
        self,
        message: str | None = None,
        code: str = "GATE_POISONED",
        details: dict[str, Any] | None = None,
    ):
        if message is None:
            message = (
                "Compiler state is unrecoverable: a previous call into the native "
                "library terminated abnormally."
            )
        super().__init__(message, code, details)


class ReentrantCallError(StateError):
    """
    A compile was started from the thread that already holds the gate.

    This happens when a read callback calls ``compile`` (or any compile-family
    function). The native library is not reentrant.
    """

    def __init__(
        self,
        message: str | None = None,
        code: str = "REENTRANT_CALL",
        details: dict[str, Any] | None = None,
    ):
        if message is None:
            message = "Cannot compile from inside a read callback"
        super().__init__(message, code, details)


# =============================================================================
# Callback Errors
# =============================================================================


class CallbackError(SolcError, RuntimeError):
    """
    The read callback raised an exception.

    Python exceptions cannot cross the C boundary. The trampoline reports a
    failure to the compiler, finishes the call, and this error is raised
    afterwards with the original exception as ``__cause__``.

    Returning ``ReadResult.failure(...)`` is the supported way to report a
    missing file; it becomes a compiler diagnostic, not an exception.
    """

    def __init__(
        self,
        message: str,
        code: str = "CALLBACK_FAILED",
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, code, details)
