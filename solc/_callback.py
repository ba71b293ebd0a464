"""
Read-callback trampoline.

Justification: ``solidity_compile`` can only call back through a plain C
function pointer plus an opaque ``void*`` context. This module turns a Python
callable into that pair and back:

- ``wrap(callback)`` registers the callable under a fresh non-zero token and
  returns the shared ``ReadFileCallback`` trampoline plus the token as a
  ``c_void_p`` context.
- The trampoline maps the context back to the registered callable, decodes
  ``kind``/``data``, calls it, and copies the answer into native memory
  through the memory bridge, writing exactly one of ``o_contents``/``o_error``.
- ``unwrap_and_destroy(context)`` removes the registration once the native call
  has returned. It must run exactly once per ``wrap``.

Python exceptions cannot unwind through C. An exception raised by the callable
is stored on its handle, reported to the compiler as a read error, and raised
again by the caller once the native call has finished.

The trampoline is created once at import and never collected, so the function
pointer stays valid for every native call that may invoke it.
"""

from __future__ import annotations

import ctypes
import itertools
import threading
from typing import Any

from . import _memory
from ._logging import scoped_logger
from ._native import ReadFileCallback
from .exceptions import StateError
from .types import ReadCallback, ReadResult

__all__ = ["CallbackHandle", "wrap", "unwrap_and_destroy", "live_handles"]

log = scoped_logger("callback")


class CallbackHandle:
    """Registration of one Python read callback for one compile call."""

    __slots__ = ("token", "callback", "error", "calls")

    def __init__(self, token: int, callback: ReadCallback) -> None:
        self.token = token
        self.callback = callback
        # First exception raised by the callback, re-raised after the call
        self.error: BaseException | None = None
        self.calls = 0


_registry: dict[int, CallbackHandle] = {}
_registry_lock = threading.Lock()
_tokens = itertools.count(1)


def _to_token(context: Any) -> int | None:
    if isinstance(context, ctypes.c_void_p):
        return context.value
    return context


def _to_result(value: Any) -> ReadResult:
    if isinstance(value, ReadResult):
        return value
    if isinstance(value, str):
        return ReadResult.success(value)
    raise TypeError(
        f"read callback must return ReadResult or str, not {type(value).__name__}"
    )


def _exception_message(exc: BaseException) -> str:
    text = f"Read callback raised {type(exc).__name__}: {exc}"
    return text.replace("\0", "\\0")


def _dispatch(
    context: int | None,
    kind: bytes | None,
    data: bytes | None,
    out_content: Any,
    out_error: Any,
) -> None:
    with _registry_lock:
        handle = _registry.get(context) if context else None

    if handle is None:
        log.error("Read callback invoked with unknown context", extra={"context": context})
        out_error[0] = _memory.store_string("Internal error: unknown read callback context")
        return

    kind_text = (kind or b"").decode("utf-8", errors="replace")
    data_text = (data or b"").decode("utf-8", errors="replace")
    handle.calls += 1
    log.debug("Read requested", extra={"kind": kind_text, "path": data_text})

    try:
        result = _to_result(handle.callback(kind_text, data_text))
        if result.ok:
            out_content[0] = _memory.store_string(result.content)
        else:
            out_error[0] = _memory.store_string(result.error)
    except BaseException as e:
        if handle.error is None:
            handle.error = e
        log.error(
            "Read callback raised",
            extra={"kind": kind_text, "path": data_text},
            exc_info=True,
        )
        out_error[0] = _memory.store_string(_exception_message(e))


_TRAMPOLINE = ReadFileCallback(_dispatch)


def wrap(callback: ReadCallback) -> tuple[Any, ctypes.c_void_p]:
    """Register ``callback`` and return ``(trampoline, context)``."""
    if not callable(callback):
        raise TypeError(f"read callback must be callable, not {type(callback).__name__}")

    handle = CallbackHandle(next(_tokens), callback)
    with _registry_lock:
        _registry[handle.token] = handle
    return _TRAMPOLINE, ctypes.c_void_p(handle.token)


def unwrap_and_destroy(context: ctypes.c_void_p | int) -> CallbackHandle:
    """Remove the registration made by ``wrap`` and return it.

    Raises
    ------
    StateError
        If the context was already destroyed or never created by ``wrap``.
    """
    token = _to_token(context)
    with _registry_lock:
        handle = _registry.pop(token, None) if token else None
    if handle is None:
        raise StateError(
            "read callback context already destroyed or never created",
            details={"context": token},
        )
    return handle


def live_handles() -> int:
    """Number of registered callbacks not yet destroyed."""
    with _registry_lock:
        return len(_registry)
