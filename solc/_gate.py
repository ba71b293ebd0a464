"""
Invocation gate: the single lock in front of the native library.

libsolc keeps process-global state (the compiler stack, the buffers it hands
out and reclaims on ``solidity_reset``) and offers no locking of its own, so
every compile-family call goes through one process-wide gate.

Usage::

    with gate:
        ...  # call into the native library

The gate is not reentrant. A thread that already holds it (a read callback
calling ``compile``) gets ``ReentrantCallError`` instead of a deadlock.

If an exception escapes the guarded block the gate is poisoned: the native
state may be inconsistent, so every later acquisition raises
``PoisonedLockError``.
"""

from __future__ import annotations

import threading
from types import TracebackType

from ._logging import scoped_logger
from .exceptions import PoisonedLockError, ReentrantCallError

__all__ = ["InvocationGate"]

log = scoped_logger("gate")


class InvocationGate:
    """Process-wide, non-reentrant, poisonable mutual exclusion."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._owner: int | None = None
        self._poisoned = False

    @property
    def is_poisoned(self) -> bool:
        return self._poisoned

    @property
    def is_held(self) -> bool:
        return self._owner is not None

    def acquire(self) -> InvocationGate:
        """Block until the gate is free, then take it.

        Raises
        ------
        ReentrantCallError
            If the calling thread already holds the gate.
        PoisonedLockError
            If a previous holder terminated abnormally.
        """
        me = threading.get_ident()
        if self._owner == me:
            raise ReentrantCallError()

        self._lock.acquire()
        if self._poisoned:
            self._lock.release()
            raise PoisonedLockError()
        self._owner = me
        return self

    def release(self, *, poison: bool = False) -> None:
        if poison and not self._poisoned:
            self._poisoned = True
            log.critical("Native call terminated abnormally; compiler gate poisoned")
        self._owner = None
        self._lock.release()

    def __enter__(self) -> InvocationGate:
        return self.acquire()

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release(poison=exc_type is not None)
