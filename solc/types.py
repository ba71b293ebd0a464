"""
Value types exchanged with read callbacks.

A read callback receives ``(kind, data)`` from the compiler, for example
``("source", "d.sol")`` when an import is not part of the input, and answers
with a ``ReadResult``::

    def read(kind: str, data: str) -> ReadResult:
        if kind != "source":
            return ReadResult.failure(f"Unsupported callback kind: {kind}")
        return ReadResult.success(Path(data).read_text())

Returning a plain ``str`` is shorthand for ``ReadResult.success``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Union

__all__ = ["ReadResult", "ReadCallback"]


@dataclass(frozen=True)
class ReadResult:
    """Outcome of one read request: either file content or an error message."""

    content: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.content is None) == (self.error is None):
            raise ValueError("ReadResult requires exactly one of content or error")

    @classmethod
    def success(cls, content: str) -> ReadResult:
        return cls(content=content)

    @classmethod
    def failure(cls, message: str) -> ReadResult:
        return cls(error=message)

    @property
    def ok(self) -> bool:
        return self.error is None


ReadCallback = Callable[[str, str], Union[ReadResult, str]]
